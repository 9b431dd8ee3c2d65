"""API routes for territory locks and holds."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status

from ...config import settings
from ...schemas.territories import (
    HoldModel,
    HoldResponse,
    LockResponse,
    OverlayCollection,
    ReleaseRequest,
    ReleaseResponse,
    TerritoryListResponse,
    TerritoryModel,
    TerritoryRequest,
)
from ...services.export import territories_to_feature_collection
from ...services.territories import TerritoryError, TerritoryService, get_territory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/territories", tags=["territories"])

T = TypeVar("T")


def _run(operation: Callable[[], T]) -> T:
    try:
        return operation()
    except TerritoryError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    except Exception as exc:
        logger.exception(f"Territory operation failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Territory operation failed"},
        ) from exc


@router.get("", response_model=TerritoryListResponse, status_code=status.HTTP_200_OK)
def list_territories(service: TerritoryService = Depends(get_territory_service)) -> TerritoryListResponse:
    """Return active locks, unexpired holds and the display inventory count."""
    listing = _run(service.list_territories)
    return TerritoryListResponse(
        locked=[TerritoryModel.from_domain(territory) for territory in listing["locked"]],
        held=[HoldModel.from_domain(hold) for hold in listing["held"]],
        available_count=listing["available_count"],
        timestamp=listing["timestamp"],
    )


@router.post("", response_model=LockResponse, status_code=status.HTTP_201_CREATED)
def lock_territory(
    payload: TerritoryRequest,
    service: TerritoryService = Depends(get_territory_service),
) -> LockResponse:
    """Lock a territory permanently. Responds 409 when it overlaps a lock or hold."""
    territory = _run(
        lambda: service.lock_territory(
            lat=payload.lat,
            lng=payload.lng,
            radius=payload.radius,
            practice=payload.practice,
            rep=payload.rep,
            practice_address=payload.practice_address,
            rep_email=payload.rep_email,
        )
    )
    return LockResponse(
        territory=TerritoryModel.from_domain(territory),
        message=f"Territory locked successfully for {territory.practice}",
        lock_date=territory.lock_date,
    )


@router.put("", response_model=HoldResponse, status_code=status.HTTP_201_CREATED)
def hold_territory(
    payload: TerritoryRequest,
    service: TerritoryService = Depends(get_territory_service),
) -> HoldResponse:
    """Place a temporary hold that expires automatically."""
    hold = _run(
        lambda: service.hold_territory(
            lat=payload.lat,
            lng=payload.lng,
            radius=payload.radius,
            practice=payload.practice,
            rep=payload.rep,
            practice_address=payload.practice_address,
            rep_email=payload.rep_email,
        )
    )
    hours = service.hold_duration.total_seconds() / 3600
    return HoldResponse(
        hold=HoldModel.from_domain(hold),
        message=f"Territory held for {hours:g} hours",
        expires_at=hold.expires_at,
        time_remaining=hold.time_remaining(service.clock()),
    )


@router.delete("", response_model=ReleaseResponse, status_code=status.HTTP_200_OK)
def release_territory(
    payload: ReleaseRequest,
    service: TerritoryService = Depends(get_territory_service),
) -> ReleaseResponse:
    """Release a lock or a hold. Unknown ids are a successful no-op."""
    result = _run(
        lambda: service.release_territory(
            territory_id=payload.territory_id,
            hold_id=payload.hold_id,
            reason=payload.reason,
        )
    )
    territory = result.get("territory")
    return ReleaseResponse(
        message=result["message"],
        released=result["released"],
        territory=TerritoryModel.from_domain(territory) if territory else None,
    )


@router.get("/geojson", response_model=OverlayCollection, status_code=status.HTTP_200_OK)
def territory_overlays(service: TerritoryService = Depends(get_territory_service)) -> dict:
    """Territory circles as polygons for the map overlay layer."""
    locked, held = _run(service.active_records)
    return territories_to_feature_collection(
        locked,
        held,
        segments=settings.circle_segments,
        now=service.clock(),
    )
