"""API routes for territory demographics and provider verification."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.market import (
    CensusDataRequest,
    CensusDataResponse,
    DemographicsModel,
    ProviderVerificationRequest,
    ProviderVerificationResponse,
)
from ...services.demographics import DemographicsService, get_demographics_service
from ...services.providers import verify_provider
from ...services.territories import TerritoryError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["market"])


@router.post("/census-data", response_model=CensusDataResponse, status_code=status.HTTP_200_OK)
def census_data(
    payload: CensusDataRequest,
    service: DemographicsService = Depends(get_demographics_service),
) -> CensusDataResponse:
    """Population-weighted demographics for the ZIP codes inside a territory circle."""
    try:
        result = service.territory_demographics(payload.lat, payload.lng, payload.radius)
    except TerritoryError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    except Exception as exc:
        logger.exception(f"Demographics lookup failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to fetch demographic data"},
        ) from exc
    return CensusDataResponse(
        demographics=DemographicsModel(**result["demographics"]),
        zip_codes=result["zip_codes"],
        zip_source=result["zip_source"],
        data_quality=result["data_quality"],
        simulated=result["simulated"],
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/invisalign-directory", response_model=ProviderVerificationResponse, status_code=status.HTTP_200_OK)
def invisalign_directory(payload: ProviderVerificationRequest) -> ProviderVerificationResponse:
    """Score how likely a practice is to offer Invisalign."""
    try:
        result = verify_provider(payload.name, payload.address, payload.phone)
    except TerritoryError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    logger.info(f"Provider check for {payload.name}: {result['confidence']}")
    return ProviderVerificationResponse(**result, timestamp=datetime.now(timezone.utc))
