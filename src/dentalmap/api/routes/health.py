"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.territories import TerritoryService, get_territory_service

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/store", status_code=status.HTTP_200_OK)
def health_store(service: TerritoryService = Depends(get_territory_service)) -> dict:
    """Report the territory store backend and how many records it holds."""
    try:
        locked, held = service.active_records()
    except Exception as exc:
        return {
            "backend": service.store.name,
            "healthy": False,
            "error": str(exc),
        }
    return {
        "backend": service.store.name,
        "healthy": True,
        "locked": len(locked),
        "held": len(held),
        "pendingExpirations": len(service.scheduler.pending()),
    }
