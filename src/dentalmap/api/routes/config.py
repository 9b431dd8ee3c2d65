"""Front-end configuration endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["config"])


@router.get("/config", status_code=status.HTTP_200_OK)
def frontend_config() -> dict:
    """Serve the Google Maps browser key so it never ships in static assets."""
    if not settings.google_maps_api_key:
        logger.error("Google Maps API key requested but DENTALMAP_GOOGLE_MAPS_API_KEY is not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Google Maps API key not configured"},
        )
    return {"success": True, "googleMapsApiKey": settings.google_maps_api_key}
