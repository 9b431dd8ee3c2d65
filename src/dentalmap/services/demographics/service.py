"""Territory demographics from the Census ACS, with labelled estimates when sources fail."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any, Optional

from ...config import settings
from ..territories.errors import ValidationError
from .aggregation import ZipDemographics, aggregate
from .clients import CensusClient, MarketDataError, ZipRadiusClient

logger = logging.getLogger(__name__)

ZIP_SOURCE_API = "zipcodeapi"
ZIP_SOURCE_METRO = "metro_estimate"

# (lat_min, lat_max, lng_min, lng_max), ZIPs nearest the core first.
METRO_ZIP_CODES: dict[str, tuple[tuple[float, float, float, float], tuple[str, ...]]] = {
    "miami": (
        (25.5, 26.0, -80.5, -80.0),
        ("33101", "33131", "33132", "33134", "33137", "33139", "33141", "33154", "33166", "33176"),
    ),
    "chicago": (
        (41.5, 42.0, -88.0, -87.0),
        ("60601", "60602", "60603", "60604", "60605", "60606", "60607", "60610", "60611", "60614"),
    ),
    "dallas": (
        (32.5, 33.0, -97.0, -96.5),
        ("75201", "75202", "75203", "75204", "75205", "75206", "75207", "75208", "75209", "75210"),
    ),
    "los_angeles": (
        (33.5, 34.5, -118.5, -117.5),
        ("90210", "90211", "90212", "90028", "90038", "90046", "90048", "90069", "90077"),
    ),
}
DEFAULT_METRO_ZIP_CODES = ("30309", "30326", "30305", "30324", "30327", "30342", "30329", "30319", "30328", "30350")

# Typical suburban ZCTA, used when the ACS has nothing for a ZIP.
TYPICAL_ZIP = {
    "total_population": 14_000,
    "median_income": 62_500,
    "median_home_value": 240_000,
    "bachelors": 1_600,
    "masters": 800,
    "professional": 150,
    "doctorate": 75,
    "age_25_to_29": 1_000,
    "age_30_to_34": 1_150,
    "age_35_to_39": 1_075,
    "age_40_to_44": 1_000,
    "age_45_to_49": 925,
    "age_50_to_54": 850,
}

DATA_QUALITY_CENSUS = "census"
DATA_QUALITY_APPROXIMATE = "approximate"
DATA_QUALITY_PARTIAL = "partial"
DATA_QUALITY_ESTIMATED = "estimated"


def metro_zip_codes(lat: float, lng: float, radius_miles: float) -> list[str]:
    """Approximate the ZIPs in a circle from a fixed metro table; Atlanta is the default."""

    candidates = DEFAULT_METRO_ZIP_CODES
    for (lat_min, lat_max, lng_min, lng_max), zip_codes in METRO_ZIP_CODES.values():
        if lat_min <= lat <= lat_max and lng_min <= lng <= lng_max:
            candidates = zip_codes
            break
    count = min(math.ceil(radius_miles / 2), len(candidates))
    return list(candidates[:count])


def typical_zip(zip_code: str) -> ZipDemographics:
    return ZipDemographics(zip_code=zip_code, simulated=True, **TYPICAL_ZIP)


def _validate(lat: Optional[float], lng: Optional[float], radius: Optional[float]) -> None:
    if lat is None or lng is None or radius is None:
        raise ValidationError("Missing required parameters: lat, lng, radius")
    if not all(math.isfinite(value) for value in (lat, lng, radius)):
        raise ValidationError("Parameters must be finite numbers")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise ValidationError("Coordinates out of range", lat=lat, lng=lng)
    if radius <= 0:
        raise ValidationError("Radius must be a positive number of miles", radius=radius)


class DemographicsService:
    def __init__(
        self,
        census: CensusClient | None = None,
        zip_lookup: ZipRadiusClient | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.census = census or CensusClient()
        self.zip_lookup = zip_lookup or ZipRadiusClient()
        self.max_workers = max_workers or settings.market_data_max_parallel_requests

    def zip_codes_in_radius(self, lat: float, lng: float, radius_miles: float) -> tuple[list[str], str]:
        if self.zip_lookup.configured:
            try:
                return self.zip_lookup.zip_codes_in_radius(lat, lng, radius_miles), ZIP_SOURCE_API
            except MarketDataError as exc:
                logger.warning(f"ZIP radius lookup failed, using metro estimate: {exc}")
        return metro_zip_codes(lat, lng, radius_miles), ZIP_SOURCE_METRO

    def zip_demographics(self, zip_code: str) -> ZipDemographics:
        try:
            return self.census.zip_demographics(zip_code)
        except MarketDataError as exc:
            logger.warning(f"Census data unavailable for ZIP {zip_code}, using typical figures: {exc}")
            return typical_zip(zip_code)

    def territory_demographics(
        self,
        lat: Optional[float],
        lng: Optional[float],
        radius: Optional[float],
    ) -> dict[str, Any]:
        _validate(lat, lng, radius)
        zip_codes, zip_source = self.zip_codes_in_radius(lat, lng, radius)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            records = list(executor.map(self.zip_demographics, zip_codes))

        estimated = sum(1 for record in records if record.simulated)
        if records and estimated == len(records):
            quality = DATA_QUALITY_ESTIMATED
        elif estimated:
            quality = DATA_QUALITY_PARTIAL
        elif zip_source == ZIP_SOURCE_METRO:
            quality = DATA_QUALITY_APPROXIMATE
        else:
            quality = DATA_QUALITY_CENSUS

        logger.info(
            f"Demographics for ({lat}, {lng}) r={radius}mi: {len(records)} ZIPs from {zip_source}, "
            f"{estimated} estimated"
        )
        return {
            "demographics": aggregate(records, radius),
            "zip_codes": len(records),
            "zip_source": zip_source,
            "data_quality": quality,
            "simulated": quality != DATA_QUALITY_CENSUS,
        }


@lru_cache()
def get_demographics_service() -> DemographicsService:
    return DemographicsService()
