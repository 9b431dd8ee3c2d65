"""Pydantic models for the market intelligence endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from .territories import CamelModel


class CensusDataRequest(CamelModel):
    lat: Optional[float] = Field(default=None, allow_inf_nan=False)
    lng: Optional[float] = Field(default=None, allow_inf_nan=False)
    radius: Optional[float] = Field(default=None, allow_inf_nan=False, description="Radius in miles.")


class DemographicsModel(CamelModel):
    total_population: int
    qualified_audience: int
    median_income: int
    median_home_value: int
    college_educated: int
    prime_age: int
    secondary_age: int
    qualified_percent: float
    area_sq_miles: float
    population_density: float
    zip_codes: list[str]


class CensusDataResponse(CamelModel):
    success: bool = True
    demographics: DemographicsModel
    zip_codes: int = Field(description="Number of ZIP codes aggregated.")
    zip_source: str
    data_quality: str = Field(description="census, approximate, partial or estimated.")
    simulated: bool
    timestamp: datetime


class ProviderVerificationRequest(CamelModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class ProviderVerificationResponse(CamelModel):
    success: bool = True
    is_provider: bool
    confidence: str
    details: dict[str, Any]
    verification_method: str
    simulated: bool
    data_quality: str
    timestamp: datetime
