"""Census demographics for territory circles."""

from .aggregation import ZipDemographics, aggregate
from .clients import CensusClient, MarketDataError, ZipRadiusClient
from .service import DemographicsService, get_demographics_service

__all__ = [
    "CensusClient",
    "DemographicsService",
    "MarketDataError",
    "ZipDemographics",
    "ZipRadiusClient",
    "aggregate",
    "get_demographics_service",
]
