"""Territory lock manager."""

from .errors import (
    AlreadyHeldError,
    ConflictError,
    InternalError,
    InvalidRequestError,
    NotFoundError,
    TerritoryError,
    ValidationError,
)
from .service import TerritoryService, get_territory_service

__all__ = [
    "TerritoryService",
    "get_territory_service",
    "TerritoryError",
    "ValidationError",
    "InvalidRequestError",
    "ConflictError",
    "AlreadyHeldError",
    "NotFoundError",
    "InternalError",
]
