"""Error taxonomy for territory operations."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ...models.domain import Conflict


class TerritoryError(Exception):
    """Base error; routes translate ``status_code`` and ``detail`` to an HTTP response."""

    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    @property
    def detail(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(TerritoryError):
    status_code = 400


class InvalidRequestError(TerritoryError):
    status_code = 400


class NotFoundError(TerritoryError):
    status_code = 404


class ConflictError(TerritoryError):
    status_code = 409

    def __init__(self, conflict: Conflict) -> None:
        super().__init__("Territory conflict detected", conflict=conflict.to_dict())
        self.conflict = conflict


class AlreadyHeldError(TerritoryError):
    status_code = 409

    def __init__(self, hold_id: str, expires_at: datetime) -> None:
        super().__init__("Territory already on hold", holdId=hold_id, holdExpires=expires_at.isoformat())
        self.hold_id = hold_id
        self.expires_at = expires_at


class InternalError(TerritoryError):
    status_code = 500

    def __init__(self, message: str = "Territory operation failed") -> None:
        super().__init__(message)
