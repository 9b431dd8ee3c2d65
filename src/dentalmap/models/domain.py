"""Domain models for territory locks and holds."""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, Union

STATUS_ACTIVE = "ACTIVE"
STATUS_RELEASED = "RELEASED"

COORDINATE_PRECISION = 6


def generate_record_id(prefix: str) -> str:
    """Return ids shaped like ``territory_1718000000000_k3j9x0a1b``."""

    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


@dataclass(slots=True)
class Territory:
    """A permanently locked circular territory."""

    id: str
    lat: float
    lng: float
    radius: float
    practice: str
    rep: str
    lock_date: datetime
    practice_address: Optional[str] = None
    rep_email: Optional[str] = None
    status: str = STATUS_ACTIVE
    released_at: Optional[datetime] = None

    kind: Literal["lock"] = field(default="lock", init=False)

    @property
    def locked(self) -> bool:
        return self.status == STATUS_ACTIVE

    def is_active(self, now: datetime) -> bool:
        return self.status == STATUS_ACTIVE


@dataclass(slots=True)
class Hold:
    """A temporary reservation that lapses at ``expires_at``."""

    id: str
    lat: float
    lng: float
    radius: float
    practice: str
    rep: str
    hold_date: datetime
    expires_at: datetime
    practice_address: Optional[str] = None
    rep_email: Optional[str] = None
    status: str = STATUS_ACTIVE

    kind: Literal["hold"] = field(default="hold", init=False)

    @property
    def locked(self) -> bool:
        return False

    def is_active(self, now: datetime) -> bool:
        return self.status == STATUS_ACTIVE and self.expires_at > now

    def time_remaining(self, now: datetime) -> str:
        """Format the remaining hold time as ``HH:MM:SS``."""

        seconds = max(0, int((self.expires_at - now).total_seconds()))
        hours, remainder = divmod(seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


TerritoryRecord = Union[Territory, Hold]


@dataclass(slots=True)
class Conflict:
    """Describes the first existing record that overlaps a candidate circle."""

    type: Literal["LOCKED", "HELD"]
    record_id: str
    practice: str
    rep: str
    distance: float
    min_required: float
    expires_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "id": self.record_id,
            "practice": self.practice,
            "rep": self.rep,
            "distance": self.distance,
            "minRequired": self.min_required,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
        }


def same_location(lat1: float, lng1: float, lat2: float, lng2: float) -> bool:
    """True when two centers match once rounded to ~0.1 m precision."""

    return round(lat1, COORDINATE_PRECISION) == round(lat2, COORDINATE_PRECISION) and round(
        lng1, COORDINATE_PRECISION
    ) == round(lng2, COORDINATE_PRECISION)
