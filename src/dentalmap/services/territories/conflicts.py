"""Geofencing checks between a candidate circle and existing locks/holds."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ...models.domain import Conflict, Hold, Territory, TerritoryRecord
from ..geospatial import haversine_km, miles_to_km


def overlap(lat: float, lng: float, radius: float, record: TerritoryRecord) -> Optional[Conflict]:
    """Return a conflict if the candidate circle overlaps ``record``."""

    distance = haversine_km(lat, lng, record.lat, record.lng)
    min_required = miles_to_km(radius + record.radius)
    if distance >= min_required:
        return None
    return Conflict(
        type="LOCKED" if isinstance(record, Territory) else "HELD",
        record_id=record.id,
        practice=record.practice,
        rep=record.rep,
        distance=distance,
        min_required=min_required,
        expires_at=record.expires_at if isinstance(record, Hold) else None,
    )


def find_conflict(
    lat: float,
    lng: float,
    radius: float,
    records: Iterable[TerritoryRecord],
) -> Optional[Conflict]:
    """Return the first overlapping record in iteration order, not the nearest."""

    for record in records:
        conflict = overlap(lat, lng, radius, record)
        if conflict is not None:
            return conflict
    return None


def check_conflict(
    lat: float,
    lng: float,
    radius: float,
    *,
    locks: Sequence[Territory],
    holds: Sequence[Hold],
    now: datetime,
    ignore: Optional[Callable[[TerritoryRecord], bool]] = None,
) -> Optional[Conflict]:
    """Scan active locks, then unexpired holds, for the first overlap."""

    candidates = [lock for lock in locks if lock.is_active(now)]
    candidates.extend(hold for hold in holds if hold.is_active(now))
    if ignore is not None:
        candidates = [record for record in candidates if not ignore(record)]
    return find_conflict(lat, lng, radius, candidates)
