"""Territory lock manager: locks, 48 hour holds, releases and listings."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Sequence

from ...config import settings
from ...models.domain import (
    STATUS_ACTIVE,
    STATUS_RELEASED,
    Conflict,
    Hold,
    Territory,
    TerritoryRecord,
    generate_record_id,
    same_location,
)
from ...persistence.store import InMemoryTerritoryStore, TerritoryStore, TerritoryStoreError
from ..notifications import LockNotifier
from .conflicts import check_conflict, find_conflict
from .errors import (
    AlreadyHeldError,
    ConflictError,
    InternalError,
    InvalidRequestError,
    ValidationError,
)
from .expiration import HoldExpiryScheduler

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("lat", "lng", "radius", "practice", "rep")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_request(
    lat: Optional[float],
    lng: Optional[float],
    radius: Optional[float],
    practice: Optional[str],
    rep: Optional[str],
) -> None:
    values = {"lat": lat, "lng": lng, "radius": radius, "practice": practice, "rep": rep}
    missing = [name for name in REQUIRED_FIELDS if values[name] is None or values[name] == ""]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(REQUIRED_FIELDS)}",
            missing=missing,
        )
    # Non-finite values stay out of the error detail.
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValidationError("Coordinates must be finite numbers")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
        raise ValidationError("Coordinates out of range", lat=lat, lng=lng)
    if not math.isfinite(radius):
        raise ValidationError("Radius must be a finite number of miles")
    if radius <= 0:
        raise ValidationError("Radius must be a positive number of miles", radius=radius)


class TerritoryService:
    def __init__(
        self,
        store: TerritoryStore,
        notifier: LockNotifier | None = None,
        clock: Callable[[], datetime] = utcnow,
        hold_duration: timedelta | None = None,
        capacity: int | None = None,
        scheduler: HoldExpiryScheduler | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.hold_duration = hold_duration or timedelta(hours=settings.hold_duration_hours)
        self.capacity = capacity if capacity is not None else settings.territory_capacity
        self.scheduler = scheduler or HoldExpiryScheduler(on_expire=self.expire_hold, clock=clock)

    # Queries

    def active_records(self) -> tuple[list[Territory], list[Hold]]:
        now = self.clock()
        locks, holds = self._load()
        return (
            [lock for lock in locks if lock.is_active(now)],
            [hold for hold in holds if hold.is_active(now)],
        )

    def check_conflict(self, lat: float, lng: float, radius: float) -> Optional[Conflict]:
        locks, holds = self._load()
        return check_conflict(lat, lng, radius, locks=locks, holds=holds, now=self.clock())

    def list_territories(self) -> dict[str, Any]:
        self.purge_expired_holds()
        locked, held = self.active_records()
        return {
            "locked": locked,
            "held": held,
            "available_count": max(1, self.capacity - len(locked)),
            "timestamp": self.clock(),
        }

    # Commands

    def lock_territory(
        self,
        lat: Optional[float],
        lng: Optional[float],
        radius: Optional[float],
        practice: Optional[str],
        rep: Optional[str],
        practice_address: Optional[str] = None,
        rep_email: Optional[str] = None,
    ) -> Territory:
        _validate_request(lat, lng, radius, practice, rep)
        now = self.clock()
        territory = Territory(
            id=generate_record_id("territory"),
            lat=lat,
            lng=lng,
            radius=radius,
            practice=practice,
            rep=rep,
            lock_date=now,
            practice_address=practice_address,
            rep_email=rep_email,
            status=STATUS_ACTIVE,
        )

        def supersedes(record: TerritoryRecord) -> bool:
            return isinstance(record, Hold) and same_location(record.lat, record.lng, lat, lng)

        def guard(locks: Sequence[Territory], holds: Sequence[Hold]) -> None:
            conflict = check_conflict(lat, lng, radius, locks=locks, holds=holds, now=now, ignore=supersedes)
            if conflict is not None:
                raise ConflictError(conflict)

        self._insert(territory, guard)
        logger.info(f"Territory locked: {territory.id} for {practice} ({rep})")

        for hold in self._call_store(self.store.remove_holds_at, lat, lng):
            self.scheduler.cancel(hold.id)
            logger.info(f"Hold {hold.id} superseded by lock {territory.id}")

        if self.notifier is not None:
            self.notifier.send_lock_confirmation(territory)
        return territory

    def hold_territory(
        self,
        lat: Optional[float],
        lng: Optional[float],
        radius: Optional[float],
        practice: Optional[str],
        rep: Optional[str],
        practice_address: Optional[str] = None,
        rep_email: Optional[str] = None,
    ) -> Hold:
        _validate_request(lat, lng, radius, practice, rep)
        now = self.clock()
        hold = Hold(
            id=generate_record_id("hold"),
            lat=lat,
            lng=lng,
            radius=radius,
            practice=practice,
            rep=rep,
            hold_date=now,
            expires_at=now + self.hold_duration,
            practice_address=practice_address,
            rep_email=rep_email,
            status=STATUS_ACTIVE,
        )

        def guard(locks: Sequence[Territory], holds: Sequence[Hold]) -> None:
            existing = find_conflict(lat, lng, radius, [h for h in holds if h.is_active(now)])
            if existing is not None:
                raise AlreadyHeldError(existing.record_id, existing.expires_at)
            conflict = check_conflict(lat, lng, radius, locks=locks, holds=holds, now=now)
            if conflict is not None:
                raise ConflictError(conflict)

        self._insert(hold, guard)
        self.scheduler.schedule(hold)
        logger.info(f"Territory held: {hold.id} for {practice} until {hold.expires_at.isoformat()}")
        return hold

    def release_territory(
        self,
        territory_id: Optional[str] = None,
        hold_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> dict[str, Any]:
        if bool(territory_id) == bool(hold_id):
            raise InvalidRequestError("Must specify exactly one of territoryId or holdId")

        if territory_id:
            record = None
            if isinstance(self._call_store(self.store.get, territory_id), Territory):
                record = self._call_store(self.store.remove_by_id, territory_id)
            if isinstance(record, Territory):
                record.status = STATUS_RELEASED
                record.released_at = self.clock()
                logger.info(f"Territory lock released: {territory_id} ({reason or 'no reason given'})")
            else:
                logger.info(f"Release of unknown territory {territory_id} ignored")
            return {
                "message": "Territory lock released",
                "released": isinstance(record, Territory),
                "territory": record if isinstance(record, Territory) else None,
            }

        self.scheduler.cancel(hold_id)
        hold = self._call_store(self.store.get, hold_id)
        if isinstance(hold, Hold) and not hold.is_active(self.clock()):
            # Already lapsed; the release only purges what the timer missed.
            self.expire_hold(hold_id)
            return {"message": "Territory hold released", "released": False}
        released = self._remove_hold(hold_id)
        if released:
            logger.info(f"Hold released: {hold_id}")
        return {"message": "Territory hold released", "released": released}

    def expire_hold(self, hold_id: str) -> bool:
        removed = self._remove_hold(hold_id)
        if removed:
            logger.info(f"Hold expired automatically: {hold_id}")
        return removed

    def purge_expired_holds(self) -> list[str]:
        now = self.clock()
        _, holds = self._load()
        expired = [hold.id for hold in holds if not hold.is_active(now)]
        for hold_id in expired:
            self.scheduler.cancel(hold_id)
            self.expire_hold(hold_id)
        return expired

    def recover_hold_expirations(self) -> int:
        """Rebuild expiry timers from stored holds; run once at startup."""

        _, holds = self._load()
        rescheduled = self.scheduler.recover(holds)
        logger.info(f"Recovered {rescheduled} hold expiration timer(s)")
        return rescheduled

    def shutdown(self) -> None:
        self.scheduler.cancel_all()
        if self.notifier is not None:
            self.notifier.shutdown(wait=False)

    # Internals

    def _remove_hold(self, hold_id: str) -> bool:
        if not isinstance(self._call_store(self.store.get, hold_id), Hold):
            return False
        return self._call_store(self.store.remove_by_id, hold_id) is not None

    def _insert(self, record: TerritoryRecord, guard) -> None:
        self._call_store(self.store.conditional_insert, record, guard)

    def _load(self) -> tuple[list[Territory], list[Hold]]:
        return self._call_store(self.store.list_active)

    @staticmethod
    def _call_store(method, *args):
        try:
            return method(*args)
        except TerritoryStoreError as exc:
            logger.error(f"Territory store failure: {exc}")
            raise InternalError() from exc


def build_store() -> TerritoryStore:
    """Supabase when credentials are configured, otherwise a process-local store."""

    if settings.supabase_configured:
        from ...persistence.database import SupabaseTerritoryStore

        try:
            return SupabaseTerritoryStore()
        except TerritoryStoreError as exc:
            logger.warning(f"Falling back to in-memory territory store: {exc}")
    return InMemoryTerritoryStore()


@lru_cache()
def get_territory_service() -> TerritoryService:
    return TerritoryService(store=build_store(), notifier=LockNotifier())
