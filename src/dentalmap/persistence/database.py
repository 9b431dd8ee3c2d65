"""Supabase persistence for territory locks and holds."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import STATUS_ACTIVE, STATUS_RELEASED, Hold, Territory, TerritoryRecord
from ..services.geospatial import territory_circle
from .store import TerritoryStore, TerritoryStoreError

logger = logging.getLogger(__name__)

TERRITORIES_TABLE = "territories"
HOLDS_TABLE = "territory_holds"


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _geometry_wkt(record: TerritoryRecord) -> str:
    return territory_circle(record.lat, record.lng, record.radius, settings.circle_segments).wkt


def territory_to_row(territory: Territory) -> dict[str, Any]:
    return {
        "id": territory.id,
        "lat": territory.lat,
        "lng": territory.lng,
        "radius": territory.radius,
        "practice": territory.practice,
        "practice_address": territory.practice_address,
        "rep": territory.rep,
        "rep_email": territory.rep_email,
        "lock_date": territory.lock_date.isoformat(),
        "status": territory.status,
        "geometry_wkt": _geometry_wkt(territory),
    }


def hold_to_row(hold: Hold) -> dict[str, Any]:
    return {
        "id": hold.id,
        "lat": hold.lat,
        "lng": hold.lng,
        "radius": hold.radius,
        "practice": hold.practice,
        "practice_address": hold.practice_address,
        "rep": hold.rep,
        "rep_email": hold.rep_email,
        "hold_date": hold.hold_date.isoformat(),
        "expires_at": hold.expires_at.isoformat(),
        "status": hold.status,
        "geometry_wkt": _geometry_wkt(hold),
    }


def row_to_territory(row: dict[str, Any]) -> Territory:
    return Territory(
        id=row["id"],
        lat=float(row["lat"]),
        lng=float(row["lng"]),
        radius=float(row["radius"]),
        practice=row["practice"],
        rep=row["rep"],
        lock_date=_parse_timestamp(row["lock_date"]),
        practice_address=row.get("practice_address"),
        rep_email=row.get("rep_email"),
        status=row.get("status") or STATUS_ACTIVE,
        released_at=_parse_timestamp(row.get("released_at")),
    )


def row_to_hold(row: dict[str, Any]) -> Hold:
    return Hold(
        id=row["id"],
        lat=float(row["lat"]),
        lng=float(row["lng"]),
        radius=float(row["radius"]),
        practice=row["practice"],
        rep=row["rep"],
        hold_date=_parse_timestamp(row["hold_date"]),
        expires_at=_parse_timestamp(row["expires_at"]),
        practice_address=row.get("practice_address"),
        rep_email=row.get("rep_email"),
        status=row.get("status") or STATUS_ACTIVE,
    )


class SupabaseTerritoryStore(TerritoryStore):
    """Stores locks in ``territories`` and holds in ``territory_holds``.

    Released locks stay in the table with status RELEASED; holds are deleted.
    Conditional inserts are serialized per process by the store lock.
    """

    name = "supabase"

    def __init__(self, client: Any = None) -> None:
        super().__init__()
        self._client = client if client is not None else get_supabase_client()
        if self._client is None:
            raise TerritoryStoreError("Supabase is not configured")

    def list_locks(self) -> list[Territory]:
        try:
            response = (
                self._client.table(TERRITORIES_TABLE)
                .select("*")
                .eq("status", STATUS_ACTIVE)
                .order("lock_date")
                .execute()
            )
        except Exception as exc:
            logger.warning(f"Failed to load territories from database: {exc}")
            raise TerritoryStoreError("Failed to load territories") from exc
        return [row_to_territory(row) for row in (response.data or [])]

    def list_holds(self) -> list[Hold]:
        try:
            response = self._client.table(HOLDS_TABLE).select("*").order("hold_date").execute()
        except Exception as exc:
            logger.warning(f"Failed to load territory holds from database: {exc}")
            raise TerritoryStoreError("Failed to load territory holds") from exc
        return [row_to_hold(row) for row in (response.data or [])]

    def get(self, record_id: str) -> Optional[TerritoryRecord]:
        table, converter = self._table_for(record_id)
        try:
            response = self._client.table(table).select("*").eq("id", record_id).limit(1).execute()
        except Exception as exc:
            logger.warning(f"Failed to load record {record_id}: {exc}")
            raise TerritoryStoreError("Failed to load record") from exc
        rows = response.data or []
        if not rows:
            return None
        record = converter(rows[0])
        if isinstance(record, Territory) and record.status != STATUS_ACTIVE:
            return None
        return record

    def insert(self, record: TerritoryRecord) -> TerritoryRecord:
        if isinstance(record, Territory):
            table, row = TERRITORIES_TABLE, territory_to_row(record)
        else:
            table, row = HOLDS_TABLE, hold_to_row(record)
        try:
            self._client.table(table).insert(row).execute()
        except Exception as exc:
            logger.error(f"Failed to save {record.id} to {table}: {exc}")
            raise TerritoryStoreError("Failed to save record") from exc
        logger.info(f"Saved {record.id} to {table}")
        return record

    def remove_by_id(self, record_id: str) -> Optional[TerritoryRecord]:
        with self._write_lock:
            record = self.get(record_id)
            if record is None:
                return None
            try:
                if isinstance(record, Territory):
                    released_at = datetime.now(timezone.utc)
                    self._client.table(TERRITORIES_TABLE).update(
                        {"status": STATUS_RELEASED, "released_at": released_at.isoformat()}
                    ).eq("id", record_id).execute()
                else:
                    self._client.table(HOLDS_TABLE).delete().eq("id", record_id).execute()
            except Exception as exc:
                logger.error(f"Failed to remove {record_id}: {exc}")
                raise TerritoryStoreError("Failed to remove record") from exc
        return record

    @staticmethod
    def _table_for(record_id: str):
        if record_id.startswith("hold_"):
            return HOLDS_TABLE, row_to_hold
        return TERRITORIES_TABLE, row_to_territory
