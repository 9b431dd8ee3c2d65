"""Storage abstraction for territory locks and holds."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from ..models.domain import Hold, Territory, TerritoryRecord, same_location


class TerritoryStoreError(RuntimeError):
    """Raised when the backing database cannot be read or written."""


Guard = Callable[[Sequence[Territory], Sequence[Hold]], None]


class TerritoryStore(ABC):
    """Contract for territory persistence backends.

    ``conditional_insert`` is the only write path for new records: the guard
    runs against a consistent snapshot and may raise to abort the insert.
    Implementations serialize guard-plus-write so two requests cannot both
    pass the conflict check before either writes.
    """

    name = "abstract"

    def __init__(self) -> None:
        self._write_lock = threading.RLock()

    @abstractmethod
    def list_locks(self) -> list[Territory]:
        """Return ACTIVE locks."""

    @abstractmethod
    def list_holds(self) -> list[Hold]:
        """Return holds still stored, including ones past ``expires_at``."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[TerritoryRecord]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, record: TerritoryRecord) -> TerritoryRecord:
        raise NotImplementedError

    @abstractmethod
    def remove_by_id(self, record_id: str) -> Optional[TerritoryRecord]:
        """Remove a record from the active set and return it, or None if absent."""

    def list_active(self) -> tuple[list[Territory], list[Hold]]:
        return self.list_locks(), self.list_holds()

    def remove_holds_at(self, lat: float, lng: float) -> list[Hold]:
        removed: list[Hold] = []
        with self._write_lock:
            for hold in self.list_holds():
                if same_location(hold.lat, hold.lng, lat, lng):
                    if self.remove_by_id(hold.id) is not None:
                        removed.append(hold)
        return removed

    def conditional_insert(self, record: TerritoryRecord, guard: Guard) -> TerritoryRecord:
        with self._write_lock:
            locks, holds = self.list_active()
            guard(locks, holds)
            return self.insert(record)


class InMemoryTerritoryStore(TerritoryStore):
    """Process-local store; records vanish on restart."""

    name = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._locks: dict[str, Territory] = {}
        self._holds: dict[str, Hold] = {}

    def list_locks(self) -> list[Territory]:
        with self._write_lock:
            return list(self._locks.values())

    def list_holds(self) -> list[Hold]:
        with self._write_lock:
            return list(self._holds.values())

    def get(self, record_id: str) -> Optional[TerritoryRecord]:
        with self._write_lock:
            return self._locks.get(record_id) or self._holds.get(record_id)

    def insert(self, record: TerritoryRecord) -> TerritoryRecord:
        with self._write_lock:
            if isinstance(record, Territory):
                self._locks[record.id] = record
            else:
                self._holds[record.id] = record
        return record

    def remove_by_id(self, record_id: str) -> Optional[TerritoryRecord]:
        with self._write_lock:
            return self._locks.pop(record_id, None) or self._holds.pop(record_id, None)

    def clear(self) -> None:
        with self._write_lock:
            self._locks.clear()
            self._holds.clear()
