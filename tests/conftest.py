from datetime import datetime, timedelta, timezone

import pytest

from src.dentalmap.persistence.store import InMemoryTerritoryStore
from src.dentalmap.services.territories.expiration import HoldExpiryScheduler
from src.dentalmap.services.territories.service import TerritoryService


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeTimer:
    """Stands in for threading.Timer; fire() runs the callback synchronously."""

    def __init__(self, interval: float, callback) -> None:
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc))


@pytest.fixture
def timers() -> list[FakeTimer]:
    return []


@pytest.fixture
def store() -> InMemoryTerritoryStore:
    return InMemoryTerritoryStore()


@pytest.fixture
def service(store, clock, timers) -> TerritoryService:
    def timer_factory(interval, callback):
        timer = FakeTimer(interval, callback)
        timers.append(timer)
        return timer

    svc = TerritoryService(store=store, clock=clock, capacity=8, hold_duration=timedelta(hours=48))
    svc.scheduler = HoldExpiryScheduler(on_expire=svc.expire_hold, clock=clock, timer_factory=timer_factory)
    return svc
