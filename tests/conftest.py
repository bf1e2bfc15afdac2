import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture

from cartkit.analytics.fake_adapter import SpyCartAnalyticsSink
from cartkit.config import CartConfiguration
from cartkit.conflicts.fake_adapter import FakeCatalogConflictDetector
from cartkit.manager import CartManager
from cartkit.store import reset_store
from cartkit.store.memory import InMemoryCartStore


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def cartkit_bed():
    from cartkit.domain import cartkit

    bed = DomainFixture(cartkit)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(cartkit_bed):
    with cartkit_bed.domain_context():
        yield


class TickingClock:
    """Deterministic clock; every reading is one second after the previous one."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current

    def advance(self, **delta) -> None:
        self.current += timedelta(**delta)


@pytest.fixture()
def run():
    """Run coroutines of one test on a single event loop."""
    loop = asyncio.new_event_loop()
    yield loop.run_until_complete
    loop.close()


@pytest.fixture()
def clock():
    return TickingClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture()
def store():
    return InMemoryCartStore()


@pytest.fixture()
def analytics():
    return SpyCartAnalyticsSink()


@pytest.fixture()
def conflict_detector():
    return FakeCatalogConflictDetector()


@pytest.fixture()
def config(store, analytics, conflict_detector, clock):
    return CartConfiguration(
        cart_store=store,
        catalog_conflict_detector=conflict_detector,
        analytics_sink=analytics,
        clock=clock,
    )


@pytest.fixture()
def manager(config):
    return CartManager(config)


@pytest.fixture()
def described():
    """Events as (type, payload) pairs; protean events compare by message id."""

    def describe(events):
        return [(type(event), event.payload) for event in events]

    return describe


@pytest.fixture(autouse=True)
def run_around_tests():
    yield
    reset_store()
