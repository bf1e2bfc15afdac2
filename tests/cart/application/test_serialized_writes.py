"""Concurrent manager calls against a store that yields on every operation."""

import asyncio

import pytest

from cartkit.cart.events import CartCreated
from cartkit.config import CartConfiguration
from cartkit.fixtures import DEMO_PROFILE_ID, DEMO_STORE_ID, demo_items
from cartkit.manager import CartManager
from cartkit.store.memory import InMemoryCartStore


class YieldingCartStore(InMemoryCartStore):
    """Gives other tasks a chance to run before every read and write."""

    async def load_cart(self, cart_id):
        await asyncio.sleep(0)
        return await super().load_cart(cart_id)

    async def save_cart(self, cart):
        await asyncio.sleep(0)
        await super().save_cart(cart)

    async def fetch_carts(self, query, limit=None):
        await asyncio.sleep(0)
        return await super().fetch_carts(query, limit)


@pytest.fixture()
def yielding_store():
    return YieldingCartStore()


@pytest.fixture()
def concurrent_manager(yielding_store, analytics, clock):
    return CartManager(CartConfiguration(cart_store=yielding_store, analytics_sink=analytics, clock=clock))


class TestConcurrentWrites:
    def test_racing_set_active_cart_creates_one_cart(self, concurrent_manager, yielding_store, run):
        events = concurrent_manager.observe_events()

        async def race():
            return await asyncio.gather(
                concurrent_manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID),
                concurrent_manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID),
            )

        first, second = run(race())

        assert first.id == second.id
        assert len(yielding_store) == 1
        assert [type(event) for event in events.pending()].count(CartCreated) == 1

    def test_racing_add_item_keeps_both_items(self, concurrent_manager, run):
        cart = run(concurrent_manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))
        burger, fries = demo_items()

        async def race():
            return await asyncio.gather(
                concurrent_manager.add_item(cart.id, burger),
                concurrent_manager.add_item(cart.id, fries),
            )

        run(race())

        stored = run(concurrent_manager.get_cart(cart.id))
        assert sorted(item.product_id for item in stored.items) == ["burger_combo", "fries_large"]
        assert {item.id for item in stored.items} == {burger.id, fries.id}

    def test_add_then_update_in_one_gather_apply_in_order(self, concurrent_manager, run):
        cart = run(concurrent_manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))
        burger, _ = demo_items()

        async def race():
            return await asyncio.gather(
                concurrent_manager.add_item(cart.id, burger),
                concurrent_manager.update_item(cart.id, burger.with_quantity(2)),
                return_exceptions=True,
            )

        added, updated = run(race())

        assert not isinstance(added, Exception)
        assert not isinstance(updated, Exception)
        stored = run(concurrent_manager.get_cart(cart.id))
        assert [item.quantity for item in stored.items] == [2]
