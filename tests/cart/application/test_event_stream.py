"""Cart events as observed through the manager."""

from cartkit.cart.cart import CartStatus
from cartkit.cart.events import ActiveCartChanged, CartCreated, CartDeleted, CartUpdated
from cartkit.fixtures import DEMO_PROFILE_ID, DEMO_STORE_ID, demo_items


def scope_changed(cart_id, profile_id=None):
    return (
        ActiveCartChanged,
        {"store_id": DEMO_STORE_ID, "profile_id": profile_id, "session_id": None, "cart_id": cart_id},
    )


class TestManagerEventStream:
    def test_create_then_add_item(self, manager, run, described):
        events = manager.observe_events()

        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))
        run(manager.add_item(cart.id, demo_items()[0]))

        assert described(events.pending()) == [
            (CartCreated, {"cart_id": cart.id}),
            scope_changed(cart.id, DEMO_PROFILE_ID),
            (CartUpdated, {"cart_id": cart.id}),
        ]

    def test_every_subscriber_sees_the_same_sequence(self, manager, run, described):
        first = manager.observe_events()
        second = manager.observe_events()

        cart = run(manager.set_active_cart(DEMO_STORE_ID))
        run(manager.delete_cart(cart.id))

        expected = [
            (CartCreated, {"cart_id": cart.id}),
            scope_changed(cart.id),
            (CartDeleted, {"cart_id": cart.id}),
            scope_changed(None),
        ]
        first_events = first.pending()
        second_events = second.pending()
        assert described(first_events) == expected
        assert described(second_events) == expected
        assert all(a is b for a, b in zip(first_events, second_events, strict=True))

    def test_closed_subscriber_stops_receiving(self, manager, run, described):
        kept = manager.observe_events()
        dropped = manager.observe_events()
        dropped.close()

        cart = run(manager.set_active_cart(DEMO_STORE_ID))

        assert dropped.pending() == []
        assert described(kept.pending())[0] == (CartCreated, {"cart_id": cart.id})
        assert manager.events.subscriber_count == 1

    def test_late_subscriber_misses_earlier_events(self, manager, run, described):
        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))
        late = manager.observe_events()

        run(manager.update_status(cart.id, CartStatus.CANCELLED))

        assert described(late.pending()) == [
            (CartUpdated, {"cart_id": cart.id}),
            scope_changed(None, DEMO_PROFILE_ID),
        ]

    def test_async_iteration_ends_after_close(self, manager, run, described):
        async def scenario():
            received = []
            async with manager.observe_events() as events:
                cart = await manager.set_active_cart(DEMO_STORE_ID)
                received.append(await events.next())
                received.append(await events.next())
            async for event in events:
                received.append(event)
            return cart, received

        cart, received = run(scenario())

        assert described(received) == [
            (CartCreated, {"cart_id": cart.id}),
            scope_changed(cart.id),
        ]

    def test_analytics_mirror_events(self, manager, analytics, run):
        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))
        item = demo_items()[0]
        run(manager.add_item(cart.id, item))
        run(manager.remove_item(cart.id, item.id))
        run(manager.delete_cart(cart.id))

        assert analytics.created == [cart.id]
        assert analytics.updated == [cart.id, cart.id]
        assert analytics.deleted == [cart.id]
        assert analytics.added_items == [(item.id, cart.id)]
        assert analytics.removed_items == [(item.id, cart.id)]
        assert [change["cart_id"] for change in analytics.active_changes] == [cart.id, None]
