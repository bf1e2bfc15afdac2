"""Application tests for status changes and checkout validation."""

import pytest
from protean.exceptions import ValidationError

from cartkit.cart.cart import CartItem, CartStatus
from cartkit.cart.events import ActiveCartChanged, CartUpdated
from cartkit.config import CartConfiguration
from cartkit.exceptions import CartNotFoundError, InvalidStatusTransition
from cartkit.fixtures import DEMO_PROFILE_ID, DEMO_STORE_ID, guest_cart, usd
from cartkit.manager import CartManager
from cartkit.validation.fake_adapter import StubValidationEngine
from cartkit.validation.port import CartValidationResult, CustomValidationError


def _item():
    return CartItem(product_id="burger_combo", quantity=1, unit_price=usd("8.99"))


class TestUpdateStatus:
    def test_checkout_clears_active_tracking(self, manager, run, analytics, described):
        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))
        events = manager.observe_events()

        updated = run(manager.update_status(cart.id, CartStatus.CHECKED_OUT))

        assert updated.status == CartStatus.CHECKED_OUT
        assert described(events.pending()) == [
            (CartUpdated, {"cart_id": cart.id}),
            (
                ActiveCartChanged,
                {"store_id": DEMO_STORE_ID, "profile_id": DEMO_PROFILE_ID, "session_id": None, "cart_id": None},
            ),
        ]
        assert analytics.active_changes[-1]["cart_id"] is None
        assert run(manager.get_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID)) is None

    def test_after_archiving_a_new_active_cart_can_be_set(self, manager, run):
        cart = run(manager.set_active_cart(DEMO_STORE_ID))
        run(manager.update_status(cart.id, CartStatus.CANCELLED))

        replacement = run(manager.set_active_cart(DEMO_STORE_ID))

        assert replacement.id != cart.id

    def test_same_status_is_a_no_op(self, manager, run):
        cart = run(manager.set_active_cart(DEMO_STORE_ID))
        events = manager.observe_events()

        assert run(manager.update_status(cart.id, CartStatus.ACTIVE)) == cart
        assert events.pending() == []

    def test_checked_out_guest_cart_keeps_its_status_without_checks(self, manager, store, run):
        cart = guest_cart().evolve(status=CartStatus.CHECKED_OUT)
        run(store.save_cart(cart))
        events = manager.observe_events()

        unchanged = run(manager.update_status(cart.id, CartStatus.CHECKED_OUT))

        assert unchanged.status == CartStatus.CHECKED_OUT
        assert unchanged.updated_at == cart.updated_at
        assert events.pending() == []

    def test_archived_carts_are_terminal(self, manager, run):
        cart = run(manager.set_active_cart(DEMO_STORE_ID))
        run(manager.update_status(cart.id, CartStatus.EXPIRED))

        with pytest.raises(InvalidStatusTransition):
            run(manager.update_status(cart.id, CartStatus.ACTIVE))

    def test_guest_cart_cannot_check_out(self, manager, run):
        cart = run(manager.set_active_cart(DEMO_STORE_ID))
        with pytest.raises(ValidationError) as exc_info:
            run(manager.update_status(cart.id, CartStatus.CHECKED_OUT))
        assert "profile_id" in exc_info.value.messages
        assert run(manager.get_cart(cart.id)).status == CartStatus.ACTIVE

    def test_unknown_cart(self, manager, run):
        with pytest.raises(CartNotFoundError):
            run(manager.update_status("missing", CartStatus.CANCELLED))

    def test_failed_full_validation_blocks_checkout(self, store, analytics, clock, run):
        failure = CartValidationResult.invalid(CustomValidationError("Store is closed"))
        manager = CartManager(
            CartConfiguration(
                cart_store=store,
                validation_engine=StubValidationEngine({DEMO_STORE_ID: failure}),
                analytics_sink=analytics,
                clock=clock,
            )
        )
        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))

        with pytest.raises(ValidationError) as exc_info:
            run(manager.update_status(cart.id, CartStatus.CHECKED_OUT))

        assert exc_info.value.messages == {"cart": ["Store is closed"]}
        assert run(manager.get_cart(cart.id)).status == CartStatus.ACTIVE

    def test_cancelling_skips_full_validation(self, store, analytics, clock, run):
        engine = StubValidationEngine()
        manager = CartManager(
            CartConfiguration(cart_store=store, validation_engine=engine, analytics_sink=analytics, clock=clock)
        )
        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID))

        run(manager.update_status(cart.id, CartStatus.CANCELLED))

        assert engine.validated_cart_ids == []


class TestValidateBeforeCheckout:
    def test_delegates_to_validation_engine(self, manager, run):
        cart = run(manager.set_active_cart(DEMO_STORE_ID, DEMO_PROFILE_ID, min_subtotal=usd("20")))
        run(manager.add_item(cart.id, _item()))

        result = run(manager.validate_before_checkout(cart.id))

        assert not result.is_valid
        assert result.error.message == "Minimum order is 20 USD, current subtotal is 8.99 USD."

    def test_unknown_cart(self, manager, run):
        with pytest.raises(CartNotFoundError):
            run(manager.validate_before_checkout("missing"))
