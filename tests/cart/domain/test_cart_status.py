"""Tests for the status state machine and the status transition policy."""

import pytest
from protean.exceptions import ValidationError

from cartkit.cart import transitions
from cartkit.cart.cart import Cart, CartStatus
from cartkit.exceptions import CartConflictError, InvalidStatusTransition

ARCHIVED = [CartStatus.CHECKED_OUT, CartStatus.CANCELLED, CartStatus.EXPIRED]


class TestCartStatusStateMachine:
    @pytest.mark.parametrize("status", list(CartStatus))
    def test_self_transition_is_allowed(self, status):
        assert status.can_transition(status)

    @pytest.mark.parametrize("target", ARCHIVED)
    def test_active_can_move_to_any_archived_state(self, target):
        assert CartStatus.ACTIVE.can_transition(target)

    @pytest.mark.parametrize("source", ARCHIVED)
    def test_archived_states_are_terminal(self, source):
        for target in CartStatus:
            if target is not source:
                assert not source.can_transition(target)

    def test_active_and_archived_flags(self):
        assert CartStatus.ACTIVE.is_active
        assert not CartStatus.ACTIVE.is_archived
        for status in ARCHIVED:
            assert status.is_archived
            assert not status.is_active


class TestValidateTransition:
    def test_illegal_transition_is_a_conflict(self):
        cart = Cart(items=[], store_id="s1", profile_id="p1", status=CartStatus.EXPIRED)
        with pytest.raises(InvalidStatusTransition) as exc_info:
            transitions.validate_transition(cart, CartStatus.ACTIVE)
        assert isinstance(exc_info.value, CartConflictError)
        assert exc_info.value.messages == {"status": ["Cannot transition from expired to active"]}

    def test_state_machine_ignores_the_guest_rule(self):
        transitions.validate_transition(Cart(items=[], store_id="s1"), CartStatus.CHECKED_OUT)

    def test_cancelled_guest_cart_cannot_check_out(self):
        cart = Cart(items=[], store_id="s1", status=CartStatus.CANCELLED)
        with pytest.raises(InvalidStatusTransition):
            transitions.validate_transition(cart, CartStatus.CHECKED_OUT)


class TestValidateStatusChange:
    def test_guest_checkout_is_a_validation_failure(self):
        cart = Cart(items=[], store_id="s1")
        with pytest.raises(ValidationError) as exc_info:
            transitions.validate_status_change(cart, CartStatus.CHECKED_OUT)
        assert "profile_id" in exc_info.value.messages

    def test_guest_may_cancel(self):
        transitions.validate_status_change(Cart(items=[], store_id="s1"), CartStatus.CANCELLED)

    def test_profile_cart_may_check_out(self):
        transitions.validate_status_change(Cart(items=[], store_id="s1", profile_id="p1"), CartStatus.CHECKED_OUT)


class TestTransitionHints:
    @pytest.mark.parametrize("target", ARCHIVED)
    def test_leaving_active_clears_tracking(self, target):
        assert transitions.should_clear_active_tracking(CartStatus.ACTIVE, target)

    def test_staying_active_keeps_tracking(self):
        assert not transitions.should_clear_active_tracking(CartStatus.ACTIVE, CartStatus.ACTIVE)

    def test_archived_self_transition_keeps_tracking(self):
        assert not transitions.should_clear_active_tracking(CartStatus.EXPIRED, CartStatus.EXPIRED)

    def test_only_checkout_from_active_requires_full_validation(self):
        assert transitions.requires_full_validation(CartStatus.ACTIVE, CartStatus.CHECKED_OUT)
        assert not transitions.requires_full_validation(CartStatus.ACTIVE, CartStatus.CANCELLED)
        assert not transitions.requires_full_validation(CartStatus.CHECKED_OUT, CartStatus.CHECKED_OUT)
