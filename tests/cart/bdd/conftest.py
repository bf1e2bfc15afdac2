"""Shared BDD fixtures and step definitions for cart journeys."""

import pytest
from protean.exceptions import InvalidOperationError, ValidationError
from pytest_bdd import given, parsers, then, when

from cartkit.cart.cart import CartStatus
from cartkit.cart.events import ActiveCartChanged, CartCreated, CartDeleted, CartUpdated
from cartkit.fixtures import DEMO_PROFILE_ID, demo_items

_CART_EVENT_CLASSES = {
    "CartCreated": CartCreated,
    "CartUpdated": CartUpdated,
    "CartDeleted": CartDeleted,
    "ActiveCartChanged": ActiveCartChanged,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error raised by the last cart action."""
    return {"exc": None}


@pytest.fixture()
def events(manager):
    subscription = manager.observe_events()
    yield subscription
    subscription.close()


@pytest.fixture()
def observed():
    """Events drained from the subscription so far."""
    return []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an active cart for "{store_id}"'), target_fixture="cart")
def active_cart(manager, run, events, store_id):
    return run(manager.set_active_cart(store_id, DEMO_PROFILE_ID))


@given(parsers.cfparse('a guest cart for "{store_id}"'), target_fixture="cart")
def guest_cart(manager, run, events, store_id):
    return run(manager.set_active_cart(store_id))


@given("the cart holds the demo items", target_fixture="cart")
def cart_with_demo_items(manager, run, cart):
    for item in demo_items():
        run(manager.add_item(cart.id, item))
    return run(manager.get_cart(cart.id))


@given("the cart was cancelled", target_fixture="cart")
def cancelled_cart(manager, run, cart):
    return run(manager.update_status(cart.id, CartStatus.CANCELLED))


@given("the cart was checked out", target_fixture="cart")
def checked_out_cart(manager, run, cart):
    return run(manager.update_status(cart.id, CartStatus.CHECKED_OUT))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the demo items are added to the cart", target_fixture="cart")
def add_demo_items(manager, run, cart, error):
    try:
        for item in demo_items():
            run(manager.add_item(cart.id, item))
    except (ValidationError, InvalidOperationError) as exc:
        error["exc"] = exc
    return run(manager.get_cart(cart.id))


@when(parsers.cfparse('the cart status is changed to "{status}"'), target_fixture="cart")
def change_status(manager, run, cart, error, status):
    try:
        return run(manager.update_status(cart.id, CartStatus(status)))
    except (ValidationError, InvalidOperationError) as exc:
        error["exc"] = exc
    return run(manager.get_cart(cart.id))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart status is "{status}"'))
def cart_status_is(manager, run, cart, status):
    assert run(manager.get_cart(cart.id)).status == CartStatus(status)


@then(parsers.cfparse("the cart has {count:d} items"))
def cart_has_n_items(manager, run, cart, count):
    assert len(run(manager.get_cart(cart.id)).items) == count


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then("the cart action is rejected as a conflict")
def cart_action_conflicts(error):
    assert error["exc"] is not None, "Expected a conflict but none was raised"
    assert isinstance(error["exc"], InvalidOperationError)


def _assert_event_observed(events, observed, event_type):
    observed.extend(events.pending())
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in observed
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in observed]}"


@then(parsers.cfparse("a {event_type} event is observed"))
def cart_event_observed(events, observed, event_type):
    _assert_event_observed(events, observed, event_type)


@then(parsers.cfparse("an {event_type} event is observed"))
def cart_event_observed_an(events, observed, event_type):
    _assert_event_observed(events, observed, event_type)
