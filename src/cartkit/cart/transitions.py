"""Status transition policy.

Wraps the ``CartStatus`` state machine with the business preconditions of a
status change and the side-effect hints the manager acts upon.
"""

from protean.exceptions import ValidationError

from cartkit.cart.cart import Cart, CartStatus
from cartkit.exceptions import InvalidStatusTransition


def validate_transition(cart: Cart, new_status: CartStatus) -> None:
    """Raise if the state machine forbids moving ``cart`` to ``new_status``."""
    if not cart.status.can_transition(new_status):
        raise InvalidStatusTransition(
            {"status": [f"Cannot transition from {cart.status.value} to {new_status.value}"]}
        )


def validate_status_change(cart: Cart, new_status: CartStatus) -> None:
    """Raise if the business rules forbid an actual change to ``new_status``."""
    if new_status is CartStatus.CHECKED_OUT and cart.is_guest:
        raise ValidationError({"profile_id": ["Profile ID is missing, cannot check out a guest cart"]})


def should_clear_active_tracking(old: CartStatus, new: CartStatus) -> bool:
    """True when the scope loses its active cart (active -> archived)."""
    return old.is_active and new.is_archived


def requires_full_validation(old: CartStatus, new: CartStatus) -> bool:
    """True when the change is a checkout of an active cart."""
    return old.is_active and new is CartStatus.CHECKED_OUT
