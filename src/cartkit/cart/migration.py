"""Rules for moving a guest cart into a signed-in profile's scope."""

from datetime import datetime
from enum import Enum

from cartkit.cart.cart import Cart, CartStatus
from cartkit.exceptions import CartConflictError


class GuestMigrationStrategy(Enum):
    MOVE = "move"  # Re-scope the guest cart in place, keeping its id
    COPY_AND_DELETE = "copy_and_delete"  # New cart with cloned items, guest cart removed


def require_guest_active_cart(cart: Cart | None, store_id: str) -> Cart:
    if cart is None:
        raise CartConflictError({"cart": [f"No active guest cart found for store {store_id}"]})
    return cart


def validate_target_scope_is_empty(active_profile_cart: Cart | None, store_id: str, profile_id: str) -> None:
    if active_profile_cart is not None:
        raise CartConflictError(
            {"profile_id": [f"Profile {profile_id} already has an active cart for store {store_id}"]}
        )


def make_moved_cart(cart: Cart, profile_id: str, now: datetime) -> Cart:
    """The guest cart re-scoped to ``profile_id``.

    Identity, items and creation time are kept; the cart is forced active.
    """
    return cart.evolve(profile_id=profile_id, status=CartStatus.ACTIVE, updated_at=now)
