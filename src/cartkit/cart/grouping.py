"""Selection rules for the active carts of one session group."""

from collections import Counter
from collections.abc import Iterable

from cartkit.cart.cart import Cart


def eligible_carts(carts: Iterable[Cart], include_empty: bool = False) -> list[Cart]:
    """Carts that take part in group totals and validation.

    Empty carts are left out unless ``include_empty`` is set.
    """
    return [cart for cart in carts if include_empty or not cart.is_empty]


def duplicate_store_ids(carts: Iterable[Cart]) -> set[str]:
    """Store ids that appear on more than one cart.

    A session group holds at most one active cart per store, so a non-empty
    result means the group is corrupted.
    """
    counts = Counter(cart.store_id for cart in carts)
    return {store_id for store_id, count in counts.items() if count > 1}
