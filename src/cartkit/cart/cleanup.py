"""Lifecycle cleanup: which archived carts to delete.

Pure computation over a snapshot of carts. The manager fetches the carts of
a scope (or a whole session group), asks ``compute_carts_to_delete`` for the
victims and performs the deletions itself.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from cartkit.cart.cart import Cart, CartStatus


@dataclass(frozen=True)
class CartLifecyclePolicy:
    """Retention rules for archived carts.

    ``None`` disables a rule; negative numbers disable it as well.
    """

    max_archived_carts_per_scope: int | None = 20
    delete_expired_older_than_days: int | None = 7
    delete_cancelled_older_than_days: int | None = 30
    delete_checked_out_older_than_days: int | None = None

    def age_limit_for(self, status: CartStatus) -> int | None:
        return {
            CartStatus.EXPIRED: self.delete_expired_older_than_days,
            CartStatus.CANCELLED: self.delete_cancelled_older_than_days,
            CartStatus.CHECKED_OUT: self.delete_checked_out_older_than_days,
        }.get(status)


class RetentionScope(Enum):
    WHOLE_INPUT = "whole_input"  # Count cap applies to the input as one bucket
    PER_STORE = "per_store"  # Count cap applies to each store separately


@dataclass(frozen=True)
class CartCleanupResult:
    deleted_cart_ids: tuple[str, ...] = ()

    @classmethod
    def of(cls, cart_ids: Iterable[str]) -> "CartCleanupResult":
        return cls(deleted_cart_ids=tuple(sorted(cart_ids)))


def _older_than(cart: Cart, days: int, now: datetime) -> bool:
    if days < 0:
        return False
    return cart.updated_at < now - timedelta(days=days)


def _overflow(carts: list[Cart], keep: int) -> list[Cart]:
    ranked = sorted(carts, key=lambda cart: cart.updated_at, reverse=True)
    return ranked[keep:]


def compute_carts_to_delete(
    carts: Iterable[Cart],
    policy: CartLifecyclePolicy,
    now: datetime,
    retention_scope: RetentionScope = RetentionScope.WHOLE_INPUT,
) -> set[str]:
    """Ids of archived carts that ``policy`` says should go.

    Active carts are never selected. Age rules run first; the count cap then
    keeps the most recently updated survivors.
    """
    archived = [cart for cart in carts if cart.status.is_archived]

    to_delete: set[str] = set()
    for cart in archived:
        days = policy.age_limit_for(cart.status)
        if days is not None and _older_than(cart, days, now):
            to_delete.add(cart.id)

    cap = policy.max_archived_carts_per_scope
    if cap is None or cap < 0:
        return to_delete

    remaining = [cart for cart in archived if cart.id not in to_delete]

    if retention_scope is RetentionScope.WHOLE_INPUT:
        buckets = [remaining]
    else:
        by_store: dict[str, list[Cart]] = defaultdict(list)
        for cart in remaining:
            by_store[cart.store_id].append(cart)
        buckets = list(by_store.values())

    for bucket in buckets:
        to_delete.update(cart.id for cart in _overflow(bucket, cap))

    return to_delete
