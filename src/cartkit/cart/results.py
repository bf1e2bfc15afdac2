"""Result values returned by cart manager operations."""

from dataclasses import dataclass, field

from cartkit.cart.cart import Cart, CartItem
from cartkit.cart.money import CartTotals
from cartkit.conflicts.port import CatalogConflict
from cartkit.validation.port import CartValidationResult


@dataclass(frozen=True)
class CartUpdateResult:
    """The persisted cart after an item change.

    ``conflicts`` lists the catalog conflicts found on the proposed cart,
    whether or not a resolver acted on them.
    """

    cart: Cart
    removed_items: tuple[CartItem, ...] = ()
    changed_items: tuple[CartItem, ...] = ()
    conflicts: tuple[CatalogConflict, ...] = ()


@dataclass(frozen=True)
class CheckoutTotals:
    profile_id: str | None
    session_id: str | None
    per_store: dict[str, CartTotals] = field(default_factory=dict)
    aggregate: CartTotals = field(default_factory=CartTotals.zero)


@dataclass(frozen=True)
class CheckoutGroupValidationResult:
    profile_id: str | None
    session_id: str | None
    per_store: dict[str, CartValidationResult] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return all(result.is_valid for result in self.per_store.values())

    @property
    def failures(self) -> dict[str, CartValidationResult]:
        return {store_id: result for store_id, result in self.per_store.items() if not result.is_valid}
