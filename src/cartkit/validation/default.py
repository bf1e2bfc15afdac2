"""Default validation engine: minimum subtotal, maximum lines, stock hints."""

from cartkit.cart.cart import Cart, CartItem
from cartkit.cart.money import Money
from cartkit.pricing.default import items_subtotal
from cartkit.validation.port import (
    CartValidationEngine,
    CartValidationResult,
    MaxItemsExceeded,
    MinSubtotalNotMet,
    QuantityExceedsAvailableStock,
)


class DefaultCartValidationEngine(CartValidationEngine):
    """Rules come from the cart's own overrides, else the engine defaults.

    The item limit counts lines, not units.
    """

    def __init__(self, default_min_subtotal: Money | None = None, default_max_items: int | None = None) -> None:
        self.default_min_subtotal = default_min_subtotal
        self.default_max_items = default_max_items

    async def validate(self, cart: Cart) -> CartValidationResult:
        result = self._check_max_items(cart, prospective_item=None)
        if not result.is_valid:
            return result

        min_subtotal = cart.min_subtotal if cart.min_subtotal is not None else self.default_min_subtotal
        if min_subtotal is not None:
            # An empty cart has no currency of its own
            subtotal = items_subtotal(cart, None if cart.items else min_subtotal.currency_code)
            if subtotal.is_less_than(min_subtotal):
                return CartValidationResult.invalid(MinSubtotalNotMet(required=min_subtotal, actual=subtotal))

        return CartValidationResult.valid()

    async def validate_item_change(self, cart: Cart, proposed_item: CartItem) -> CartValidationResult:
        available = proposed_item.available_stock
        if available is not None and proposed_item.quantity > available:
            return CartValidationResult.invalid(
                QuantityExceedsAvailableStock(
                    product_id=proposed_item.product_id,
                    available=available,
                    requested=proposed_item.quantity,
                )
            )

        return self._check_max_items(cart, prospective_item=proposed_item)

    def _check_max_items(self, cart: Cart, prospective_item: CartItem | None) -> CartValidationResult:
        max_items = cart.max_item_count if cart.max_item_count is not None else self.default_max_items
        if max_items is None:
            return CartValidationResult.valid()

        count = cart.line_count
        if prospective_item is not None and cart.find_item(prospective_item.id) is None:
            count += 1  # New line

        if count > max_items:
            return CartValidationResult.invalid(MaxItemsExceeded(max_items=max_items, actual=count))
        return CartValidationResult.valid()
