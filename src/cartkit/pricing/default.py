"""Default pricing and promotion engines.

Straightforward rules suitable for demos and tests: line items priced at
unit price times quantity, fees and tax taken from the pricing context,
simple subtotal discounts.
"""

from collections.abc import Sequence
from decimal import Decimal

from cartkit.cart.cart import Cart, FixedAmountOffCart, FreeDelivery, PercentageOffCart, PromotionKind
from cartkit.cart.money import DEFAULT_CURRENCY, CartTotals, Money
from cartkit.pricing.context import CartPricingContext
from cartkit.pricing.port import CartPricingEngine, PromotionEngine


def items_subtotal(cart: Cart, currency_code: str | None = None) -> Money:
    """Sum of unit price times quantity, in the first item's currency."""
    if currency_code is None:
        currency_code = cart.items[0].unit_price.currency_code if cart.items else DEFAULT_CURRENCY
    amount = sum((item.unit_price.amount * item.quantity for item in cart.items), Decimal("0"))
    return Money(amount=amount, currency_code=currency_code)


class DefaultCartPricingEngine(CartPricingEngine):
    async def compute_totals(self, cart: Cart, context: CartPricingContext) -> CartTotals:
        if cart.items:
            currency = cart.items[0].unit_price.currency_code
        elif context.service_fee is not None:
            currency = context.service_fee.currency_code
        elif context.delivery_fee is not None:
            currency = context.delivery_fee.currency_code
        else:
            currency = DEFAULT_CURRENCY

        subtotal = items_subtotal(cart, currency)
        tax = Money(amount=subtotal.amount * context.tax_rate, currency_code=currency)
        return CartTotals.from_subtotal(
            subtotal,
            delivery_fee=context.delivery_fee,
            service_fee=context.service_fee,
            tax=tax,
        )


class DefaultPromotionEngine(PromotionEngine):
    """Free delivery, then the first percentage and first fixed discount.

    Discounts reduce the subtotal and never take it below zero. Custom
    promotion codes are ignored.
    """

    async def apply_promotions(self, kinds: Sequence[PromotionKind], totals: CartTotals) -> CartTotals:
        if not kinds:
            return totals

        currency = totals.currency_code
        subtotal = totals.subtotal
        delivery_fee = totals.delivery_fee

        if any(isinstance(kind, FreeDelivery) for kind in kinds):
            delivery_fee = Money.zero(currency)

        percentage = next((kind for kind in kinds if isinstance(kind, PercentageOffCart)), None)
        if percentage is not None and percentage.rate > 0:
            subtotal = (subtotal - subtotal.times(percentage.rate)).clamped_at_zero()

        fixed = next((kind for kind in kinds if isinstance(kind, FixedAmountOffCart)), None)
        if fixed is not None:
            discount = Money(amount=max(fixed.amount.amount, Decimal("0")), currency_code=currency)
            subtotal = (subtotal - discount).clamped_at_zero()

        return CartTotals.from_subtotal(
            subtotal,
            delivery_fee=delivery_fee,
            service_fee=totals.service_fee,
            tax=totals.tax,
        )
