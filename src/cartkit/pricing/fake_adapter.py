"""Fake pricing and promotion engines for testing."""

from collections.abc import Sequence

from cartkit.cart.cart import Cart, FixedAmountOffCart, FreeDelivery, PromotionKind
from cartkit.cart.money import CartTotals, Money
from cartkit.pricing.context import CartPricingContext
from cartkit.pricing.default import items_subtotal
from cartkit.pricing.port import CartPricingEngine, PromotionEngine


class NoOpPricingEngine(CartPricingEngine):
    """Prices every cart at zero USD."""

    async def compute_totals(self, cart: Cart, context: CartPricingContext) -> CartTotals:
        return CartTotals.zero()


class NoOpPromotionEngine(PromotionEngine):
    async def apply_promotions(self, kinds: Sequence[PromotionKind], totals: CartTotals) -> CartTotals:
        return totals


class StubPricingEngine(CartPricingEngine):
    """Subtotal-only pricing.

    Derives the subtotal from items by default, or returns a fixed subtotal
    per store once ``configure(subtotals_by_store=...)`` is called. Every
    call is recorded in ``calls``.
    """

    def __init__(self, subtotals_by_store: dict[str, Money] | None = None) -> None:
        self.subtotals_by_store = subtotals_by_store
        self.calls: list[dict] = []

    def configure(self, subtotals_by_store: dict[str, Money] | None) -> None:
        self.subtotals_by_store = subtotals_by_store

    async def compute_totals(self, cart: Cart, context: CartPricingContext) -> CartTotals:
        self.calls.append({"cart_id": cart.id, "store_id": cart.store_id, "context": context})
        if self.subtotals_by_store is None:
            return CartTotals.from_subtotal(items_subtotal(cart))
        return CartTotals.from_subtotal(self.subtotals_by_store.get(cart.store_id, Money.zero()))

    def reset(self) -> None:
        self.calls = []


class SpyPromotionEngine(PromotionEngine):
    """Records the promotion kinds it receives.

    Fixed amounts come off the grand total and free delivery zeroes the
    delivery fee; every other kind is ignored.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[PromotionKind, ...]] = []

    async def apply_promotions(self, kinds: Sequence[PromotionKind], totals: CartTotals) -> CartTotals:
        self.calls.append(tuple(kinds))
        currency = totals.currency_code
        delivery_fee = totals.delivery_fee
        grand_total = totals.grand_total

        for kind in kinds:
            if isinstance(kind, FixedAmountOffCart):
                grand_total = Money(amount=grand_total.amount - kind.amount.amount, currency_code=currency)
            elif isinstance(kind, FreeDelivery):
                delivery_fee = Money.zero(currency)
                grand_total = totals.subtotal + totals.service_fee + totals.tax + delivery_fee

        return CartTotals(
            subtotal=totals.subtotal,
            delivery_fee=delivery_fee,
            service_fee=totals.service_fee,
            tax=totals.tax,
            grand_total=grand_total,
        )

    def reset(self) -> None:
        self.calls = []
