"""Pricing orchestrator.

Sequences a pricing run (base totals, effective promotions, applied
promotions) and folds per-store totals into one checkout total.
"""

from collections.abc import Iterable
from decimal import Decimal

from protean.exceptions import ValidationError

from cartkit.cart.cart import Cart, PromotionKind
from cartkit.cart.money import CartTotals, Money
from cartkit.pricing.context import CartPricingContext, PricingRequest
from cartkit.pricing.port import CartPricingEngine, PromotionEngine


class CartPricingOrchestrator:
    def __init__(self, pricing_engine: CartPricingEngine, promotion_engine: PromotionEngine) -> None:
        self.pricing_engine = pricing_engine
        self.promotion_engine = promotion_engine

    async def totals(self, cart: Cart, request: PricingRequest | None = None) -> CartTotals:
        request = request or PricingRequest()
        context = request.context or CartPricingContext.plain(cart.store_id, cart.profile_id, cart.session_id)

        base = await self.pricing_engine.compute_totals(cart, context)

        promotions = self.effective_promotions(cart, request)
        if not promotions:
            return base
        return await self.promotion_engine.apply_promotions(promotions, base)

    @staticmethod
    def effective_promotions(cart: Cart, request: PricingRequest) -> tuple[PromotionKind, ...]:
        """The per-call override when given, else the cart's saved kinds."""
        if request.promotion_override is not None:
            return request.promotion_override
        return cart.saved_promotion_kinds

    @staticmethod
    def aggregate_group_totals(per_store_totals: Iterable[CartTotals]) -> CartTotals:
        """Sum per-store totals component by component.

        All components must share the currency of the first subtotal seen.
        An empty group yields zero totals in USD.
        """
        per_store_totals = list(per_store_totals)
        if not per_store_totals:
            return CartTotals.zero()

        currency = per_store_totals[0].currency_code
        sums = [Decimal("0")] * 5

        for totals in per_store_totals:
            for index, money in enumerate(totals.components()):
                if money.currency_code != currency:
                    raise ValidationError({"currency": ["Mixed currencies in checkout group."]})
                sums[index] += money.amount

        subtotal, delivery_fee, service_fee, tax, grand_total = (
            Money(amount=amount, currency_code=currency) for amount in sums
        )
        return CartTotals(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            service_fee=service_fee,
            tax=tax,
            grand_total=grand_total,
        )
