"""Pricing and promotion strategy ports.

The manager prices carts through these interfaces only. Business pricing
rules live in the adapters.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from cartkit.cart.cart import Cart, PromotionKind
from cartkit.cart.money import CartTotals
from cartkit.pricing.context import CartPricingContext


class CartPricingEngine(ABC):
    """Computes base totals for a cart."""

    @abstractmethod
    async def compute_totals(self, cart: Cart, context: CartPricingContext) -> CartTotals:
        """Price ``cart`` before promotions."""
        ...


class PromotionEngine(ABC):
    """Applies promotion kinds to already computed totals."""

    @abstractmethod
    async def apply_promotions(self, kinds: Sequence[PromotionKind], totals: CartTotals) -> CartTotals:
        """Return ``totals`` adjusted for ``kinds``."""
        ...
