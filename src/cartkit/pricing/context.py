"""Inputs to a pricing run."""

from dataclasses import dataclass
from decimal import Decimal

from cartkit.cart.cart import PromotionKind
from cartkit.cart.money import Money


@dataclass(frozen=True)
class CartPricingContext:
    """Store-level pricing parameters for one cart."""

    store_id: str
    profile_id: str | None = None
    session_id: str | None = None
    service_fee: Money | None = None
    delivery_fee: Money | None = None
    tax_rate: Decimal = Decimal("0")

    @classmethod
    def plain(
        cls, store_id: str, profile_id: str | None = None, session_id: str | None = None
    ) -> "CartPricingContext":
        """No fees and no tax."""
        return cls(store_id=store_id, profile_id=profile_id, session_id=session_id)


@dataclass(frozen=True)
class PricingRequest:
    """Per-call pricing options.

    ``context`` falls back to a plain context for the cart's scope.
    ``promotion_override`` replaces the cart's saved promotion kinds when set.
    """

    context: CartPricingContext | None = None
    promotion_override: tuple[PromotionKind, ...] | None = None

    def __post_init__(self) -> None:
        if self.promotion_override is not None:
            object.__setattr__(self, "promotion_override", tuple(self.promotion_override))
