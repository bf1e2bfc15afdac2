"""cartkit: cart consistency and orchestration engine.

Multi-store, multi-scope shopping carts with at most one active cart per
``(store, profile, session)`` scope, a status state machine, pluggable
pricing/promotion/validation/conflict strategies, multi-store checkout
aggregation and policy-driven cleanup of archived carts.

Hosts initialise the domain once at start-up with
``cartkit.domain.cartkit.init()``; importing the package configures logging.
"""

from cartkit.cart.cart import (
    Cart,
    CartItem,
    CartItemModifier,
    CartScopeKey,
    CartStatus,
    CustomPromotion,
    FixedAmountOffCart,
    FreeDelivery,
    PercentageOffCart,
    PromotionKind,
)
from cartkit.cart.cleanup import CartCleanupResult, CartLifecyclePolicy
from cartkit.cart.discovery import ActiveCartGroup
from cartkit.cart.events import ActiveCartChanged, CartCreated, CartDeleted, CartEvent, CartUpdated
from cartkit.cart.migration import GuestMigrationStrategy
from cartkit.cart.money import CartTotals, Money
from cartkit.cart.query import CartQuery, CartSort
from cartkit.cart.results import CartUpdateResult, CheckoutGroupValidationResult, CheckoutTotals
from cartkit.config import CartConfiguration
from cartkit.exceptions import CartConflictError, CartNotActiveError, CartNotFoundError, InvalidStatusTransition
from cartkit.manager import CartManager
from cartkit.pricing.context import CartPricingContext, PricingRequest

__all__ = [
    "ActiveCartChanged",
    "ActiveCartGroup",
    "Cart",
    "CartCleanupResult",
    "CartConfiguration",
    "CartConflictError",
    "CartCreated",
    "CartDeleted",
    "CartEvent",
    "CartItem",
    "CartItemModifier",
    "CartLifecyclePolicy",
    "CartManager",
    "CartNotActiveError",
    "CartNotFoundError",
    "CartPricingContext",
    "CartQuery",
    "CartScopeKey",
    "CartSort",
    "CartStatus",
    "CartTotals",
    "CartUpdateResult",
    "CartUpdated",
    "CheckoutGroupValidationResult",
    "CheckoutTotals",
    "CustomPromotion",
    "FixedAmountOffCart",
    "FreeDelivery",
    "GuestMigrationStrategy",
    "InvalidStatusTransition",
    "Money",
    "PercentageOffCart",
    "PricingRequest",
    "PromotionKind",
]
