"""Cart manager configuration.

Bundles the storage port, pricing/validation/conflict strategies, the
analytics sink and the clock a ``CartManager`` runs with.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from cartkit.analytics.logging_sink import LoggingAnalyticsSink
from cartkit.analytics.port import CartAnalyticsSink
from cartkit.cart.cart import utc_now
from cartkit.conflicts.port import CatalogConflictDetector, ConflictResolver, NoOpCatalogConflictDetector
from cartkit.pricing.default import DefaultCartPricingEngine, DefaultPromotionEngine
from cartkit.pricing.port import CartPricingEngine, PromotionEngine
from cartkit.store import get_store
from cartkit.store.port import CartStore
from cartkit.validation.default import DefaultCartValidationEngine
from cartkit.validation.port import CartValidationEngine


@dataclass
class CartConfiguration:
    cart_store: CartStore
    pricing_engine: CartPricingEngine = field(default_factory=DefaultCartPricingEngine)
    promotion_engine: PromotionEngine = field(default_factory=DefaultPromotionEngine)
    validation_engine: CartValidationEngine = field(default_factory=DefaultCartValidationEngine)
    catalog_conflict_detector: CatalogConflictDetector = field(default_factory=NoOpCatalogConflictDetector)
    conflict_resolver: ConflictResolver | None = None
    analytics_sink: CartAnalyticsSink = field(default_factory=LoggingAnalyticsSink)
    clock: Callable[[], datetime] = utc_now

    @classmethod
    def configured(cls, **overrides) -> "CartConfiguration":
        """Configuration backed by the process-wide store.

        The store comes from ``cartkit.store.get_store()`` (selected with
        ``CARTKIT_STORE``) unless ``cart_store`` is passed explicitly.
        """
        overrides.setdefault("cart_store", get_store())
        return cls(**overrides)

    def now(self) -> datetime:
        return self.clock()
