"""Cart manager: the single writer for cart state.

Every public coroutine runs under one ``asyncio.Lock`` per manager, so a
read-modify-write sequence (look up the active cart of a scope, then create
or change one) is never interleaved with another writer. Internal helpers
(prefixed with ``_``) assume the lock is already held and never take it.

Side-effect order for a mutation: persist, analytics, event. Validation and
conflict resolution happen before anything is written.
"""

import asyncio
import functools
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

import structlog
from protean.exceptions import ValidationError

from cartkit.cart import grouping, migration, transitions
from cartkit.cart.cart import Cart, CartItem, CartStatus, PromotionKind, new_id
from cartkit.cart.cleanup import CartCleanupResult, CartLifecyclePolicy, RetentionScope, compute_carts_to_delete
from cartkit.cart.discovery import ActiveCartGroup, CartDiscoveryService
from cartkit.cart.events import ActiveCartChanged, CartCreated, CartDeleted, CartEvent, CartUpdated
from cartkit.cart.migration import GuestMigrationStrategy
from cartkit.cart.money import CartTotals, Money
from cartkit.cart.publisher import CartEventPublisher, CartEventSubscription
from cartkit.cart.query import CartQuery, session_filter_for
from cartkit.cart.results import CartUpdateResult, CheckoutGroupValidationResult, CheckoutTotals
from cartkit.config import CartConfiguration
from cartkit.conflicts.port import AcceptModifiedCart, CatalogConflict, RejectWithError
from cartkit.exceptions import CartConflictError, CartNotActiveError, CartNotFoundError
from cartkit.pricing.context import CartPricingContext, PricingRequest
from cartkit.pricing.orchestrator import CartPricingOrchestrator
from cartkit.validation.port import CartValidationResult

logger = structlog.get_logger(__name__)


def serialized(method):
    """Run a public manager coroutine under the manager lock."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        async with self._lock:
            return await method(self, *args, **kwargs)

    return wrapper


class CartManager:
    def __init__(self, configuration: CartConfiguration) -> None:
        self.config = configuration
        self.discovery = CartDiscoveryService(configuration.cart_store)
        self.pricing = CartPricingOrchestrator(configuration.pricing_engine, configuration.promotion_engine)
        self.events = CartEventPublisher()
        self._lock = asyncio.Lock()

    @property
    def store(self):
        return self.config.cart_store

    # -------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------
    def observe_events(self) -> CartEventSubscription:
        """Subscribe to events emitted from now on."""
        return self.events.subscribe()

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @serialized
    async def get_cart(self, cart_id: str) -> Cart | None:
        return await self.store.load_cart(cart_id)

    @serialized
    async def query_carts(self, query: CartQuery, limit: int | None = None) -> list[Cart]:
        return await self.store.fetch_carts(query, limit=limit)

    @serialized
    async def get_active_cart(
        self, store_id: str, profile_id: str | None = None, session_id: str | None = None
    ) -> Cart | None:
        return await self.discovery.active_cart(store_id, profile_id, session_id)

    @serialized
    async def get_active_cart_groups(self, profile_id: str | None = None) -> list[ActiveCartGroup]:
        return await self.discovery.active_cart_groups(profile_id)

    # -------------------------------------------------------------------
    # Cart lifecycle
    # -------------------------------------------------------------------
    @serialized
    async def create_cart(
        self,
        store_id: str,
        profile_id: str | None = None,
        session_id: str | None = None,
        *,
        status: CartStatus = CartStatus.ACTIVE,
        display_name: str | None = None,
        context: str | None = None,
        store_image_url: str | None = None,
        metadata: Mapping[str, str] | None = None,
        min_subtotal: Money | None = None,
        max_item_count: int | None = None,
        saved_promotion_kinds: Sequence[PromotionKind] = (),
    ) -> Cart:
        """Create a cart in the given scope.

        An active cart may only be created in a scope without one.
        """
        if status.is_active and await self.discovery.active_cart(store_id, profile_id, session_id) is not None:
            raise CartConflictError({"cart": [f"An active cart already exists for store {store_id}"]})

        return await self._create_cart(
            store_id,
            profile_id,
            session_id,
            status=status,
            display_name=display_name,
            context=context,
            store_image_url=store_image_url,
            metadata=metadata,
            min_subtotal=min_subtotal,
            max_item_count=max_item_count,
            saved_promotion_kinds=saved_promotion_kinds,
        )

    @serialized
    async def set_active_cart(
        self,
        store_id: str,
        profile_id: str | None = None,
        session_id: str | None = None,
        *,
        display_name: str | None = None,
        context: str | None = None,
        store_image_url: str | None = None,
        metadata: Mapping[str, str] | None = None,
        min_subtotal: Money | None = None,
        max_item_count: int | None = None,
        saved_promotion_kinds: Sequence[PromotionKind] = (),
    ) -> Cart:
        """Return the scope's active cart, creating one if there is none.

        The details only apply when a new cart is created.
        """
        existing = await self.discovery.active_cart(store_id, profile_id, session_id)
        if existing is not None:
            return existing

        return await self._create_cart(
            store_id,
            profile_id,
            session_id,
            status=CartStatus.ACTIVE,
            display_name=display_name,
            context=context,
            store_image_url=store_image_url,
            metadata=metadata,
            min_subtotal=min_subtotal,
            max_item_count=max_item_count,
            saved_promotion_kinds=saved_promotion_kinds,
        )

    @serialized
    async def update_cart_details(
        self,
        cart_id: str,
        *,
        display_name: str | None = None,
        context: str | None = None,
        store_image_url: str | None = None,
        metadata: Mapping[str, str] | None = None,
        min_subtotal: Money | None = None,
        max_item_count: int | None = None,
        saved_promotion_kinds: Sequence[PromotionKind] | None = None,
    ) -> Cart:
        """Change descriptive fields of an active cart; None keeps a value."""
        cart = await self._load_mutable_cart(cart_id)

        changes = {
            "display_name": display_name,
            "context": context,
            "store_image_url": store_image_url,
            "metadata": dict(metadata) if metadata is not None else None,
            "min_subtotal": min_subtotal,
            "max_item_count": max_item_count,
            "saved_promotion_kinds": list(saved_promotion_kinds) if saved_promotion_kinds is not None else None,
        }
        cart = cart.evolve(**{name: value for name, value in changes.items() if value is not None})

        return await self._save_after_mutation(cart)

    @serialized
    async def update_status(self, cart_id: str, new_status: CartStatus) -> Cart:
        cart = await self._load_cart(cart_id)
        old_status = cart.status

        transitions.validate_transition(cart, new_status)
        if old_status is new_status:
            return cart
        transitions.validate_status_change(cart, new_status)

        if transitions.requires_full_validation(old_status, new_status):
            result = await self.config.validation_engine.validate(cart)
            if not result.is_valid:
                raise ValidationError({"cart": [result.error.message]})

        updated = await self._save_after_mutation(cart.evolve(status=new_status))

        if transitions.should_clear_active_tracking(old_status, new_status):
            self._signal_active_cart_changed(updated, None)

        logger.info("cart.status_changed", cart_id=cart_id, old_status=old_status.value, new_status=new_status.value)
        return updated

    @serialized
    async def delete_cart(self, cart_id: str) -> None:
        """Delete a cart. Unknown ids are ignored."""
        cart = await self.store.load_cart(cart_id)
        if cart is None:
            return
        await self._delete_cart(cart)

    @serialized
    async def reorder(self, source_cart_id: str) -> Cart:
        """Start a new active cart with the items of ``source_cart_id``.

        The scope's current active cart, if any, is expired first.
        """
        source = await self._load_cart(source_cart_id)
        await self._expire_active_cart_if_needed(source.store_id, source.profile_id, source.session_id)
        copy = self._make_active_cart_copy(source, source.profile_id)
        return await self._persist_new_cart(copy)

    @serialized
    async def migrate_guest_active_cart(
        self,
        store_id: str,
        profile_id: str,
        strategy: GuestMigrationStrategy = GuestMigrationStrategy.MOVE,
        session_id: str | None = None,
    ) -> Cart:
        """Hand the guest's active cart for a scope over to ``profile_id``."""
        guest_cart = migration.require_guest_active_cart(
            await self.discovery.active_cart(store_id, None, session_id), store_id
        )
        migration.validate_target_scope_is_empty(
            await self.discovery.active_cart(store_id, profile_id, session_id), store_id, profile_id
        )

        if strategy is GuestMigrationStrategy.MOVE:
            moved = migration.make_moved_cart(guest_cart, profile_id, self.config.now())
            saved = await self._save_after_mutation(moved)
            self._signal_active_cart_changed(guest_cart, None)
            self._signal_active_cart_changed(saved, saved.id)
        else:
            saved = await self._persist_new_cart(self._make_active_cart_copy(guest_cart, profile_id))
            await self._delete_cart(guest_cart)

        logger.info(
            "cart.guest_migrated",
            cart_id=saved.id,
            guest_cart_id=guest_cart.id,
            store_id=store_id,
            profile_id=profile_id,
            strategy=strategy.value,
        )
        return saved

    # -------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------
    @serialized
    async def add_item(self, cart_id: str, item: CartItem) -> CartUpdateResult:
        cart = await self._load_mutable_cart(cart_id)
        if cart.find_item(item.id) is not None:
            raise ValidationError({"item_id": ["Item already exists in cart"]})
        await self._validate_item_change(cart, item)

        proposed = cart.with_item_added(item)
        to_persist, conflicts = await self._detect_and_resolve_conflicts(proposed)
        updated = await self._save_after_mutation(to_persist)

        self.config.analytics_sink.item_added(item, updated)
        return CartUpdateResult(cart=updated, changed_items=(item,), conflicts=tuple(conflicts))

    @serialized
    async def update_item(self, cart_id: str, item: CartItem) -> CartUpdateResult:
        cart = await self._load_mutable_cart(cart_id)
        if cart.find_item(item.id) is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        await self._validate_item_change(cart, item)

        proposed = cart.with_item_replaced(item)
        to_persist, conflicts = await self._detect_and_resolve_conflicts(proposed)
        updated = await self._save_after_mutation(to_persist)

        self.config.analytics_sink.item_updated(item, updated)
        return CartUpdateResult(cart=updated, changed_items=(item,), conflicts=tuple(conflicts))

    @serialized
    async def remove_item(self, cart_id: str, item_id: str) -> CartUpdateResult:
        cart = await self._load_mutable_cart(cart_id)
        removed = cart.find_item(item_id)
        if removed is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        proposed = cart.with_item_removed(item_id)
        to_persist, conflicts = await self._detect_and_resolve_conflicts(proposed)
        updated = await self._save_after_mutation(to_persist)

        self.config.analytics_sink.item_removed(item_id, updated)
        return CartUpdateResult(cart=updated, removed_items=(removed,), conflicts=tuple(conflicts))

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    @serialized
    async def get_totals(
        self,
        cart_id: str,
        context: CartPricingContext | None = None,
        promotions: Sequence[PromotionKind] | None = None,
    ) -> CartTotals:
        cart = await self._load_cart(cart_id)
        return await self.pricing.totals(cart, PricingRequest(context=context, promotion_override=promotions))

    @serialized
    async def get_totals_for_active_cart(
        self, context: CartPricingContext, promotions: Sequence[PromotionKind] | None = None
    ) -> CartTotals | None:
        """Totals of the active cart in the context's scope, or None."""
        cart = await self.discovery.active_cart(context.store_id, context.profile_id, context.session_id)
        if cart is None:
            return None
        return await self.pricing.totals(cart, PricingRequest(context=context, promotion_override=promotions))

    @serialized
    async def get_totals_for_active_cart_group(
        self,
        profile_id: str | None = None,
        session_id: str | None = None,
        *,
        contexts_by_store: Mapping[str, CartPricingContext] | None = None,
        promotions_by_store: Mapping[str, Sequence[PromotionKind]] | None = None,
        include_empty_carts: bool = False,
    ) -> CheckoutTotals:
        """Per-store and aggregate totals for one multi-store checkout."""
        contexts_by_store = contexts_by_store or {}
        promotions_by_store = promotions_by_store or {}
        carts = await self._eligible_group_carts(profile_id, session_id, include_empty_carts)

        per_store = {}
        for cart in carts:
            request = PricingRequest(
                context=contexts_by_store.get(cart.store_id),
                promotion_override=promotions_by_store.get(cart.store_id),
            )
            per_store[cart.store_id] = await self.pricing.totals(cart, request)

        return CheckoutTotals(
            profile_id=profile_id,
            session_id=session_id,
            per_store=per_store,
            aggregate=self.pricing.aggregate_group_totals(per_store.values()),
        )

    # -------------------------------------------------------------------
    # Checkout validation
    # -------------------------------------------------------------------
    @serialized
    async def validate_before_checkout(self, cart_id: str) -> CartValidationResult:
        cart = await self._load_cart(cart_id)
        return await self.config.validation_engine.validate(cart)

    @serialized
    async def validate_before_checkout_for_active_cart_group(
        self,
        profile_id: str | None = None,
        session_id: str | None = None,
        *,
        include_empty_carts: bool = False,
    ) -> CheckoutGroupValidationResult:
        carts = await self._eligible_group_carts(profile_id, session_id, include_empty_carts)

        per_store = {}
        for cart in carts:
            per_store[cart.store_id] = await self.config.validation_engine.validate(cart)

        return CheckoutGroupValidationResult(profile_id=profile_id, session_id=session_id, per_store=per_store)

    # -------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------
    @serialized
    async def cleanup_carts(
        self,
        store_id: str,
        profile_id: str | None = None,
        session_id: str | None = None,
        *,
        policy: CartLifecyclePolicy | None = None,
        now: datetime | None = None,
    ) -> CartCleanupResult:
        """Apply ``policy`` to the archived carts of one scope.

        A None ``session_id`` means sessionless carts only.
        """
        carts = await self.discovery.carts(
            store_id=store_id, profile_id=profile_id, session=session_filter_for(session_id)
        )
        result = await self._delete_selected(carts, policy, now, RetentionScope.WHOLE_INPUT)
        logger.info(
            "cart.cleanup_completed",
            store_id=store_id,
            profile_id=profile_id,
            session_id=session_id,
            deleted=len(result.deleted_cart_ids),
        )
        return result

    @serialized
    async def cleanup_cart_group(
        self,
        profile_id: str | None = None,
        session_id: str | None = None,
        *,
        policy: CartLifecyclePolicy | None = None,
        now: datetime | None = None,
    ) -> CartCleanupResult:
        """Apply ``policy`` per store across one session group."""
        carts = await self.discovery.carts(profile_id=profile_id, session=session_filter_for(session_id))
        result = await self._delete_selected(carts, policy, now, RetentionScope.PER_STORE)
        logger.info(
            "cart.group_cleanup_completed",
            profile_id=profile_id,
            session_id=session_id,
            deleted=len(result.deleted_cart_ids),
        )
        return result

    # -------------------------------------------------------------------
    # Internals (lock already held)
    # -------------------------------------------------------------------
    def _emit(self, event: CartEvent) -> None:
        self.events.publish(event)

    async def _load_cart(self, cart_id: str) -> Cart:
        cart = await self.store.load_cart(cart_id)
        if cart is None:
            raise CartNotFoundError({"cart_id": [f"Cart {cart_id} not found"]})
        return cart

    async def _load_mutable_cart(self, cart_id: str) -> Cart:
        cart = await self._load_cart(cart_id)
        if not cart.status.is_active:
            raise CartNotActiveError({"status": ["Cart is not active"]})
        return cart

    async def _create_cart(
        self,
        store_id: str,
        profile_id: str | None,
        session_id: str | None,
        *,
        status: CartStatus,
        metadata: Mapping[str, str] | None = None,
        saved_promotion_kinds: Iterable[PromotionKind] = (),
        **details,
    ) -> Cart:
        now = self.config.now()
        cart = Cart(
            id=new_id(),
            store_id=store_id,
            profile_id=profile_id,
            session_id=session_id,
            status=status,
            created_at=now,
            updated_at=now,
            items=[],
            metadata=dict(metadata or {}),
            saved_promotion_kinds=list(saved_promotion_kinds),
            **details,
        )
        return await self._persist_new_cart(cart)

    async def _persist_new_cart(self, cart: Cart) -> Cart:
        await self.store.save_cart(cart)
        self.config.analytics_sink.cart_created(cart)
        self._emit(CartCreated(cart_id=cart.id))
        logger.info(
            "cart.created",
            cart_id=cart.id,
            store_id=cart.store_id,
            profile_id=cart.profile_id,
            session_id=cart.session_id,
            status=cart.status.value,
        )

        if cart.status.is_active:
            self._signal_active_cart_changed(cart, cart.id)
        return cart

    async def _save_after_mutation(self, cart: Cart) -> Cart:
        cart = cart.evolve(updated_at=self.config.now())
        await self.store.save_cart(cart)
        self.config.analytics_sink.cart_updated(cart)
        self._emit(CartUpdated(cart_id=cart.id))
        return cart

    async def _delete_cart_and_emit(self, cart_id: str) -> None:
        await self.store.delete_cart(cart_id)
        self.config.analytics_sink.cart_deleted(cart_id)
        self._emit(CartDeleted(cart_id=cart_id))

    async def _delete_cart(self, cart: Cart) -> None:
        await self._delete_cart_and_emit(cart.id)
        logger.info("cart.deleted", cart_id=cart.id, store_id=cart.store_id, status=cart.status.value)
        if cart.status.is_active:
            self._signal_active_cart_changed(cart, None)

    def _signal_active_cart_changed(self, scope_cart: Cart, new_active_cart_id: str | None) -> None:
        """Announce the active cart of ``scope_cart``'s scope."""
        self.config.analytics_sink.active_cart_changed(
            new_active_cart_id, scope_cart.store_id, scope_cart.profile_id, scope_cart.session_id
        )
        self._emit(
            ActiveCartChanged(
                store_id=scope_cart.store_id,
                profile_id=scope_cart.profile_id,
                session_id=scope_cart.session_id,
                cart_id=new_active_cart_id,
            )
        )
        logger.info(
            "cart.active_changed",
            cart_id=new_active_cart_id,
            store_id=scope_cart.store_id,
            profile_id=scope_cart.profile_id,
            session_id=scope_cart.session_id,
        )

    async def _expire_active_cart_if_needed(
        self, store_id: str, profile_id: str | None, session_id: str | None
    ) -> None:
        active = await self.discovery.active_cart(store_id, profile_id, session_id)
        if active is not None:
            await self._save_after_mutation(active.evolve(status=CartStatus.EXPIRED))

    def _make_active_cart_copy(self, source: Cart, profile_id: str | None) -> Cart:
        now = self.config.now()
        return Cart(
            id=new_id(),
            store_id=source.store_id,
            profile_id=profile_id,
            session_id=source.session_id,
            items=source.cloned_items(),
            status=CartStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            metadata=dict(source.metadata),
            display_name=source.display_name,
            context=source.context,
            store_image_url=source.store_image_url,
            min_subtotal=source.min_subtotal,
            max_item_count=source.max_item_count,
            saved_promotion_kinds=list(source.saved_promotion_kinds),
        )

    async def _validate_item_change(self, cart: Cart, item: CartItem) -> None:
        result = await self.config.validation_engine.validate_item_change(cart, item)
        if not result.is_valid:
            raise ValidationError({"item": [result.error.message]})

    async def _detect_and_resolve_conflicts(self, proposed: Cart) -> tuple[Cart, list[CatalogConflict]]:
        """Run catalog conflict detection on a proposed cart.

        Without a resolver the proposed cart is kept and the conflicts are
        reported. With one, its decision wins: accept persists the returned
        cart, reject raises the returned error.
        """
        conflicts = await self.config.catalog_conflict_detector.detect_conflicts(proposed)
        if not conflicts:
            return proposed, []

        logger.warning(
            "cart.catalog_conflicts_detected",
            cart_id=proposed.id,
            store_id=proposed.store_id,
            profile_id=proposed.profile_id,
            count=len(conflicts),
        )

        resolver = self.config.conflict_resolver
        if resolver is None:
            return proposed, conflicts

        reason = CartConflictError({"cart": ["Cart has catalog conflicts"]})
        resolution = await resolver.resolve_conflict(proposed, reason)
        match resolution:
            case AcceptModifiedCart(cart=resolved):
                logger.info(
                    "cart.catalog_conflicts_resolved",
                    cart_id=proposed.id,
                    modified=resolved.to_dict() != proposed.to_dict(),
                )
                return resolved, conflicts
            case RejectWithError(error=error):
                logger.info("cart.catalog_conflicts_rejected", cart_id=proposed.id, error=str(error))
                raise error
        raise TypeError(f"Unknown conflict resolution: {resolution!r}")

    async def _eligible_group_carts(
        self, profile_id: str | None, session_id: str | None, include_empty: bool
    ) -> list[Cart]:
        carts = await self.discovery.active_carts_across_stores(profile_id, session_id)
        eligible = grouping.eligible_carts(carts, include_empty)

        duplicates = grouping.duplicate_store_ids(eligible)
        if duplicates:
            logger.error(
                "cart.duplicate_active_carts",
                profile_id=profile_id,
                session_id=session_id,
                store_ids=sorted(duplicates),
            )
            raise CartConflictError(
                {"store_id": [f"Multiple active carts for store {store_id}" for store_id in sorted(duplicates)]}
            )
        return eligible

    async def _delete_selected(
        self,
        carts: list[Cart],
        policy: CartLifecyclePolicy | None,
        now: datetime | None,
        retention_scope: RetentionScope,
    ) -> CartCleanupResult:
        to_delete = compute_carts_to_delete(
            carts,
            policy or CartLifecyclePolicy(),
            now or self.config.now(),
            retention_scope,
        )
        result = CartCleanupResult.of(to_delete)
        for cart_id in result.deleted_cart_ids:
            await self._delete_cart_and_emit(cart_id)
        return result
