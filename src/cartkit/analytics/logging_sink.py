"""Analytics sink that writes structured log events."""

import structlog

from cartkit.analytics.port import CartAnalyticsSink
from cartkit.cart.cart import Cart, CartItem

logger = structlog.get_logger(__name__)


class LoggingAnalyticsSink(CartAnalyticsSink):
    def cart_created(self, cart: Cart) -> None:
        logger.info(
            "analytics.cart_created",
            cart_id=cart.id,
            store_id=cart.store_id,
            profile_id=cart.profile_id,
            session_id=cart.session_id,
        )

    def cart_updated(self, cart: Cart) -> None:
        logger.info("analytics.cart_updated", cart_id=cart.id, status=cart.status.value, lines=cart.line_count)

    def cart_deleted(self, cart_id: str) -> None:
        logger.info("analytics.cart_deleted", cart_id=cart_id)

    def active_cart_changed(
        self,
        new_active_cart_id: str | None,
        store_id: str,
        profile_id: str | None,
        session_id: str | None,
    ) -> None:
        logger.info(
            "analytics.active_cart_changed",
            cart_id=new_active_cart_id,
            store_id=store_id,
            profile_id=profile_id,
            session_id=session_id,
        )

    def item_added(self, item: CartItem, cart: Cart) -> None:
        logger.info(
            "analytics.item_added",
            cart_id=cart.id,
            item_id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
        )

    def item_updated(self, item: CartItem, cart: Cart) -> None:
        logger.info("analytics.item_updated", cart_id=cart.id, item_id=item.id, quantity=item.quantity)

    def item_removed(self, item_id: str, cart: Cart) -> None:
        logger.info("analytics.item_removed", cart_id=cart.id, item_id=item_id)
