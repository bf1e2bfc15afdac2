"""Spy analytics sink that records every call for assertions."""

from cartkit.analytics.port import CartAnalyticsSink
from cartkit.cart.cart import Cart, CartItem


class SpyCartAnalyticsSink(CartAnalyticsSink):
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.created: list[str] = []
        self.updated: list[str] = []
        self.deleted: list[str] = []
        self.active_changes: list[dict] = []
        self.added_items: list[tuple[str, str]] = []
        self.updated_items: list[tuple[str, str]] = []
        self.removed_items: list[tuple[str, str]] = []

    def cart_created(self, cart: Cart) -> None:
        self.created.append(cart.id)

    def cart_updated(self, cart: Cart) -> None:
        self.updated.append(cart.id)

    def cart_deleted(self, cart_id: str) -> None:
        self.deleted.append(cart_id)

    def active_cart_changed(
        self,
        new_active_cart_id: str | None,
        store_id: str,
        profile_id: str | None,
        session_id: str | None,
    ) -> None:
        self.active_changes.append(
            {
                "cart_id": new_active_cart_id,
                "store_id": store_id,
                "profile_id": profile_id,
                "session_id": session_id,
            }
        )

    def item_added(self, item: CartItem, cart: Cart) -> None:
        self.added_items.append((item.id, cart.id))

    def item_updated(self, item: CartItem, cart: Cart) -> None:
        self.updated_items.append((item.id, cart.id))

    def item_removed(self, item_id: str, cart: Cart) -> None:
        self.removed_items.append((item_id, cart.id))
