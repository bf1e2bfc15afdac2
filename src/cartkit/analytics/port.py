"""Analytics sink port.

Sinks observe cart activity. Calls are synchronous and must not raise:
analytics never decides the outcome of a cart operation.
"""

from abc import ABC, abstractmethod

from cartkit.cart.cart import Cart, CartItem


class CartAnalyticsSink(ABC):
    @abstractmethod
    def cart_created(self, cart: Cart) -> None: ...

    @abstractmethod
    def cart_updated(self, cart: Cart) -> None: ...

    @abstractmethod
    def cart_deleted(self, cart_id: str) -> None: ...

    @abstractmethod
    def active_cart_changed(
        self,
        new_active_cart_id: str | None,
        store_id: str,
        profile_id: str | None,
        session_id: str | None,
    ) -> None: ...

    @abstractmethod
    def item_added(self, item: CartItem, cart: Cart) -> None: ...

    @abstractmethod
    def item_updated(self, item: CartItem, cart: Cart) -> None: ...

    @abstractmethod
    def item_removed(self, item_id: str, cart: Cart) -> None: ...


class NoOpAnalyticsSink(CartAnalyticsSink):
    def cart_created(self, cart: Cart) -> None:
        pass

    def cart_updated(self, cart: Cart) -> None:
        pass

    def cart_deleted(self, cart_id: str) -> None:
        pass

    def active_cart_changed(
        self,
        new_active_cart_id: str | None,
        store_id: str,
        profile_id: str | None,
        session_id: str | None,
    ) -> None:
        pass

    def item_added(self, item: CartItem, cart: Cart) -> None:
        pass

    def item_updated(self, item: CartItem, cart: Cart) -> None:
        pass

    def item_removed(self, item_id: str, cart: Cart) -> None:
        pass
