"""Cart storage port (abstract interface).

Defines the contract every cart store adapter must implement. The manager
only talks to this interface, so in-memory and durable backends are
interchangeable.
"""

from abc import ABC, abstractmethod

from cartkit.cart.cart import Cart
from cartkit.cart.query import CartQuery


class CartStore(ABC):
    """Abstract cart persistence interface."""

    @abstractmethod
    async def load_cart(self, cart_id: str) -> Cart | None:
        """Return the cart with ``cart_id`` or None."""
        ...

    @abstractmethod
    async def save_cart(self, cart: Cart) -> None:
        """Insert or replace the cart with the same id."""
        ...

    @abstractmethod
    async def delete_cart(self, cart_id: str) -> None:
        """Remove a cart. Deleting an unknown id is not an error."""
        ...

    @abstractmethod
    async def fetch_carts(self, query: CartQuery, limit: int | None = None) -> list[Cart]:
        """Carts matching ``query``, ordered by ``query.sort``."""
        ...

    @abstractmethod
    async def fetch_all_carts(self, limit: int | None = None) -> list[Cart]:
        """Every stored cart, most recently updated first."""
        ...
