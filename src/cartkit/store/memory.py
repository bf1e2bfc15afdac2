"""In-memory cart store for development and testing.

Keeps carts in a dict keyed by id. Every cart is copied with
``Cart.evolve`` on the way in and out, so callers never share an aggregate
with the store.
"""

from cartkit.cart.cart import Cart
from cartkit.cart.query import CartQuery, CartSort
from cartkit.store.port import CartStore


def _limited(carts: list[Cart], limit: int | None) -> list[Cart]:
    if limit is None or limit < 0:
        return carts
    return carts[:limit]


class InMemoryCartStore(CartStore):
    """Dict-backed cart store."""

    def __init__(self, carts: list[Cart] | None = None) -> None:
        self._carts: dict[str, Cart] = {}
        for cart in carts or []:
            self._carts[cart.id] = cart.evolve()

    async def load_cart(self, cart_id: str) -> Cart | None:
        cart = self._carts.get(cart_id)
        return cart.evolve() if cart is not None else None

    async def save_cart(self, cart: Cart) -> None:
        self._carts[cart.id] = cart.evolve()

    async def delete_cart(self, cart_id: str) -> None:
        self._carts.pop(cart_id, None)

    async def fetch_carts(self, query: CartQuery, limit: int | None = None) -> list[Cart]:
        matching = [cart.evolve() for cart in self._carts.values() if query.matches(cart)]
        return _limited(query.sorted(matching), limit)

    async def fetch_all_carts(self, limit: int | None = None) -> list[Cart]:
        everything = CartQuery(sort=CartSort.UPDATED_AT_DESCENDING).sorted([c.evolve() for c in self._carts.values()])
        return _limited(everything, limit)

    def reset(self) -> None:
        """Drop every stored cart."""
        self._carts.clear()

    def __len__(self) -> int:
        return len(self._carts)
