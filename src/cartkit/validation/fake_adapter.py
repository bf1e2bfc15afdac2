"""Fake validation engines for testing."""

from cartkit.cart.cart import Cart, CartItem
from cartkit.validation.port import CartValidationEngine, CartValidationResult


class AllowAllValidationEngine(CartValidationEngine):
    async def validate(self, cart: Cart) -> CartValidationResult:
        return CartValidationResult.valid()

    async def validate_item_change(self, cart: Cart, proposed_item: CartItem) -> CartValidationResult:
        return CartValidationResult.valid()


class StubValidationEngine(CartValidationEngine):
    """Returns a preset full-cart result per store; item changes always pass."""

    def __init__(self, results_by_store: dict[str, CartValidationResult] | None = None) -> None:
        self.results_by_store = dict(results_by_store or {})
        self.validated_cart_ids: list[str] = []

    def configure(self, store_id: str, result: CartValidationResult) -> None:
        self.results_by_store[store_id] = result

    async def validate(self, cart: Cart) -> CartValidationResult:
        self.validated_cart_ids.append(cart.id)
        return self.results_by_store.get(cart.store_id, CartValidationResult.valid())

    async def validate_item_change(self, cart: Cart, proposed_item: CartItem) -> CartValidationResult:
        return CartValidationResult.valid()
