"""Fake conflict detector and resolvers for testing."""

from collections.abc import Callable

from cartkit.cart.cart import Cart
from cartkit.conflicts.port import (
    AcceptModifiedCart,
    CatalogConflict,
    CatalogConflictDetector,
    ConflictResolution,
    ConflictResolver,
)


class FakeCatalogConflictDetector(CatalogConflictDetector):
    """Delegates to a handler; records every cart it inspected."""

    def __init__(self, handler: Callable[[Cart], list[CatalogConflict]] | None = None) -> None:
        self.handler = handler or (lambda cart: [])
        self.inspected: list[Cart] = []

    def configure(self, handler: Callable[[Cart], list[CatalogConflict]]) -> None:
        self.handler = handler

    async def detect_conflicts(self, cart: Cart) -> list[CatalogConflict]:
        self.inspected.append(cart)
        return list(self.handler(cart))


class NoOpConflictResolver(ConflictResolver):
    """Accepts the proposed cart unchanged."""

    async def resolve_conflict(self, cart: Cart, reason: Exception) -> ConflictResolution:
        return AcceptModifiedCart(cart)


class FakeConflictResolver(ConflictResolver):
    """Returns whatever ``decide`` produces for the proposed cart."""

    def __init__(self, decide: Callable[[Cart], ConflictResolution]) -> None:
        self.decide = decide
        self.calls: list[dict] = []

    async def resolve_conflict(self, cart: Cart, reason: Exception) -> ConflictResolution:
        self.calls.append({"cart_id": cart.id, "reason": reason})
        return self.decide(cart)
