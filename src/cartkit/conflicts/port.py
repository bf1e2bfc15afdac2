"""Catalog conflict detection and resolution ports.

A detector reports where a cart diverges from the live catalog; an optional
resolver decides whether a mutation may proceed anyway.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cartkit.cart.cart import Cart
from cartkit.cart.money import Money


@dataclass(frozen=True)
class RemovedFromCatalog:
    pass


@dataclass(frozen=True)
class PriceChanged:
    old_price: Money
    new_price: Money


@dataclass(frozen=True)
class InsufficientStock:
    requested: int
    available: int


ConflictKind = RemovedFromCatalog | PriceChanged | InsufficientStock


@dataclass(frozen=True)
class CatalogConflict:
    item_id: str
    product_id: str
    kind: ConflictKind


@dataclass(frozen=True)
class AcceptModifiedCart:
    """Persist ``cart`` in place of the proposed one."""

    cart: Cart


@dataclass(frozen=True)
class RejectWithError:
    """Abort the mutation by raising ``error``."""

    error: Exception


ConflictResolution = AcceptModifiedCart | RejectWithError


class CatalogConflictDetector(ABC):
    @abstractmethod
    async def detect_conflicts(self, cart: Cart) -> list[CatalogConflict]:
        """Conflicts between ``cart`` and the current catalog."""
        ...


class ConflictResolver(ABC):
    @abstractmethod
    async def resolve_conflict(self, cart: Cart, reason: Exception) -> ConflictResolution:
        """Decide what to persist for a cart with catalog conflicts."""
        ...


class NoOpCatalogConflictDetector(CatalogConflictDetector):
    async def detect_conflicts(self, cart: Cart) -> list[CatalogConflict]:
        return []
