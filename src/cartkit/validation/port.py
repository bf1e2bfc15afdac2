"""Cart validation port and its result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cartkit.cart.cart import Cart, CartItem
from cartkit.cart.money import Money


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MinSubtotalNotMet:
    required: Money
    actual: Money

    @property
    def message(self) -> str:
        return f"Minimum order is {self.required}, current subtotal is {self.actual}."


@dataclass(frozen=True)
class MaxItemsExceeded:
    max_items: int
    actual: int

    @property
    def message(self) -> str:
        return f"Maximum allowed items is {self.max_items}, current count is {self.actual}."


@dataclass(frozen=True)
class QuantityExceedsAvailableStock:
    product_id: str
    available: int
    requested: int

    @property
    def message(self) -> str:
        return (
            f"Requested quantity ({self.requested}) for product '{self.product_id}' "
            f"exceeds available stock ({self.available})."
        )


@dataclass(frozen=True)
class CustomValidationError:
    text: str

    @property
    def message(self) -> str:
        return self.text


CartValidationError = MinSubtotalNotMet | MaxItemsExceeded | QuantityExceedsAvailableStock | CustomValidationError


@dataclass(frozen=True)
class CartValidationResult:
    """Outcome of a validation run; ``error`` is set exactly when invalid."""

    error: CartValidationError | None = None

    @classmethod
    def valid(cls) -> "CartValidationResult":
        return cls()

    @classmethod
    def invalid(cls, error: CartValidationError) -> "CartValidationResult":
        return cls(error=error)

    @property
    def is_valid(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Port
# ---------------------------------------------------------------------------
class CartValidationEngine(ABC):
    """Business rules a cart must satisfy."""

    @abstractmethod
    async def validate(self, cart: Cart) -> CartValidationResult:
        """Full-cart validation, run before checkout."""
        ...

    @abstractmethod
    async def validate_item_change(self, cart: Cart, proposed_item: CartItem) -> CartValidationResult:
        """Validate adding ``proposed_item`` or replacing the line with its id."""
        ...
