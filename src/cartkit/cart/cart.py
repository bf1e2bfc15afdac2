"""Cart aggregate, line items and the cart status state machine.

The ``CartManager`` never mutates a loaded cart in place. Every change builds
a fresh aggregate through ``Cart.evolve`` and the manager persists it, which
keeps the at-most-one-active-cart rule enforceable in a single place.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Decimal, Dict, HasMany, Identifier, Integer, List, String, ValueObject

from cartkit.cart.money import Money
from cartkit.domain import cartkit


def new_id() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Status state machine
# ---------------------------------------------------------------------------
class CartStatus(Enum):
    ACTIVE = "active"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_active(self) -> bool:
        return self is CartStatus.ACTIVE

    @property
    def is_archived(self) -> bool:
        return self is not CartStatus.ACTIVE

    def can_transition(self, target: "CartStatus") -> bool:
        """Staying put is always allowed; otherwise only active carts may move."""
        return target is self or target in _VALID_TRANSITIONS[self]


_VALID_TRANSITIONS = {
    CartStatus.ACTIVE: {CartStatus.CHECKED_OUT, CartStatus.CANCELLED, CartStatus.EXPIRED},
    CartStatus.CHECKED_OUT: set(),  # Terminal
    CartStatus.CANCELLED: set(),  # Terminal
    CartStatus.EXPIRED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Promotion kinds saved on a cart
# ---------------------------------------------------------------------------
@cartkit.value_object
class FreeDelivery:
    pass


@cartkit.value_object
class PercentageOffCart:
    """Discount on the subtotal; ``rate`` is a fraction (0.1 = 10%)."""

    rate = Decimal(required=True)


@cartkit.value_object
class FixedAmountOffCart:
    amount = ValueObject(Money, required=True)


@cartkit.value_object
class CustomPromotion:
    code = String(max_length=100, required=True)


PromotionKind = FreeDelivery | PercentageOffCart | FixedAmountOffCart | CustomPromotion


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------
@cartkit.value_object
class CartItemModifier:
    id = String(max_length=255, required=True)
    name = String(max_length=255, required=True)
    price_delta = ValueObject(Money, required=True)


@cartkit.entity(part_of="Cart")
class CartItem:
    id = Identifier(identifier=True, default=new_id)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price = ValueObject(Money, required=True)
    total_price = ValueObject(Money)
    modifiers = List(content_type=ValueObject(CartItemModifier))
    image_url = String(max_length=2048, sanitize=False)
    available_stock = Integer()

    def defaults(self):
        # VO descriptors are not pydantic fields; set them through the descriptor
        if self.total_price is None and self.unit_price is not None and self.quantity is not None:
            object.__setattr__(self, "total_price", self.unit_price.times(self.quantity))

    @invariant.post
    def quantity_must_be_positive(self):
        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})

    def snapshot(self, **changes) -> "CartItem":
        """Detached copy of this item, optionally with some fields replaced."""
        values = {
            "id": self.id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
            "modifiers": list(self.modifiers),
            "image_url": self.image_url,
            "available_stock": self.available_stock,
        }
        values.update(changes)
        return CartItem(**values)

    def clone(self) -> "CartItem":
        """Copy of this item with a fresh identity."""
        return self.snapshot(id=new_id())

    def with_quantity(self, quantity: int) -> "CartItem":
        return self.snapshot(quantity=quantity, total_price=self.unit_price.times(quantity))


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CartScopeKey:
    """Uniqueness boundary for active carts."""

    store_id: str
    profile_id: str | None = None
    session_id: str | None = None


_CART_FIELDS = (
    "id",
    "store_id",
    "profile_id",
    "session_id",
    "items",
    "status",
    "created_at",
    "updated_at",
    "metadata",
    "display_name",
    "context",
    "store_image_url",
    "min_subtotal",
    "max_item_count",
    "saved_promotion_kinds",
)


@cartkit.aggregate
class Cart:
    id = Identifier(identifier=True, default=new_id)
    store_id = Identifier(required=True)
    profile_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)  # Nullable for sessionless carts
    items = HasMany(CartItem)
    status: CartStatus = CartStatus.ACTIVE
    created_at = DateTime(default=utc_now)
    updated_at = DateTime(default=utc_now)
    metadata = Dict()
    display_name = String(max_length=255)
    context = String(max_length=255)
    store_image_url = String(max_length=2048, sanitize=False)
    min_subtotal = ValueObject(Money)
    max_item_count = Integer()
    saved_promotion_kinds = List()

    @invariant.post
    def item_ids_must_be_unique(self):
        item_ids = [item.id for item in self.items]
        if len(item_ids) != len(set(item_ids)):
            raise ValidationError({"items": ["Item ids must be unique within a cart"]})

    @property
    def is_guest(self) -> bool:
        return self.profile_id is None

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def scope_key(self) -> CartScopeKey:
        return CartScopeKey(self.store_id, self.profile_id, self.session_id)

    @property
    def line_count(self) -> int:
        return len(self.items)

    def find_item(self, item_id: str) -> CartItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def evolve(self, **changes) -> "Cart":
        """Build a detached copy of this cart with ``changes`` applied.

        Items are re-created so the copy never shares child entities with
        the original aggregate.
        """
        values = {name: getattr(self, name) for name in _CART_FIELDS}
        values.update(changes)
        values["items"] = [item.snapshot() for item in values["items"]]
        values["metadata"] = dict(values["metadata"] or {})
        values["saved_promotion_kinds"] = list(values["saved_promotion_kinds"] or [])
        return Cart(**values)

    # -------------------------------------------------------------------
    # Item collection changes (pure; persistence is the manager's job)
    # -------------------------------------------------------------------
    def with_item_added(self, item: CartItem) -> "Cart":
        if self.find_item(item.id) is not None:
            raise ValidationError({"item_id": ["Item already exists in cart"]})
        return self.evolve(items=[*self.items, item])

    def with_item_replaced(self, item: CartItem) -> "Cart":
        if self.find_item(item.id) is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return self.evolve(items=[item if existing.id == item.id else existing for existing in self.items])

    def with_item_removed(self, item_id: str) -> "Cart":
        if self.find_item(item_id) is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return self.evolve(items=[item for item in self.items if item.id != item_id])

    def cloned_items(self) -> list[CartItem]:
        return [item.clone() for item in self.items]
