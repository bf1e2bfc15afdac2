"""Demo data for local runs and tests."""

from datetime import datetime
from decimal import Decimal

from cartkit.cart.cart import Cart, CartItem, CartStatus, utc_now
from cartkit.cart.money import Money

DEMO_STORE_ID = "store_demo_1"
SECOND_DEMO_STORE_ID = "store_demo_2"
DEMO_PROFILE_ID = "user_demo_1"


def usd(amount: str) -> Money:
    return Money(amount=Decimal(amount), currency_code="USD")


def demo_items() -> list[CartItem]:
    return [
        CartItem(product_id="burger_combo", quantity=1, unit_price=usd("8.99")),
        CartItem(product_id="fries_large", quantity=2, unit_price=usd("2.49")),
    ]


def guest_cart(
    store_id: str = DEMO_STORE_ID,
    session_id: str | None = None,
    now: datetime | None = None,
) -> Cart:
    """Active guest cart holding a burger combo and two large fries."""
    now = now or utc_now()
    return Cart(
        store_id=store_id,
        session_id=session_id,
        items=demo_items(),
        status=CartStatus.ACTIVE,
        created_at=now,
        updated_at=now,
        display_name="Guest cart",
    )


def profile_cart(
    store_id: str = DEMO_STORE_ID,
    profile_id: str = DEMO_PROFILE_ID,
    session_id: str | None = None,
    status: CartStatus = CartStatus.ACTIVE,
    now: datetime | None = None,
) -> Cart:
    now = now or utc_now()
    return Cart(
        store_id=store_id,
        profile_id=profile_id,
        session_id=session_id,
        items=demo_items(),
        status=status,
        created_at=now,
        updated_at=now,
    )
