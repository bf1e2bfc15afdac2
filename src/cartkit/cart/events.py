"""Domain events emitted by the cart manager.

Events carry identifiers only; subscribers load current state through the
manager when they need it.
"""

from protean.fields import Identifier, String

from cartkit.domain import cartkit


@cartkit.event(part_of="Cart")
class CartCreated:
    """A new cart was persisted."""

    __version__ = 1

    cart_id = Identifier(required=True)


@cartkit.event(part_of="Cart")
class CartUpdated:
    """An existing cart was saved with changes."""

    __version__ = 1

    cart_id = Identifier(required=True)


@cartkit.event(part_of="Cart")
class CartDeleted:
    __version__ = 1

    cart_id = Identifier(required=True)


@cartkit.event(part_of="Cart")
class ActiveCartChanged:
    """The active cart of a scope changed; ``cart_id`` is None when cleared."""

    __version__ = 1

    store_id = Identifier(required=True)
    profile_id = Identifier()
    session_id = String(max_length=255)
    cart_id = Identifier()


CartEvent = CartCreated | CartUpdated | CartDeleted | ActiveCartChanged
