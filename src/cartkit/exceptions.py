"""Cart error taxonomy.

Every error carries a ``messages`` dict (``field -> [message, ...]``) in the
same shape protean uses for its own exceptions.

- ``CartNotFoundError``: the cart id does not exist.
- ``CartConflictError``: the request contradicts current state (occupied
  scope, duplicate stores in a session group, missing guest cart).
- ``CartNotActiveError``: mutation attempted on an archived cart.
- ``InvalidStatusTransition``: the status state machine rejected a move.

Business-rule violations are raised as plain ``protean.exceptions.ValidationError``.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

__all__ = [
    "CartConflictError",
    "CartNotActiveError",
    "CartNotFoundError",
    "InvalidStatusTransition",
    "ValidationError",
]


class _CartError:
    def __init__(self, messages: dict[str, list[str]]) -> None:
        super().__init__(messages)
        self.messages = messages

    def __str__(self) -> str:
        return str(self.messages)


class CartNotFoundError(_CartError, ObjectNotFoundError):
    """Raised when a cart id cannot be loaded from the store."""


class CartConflictError(_CartError, InvalidOperationError):
    """Raised when an operation conflicts with the current cart state."""


class CartNotActiveError(CartConflictError):
    """Raised when mutating a cart that is no longer active."""


class InvalidStatusTransition(CartConflictError):
    """Raised when a status change is not allowed by the state machine."""
