"""Cart store abstraction with a pluggable persistence backend."""

import os

from cartkit.store.port import CartStore

_store_instance: CartStore | None = None


def get_store() -> CartStore:
    """Return the configured cart store (singleton).

    Uses InMemoryCartStore by default. Select a backend with the
    CARTKIT_STORE environment variable.
    """
    global _store_instance
    if _store_instance is None:
        backend = os.environ.get("CARTKIT_STORE", "memory")
        if backend == "memory":
            from cartkit.store.memory import InMemoryCartStore

            _store_instance = InMemoryCartStore()
        else:
            raise ValueError(f"Unknown cart store: {backend}")
    return _store_instance


def set_store(store: CartStore) -> None:
    """Install a specific store instance (useful for testing)."""
    global _store_instance
    _store_instance = store


def reset_store() -> None:
    """Reset the store singleton (useful for testing)."""
    global _store_instance
    _store_instance = None
