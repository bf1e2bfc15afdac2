"""Cart scope filters and the query descriptor handed to storage.

Profile and session filters are explicit sum types so "no filter" and
"must be unset" are never confused: ``AnySession`` matches every cart while
``Sessionless`` matches only carts whose ``session_id`` is None.
"""

from dataclasses import dataclass
from enum import Enum

from cartkit.cart.cart import Cart, CartStatus


# ---------------------------------------------------------------------------
# Profile filter
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AnyProfile:
    pass


@dataclass(frozen=True)
class GuestOnly:
    pass


@dataclass(frozen=True)
class ForProfile:
    profile_id: str


ProfileFilter = AnyProfile | GuestOnly | ForProfile


# ---------------------------------------------------------------------------
# Session filter
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AnySession:
    pass


@dataclass(frozen=True)
class Sessionless:
    pass


@dataclass(frozen=True)
class ForSession:
    session_id: str


SessionFilter = AnySession | Sessionless | ForSession


def profile_filter_for(profile_id: str | None) -> ProfileFilter:
    """Map an optional profile id to a filter; None means guest carts only."""
    return GuestOnly() if profile_id is None else ForProfile(profile_id)


def session_filter_for(session_id: str | None) -> SessionFilter:
    """Map an optional session id to a filter; None means sessionless carts only."""
    return Sessionless() if session_id is None else ForSession(session_id)


def matches_profile(profile: ProfileFilter, profile_id: str | None) -> bool:
    match profile:
        case AnyProfile():
            return True
        case GuestOnly():
            return profile_id is None
        case ForProfile(profile_id=wanted):
            return profile_id == wanted
    raise TypeError(f"Unknown profile filter: {profile!r}")


def matches_session(session: SessionFilter, session_id: str | None) -> bool:
    match session:
        case AnySession():
            return True
        case Sessionless():
            return session_id is None
        case ForSession(session_id=wanted):
            return session_id == wanted
    raise TypeError(f"Unknown session filter: {session!r}")


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------
class CartSort(Enum):
    CREATED_AT_ASCENDING = "created_at_ascending"
    CREATED_AT_DESCENDING = "created_at_descending"
    UPDATED_AT_ASCENDING = "updated_at_ascending"
    UPDATED_AT_DESCENDING = "updated_at_descending"

    @property
    def attribute(self) -> str:
        return "created_at" if self.value.startswith("created") else "updated_at"

    @property
    def descending(self) -> bool:
        return self.value.endswith("descending")


@dataclass(frozen=True)
class CartQuery:
    """Storage-agnostic filter/sort descriptor.

    ``store_id=None`` spans every store. ``statuses`` of None or an empty set
    disables status filtering.
    """

    store_id: str | None = None
    profile: ProfileFilter = AnyProfile()
    session: SessionFilter = Sessionless()
    statuses: frozenset[CartStatus] | None = None
    sort: CartSort = CartSort.UPDATED_AT_DESCENDING

    def __post_init__(self) -> None:
        if self.statuses is not None:
            object.__setattr__(self, "statuses", frozenset(self.statuses))

    @classmethod
    def active(cls, store_id: str, profile_id: str | None = None, session_id: str | None = None) -> "CartQuery":
        """The active cart of one exact scope."""
        return cls(
            store_id=store_id,
            profile=profile_filter_for(profile_id),
            session=session_filter_for(session_id),
            statuses=frozenset({CartStatus.ACTIVE}),
        )

    @classmethod
    def active_across_stores(cls, profile_id: str | None = None, session_id: str | None = None) -> "CartQuery":
        """Active carts of one session group, any store."""
        return cls(
            profile=profile_filter_for(profile_id),
            session=session_filter_for(session_id),
            statuses=frozenset({CartStatus.ACTIVE}),
        )

    @classmethod
    def active_across_stores_and_sessions(cls, profile_id: str | None = None) -> "CartQuery":
        return cls(
            profile=profile_filter_for(profile_id),
            session=AnySession(),
            statuses=frozenset({CartStatus.ACTIVE}),
        )

    def matches(self, cart: Cart) -> bool:
        """Whether ``cart`` satisfies every filter of this query."""
        if self.store_id is not None and cart.store_id != self.store_id:
            return False
        if not matches_profile(self.profile, cart.profile_id):
            return False
        if not matches_session(self.session, cart.session_id):
            return False
        if self.statuses and cart.status not in self.statuses:
            return False
        return True

    def sorted(self, carts: list[Cart]) -> list[Cart]:
        return sorted(carts, key=lambda cart: getattr(cart, self.sort.attribute), reverse=self.sort.descending)
