"""Cart discovery: builds queries and runs them against the store.

Read-only. Enforcing the one-active-cart rule is the manager's job.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from cartkit.cart.cart import Cart, CartStatus
from cartkit.cart.query import CartQuery, CartSort, SessionFilter, Sessionless, profile_filter_for
from cartkit.store.port import CartStore


@dataclass(frozen=True)
class ActiveCartGroup:
    """Active carts sharing one session, most recently updated first."""

    session_id: str | None
    carts: tuple[Cart, ...]


class CartDiscoveryService:
    def __init__(self, store: CartStore) -> None:
        self.store = store

    async def active_cart(
        self, store_id: str, profile_id: str | None = None, session_id: str | None = None
    ) -> Cart | None:
        carts = await self.store.fetch_carts(CartQuery.active(store_id, profile_id, session_id), limit=1)
        return carts[0] if carts else None

    async def active_carts_across_stores(
        self, profile_id: str | None = None, session_id: str | None = None
    ) -> list[Cart]:
        return await self.store.fetch_carts(CartQuery.active_across_stores(profile_id, session_id))

    async def active_cart_groups(self, profile_id: str | None = None) -> list[ActiveCartGroup]:
        """Active carts of a profile (or guest) grouped by session.

        Groups are ordered by their most recently updated cart.
        """
        carts = await self.store.fetch_carts(CartQuery.active_across_stores_and_sessions(profile_id))
        return group_by_session(carts)

    async def carts(
        self,
        store_id: str | None = None,
        profile_id: str | None = None,
        session: SessionFilter = Sessionless(),
        statuses: Iterable[CartStatus] | None = None,
        sort: CartSort = CartSort.UPDATED_AT_DESCENDING,
        limit: int | None = None,
    ) -> list[Cart]:
        query = CartQuery(
            store_id=store_id,
            profile=profile_filter_for(profile_id),
            session=session,
            statuses=frozenset(statuses) if statuses is not None else None,
            sort=sort,
        )
        return await self.store.fetch_carts(query, limit=limit)


def group_by_session(carts: Iterable[Cart]) -> list[ActiveCartGroup]:
    by_session: dict[str | None, list[Cart]] = defaultdict(list)
    for cart in carts:
        by_session[cart.session_id].append(cart)

    groups = [
        ActiveCartGroup(
            session_id=session_id,
            carts=tuple(sorted(members, key=lambda cart: cart.updated_at, reverse=True)),
        )
        for session_id, members in by_session.items()
    ]
    groups.sort(key=lambda group: group.carts[0].updated_at, reverse=True)
    return groups
