"""Paginated follower/following lists for the signed-in address."""
from __future__ import annotations

import logging
from typing import Optional, Set, Tuple

from .config import GraphSettings, get_graph_settings
from .errors import QueryServiceError
from .models import FollowGraphView, FollowListKind, Identity
from .reducers import (
    FollowDelta,
    FollowDeltaReverted,
    FollowingAdded,
    FollowingRemoved,
    PageAppended,
    index_of,
    reduce_view,
)
from .services import FollowQueryService
from .session import WalletSession

logger = logging.getLogger(__name__)


class FollowListStore:
    """Owns the ``FollowGraphView`` of the current session.

    The view is replaced wholesale on ``initialize`` and whenever the session
    changes; each replacement bumps ``epoch`` so responses and deltas that
    belong to an older view are dropped instead of being merged into the new
    one.
    """

    def __init__(
        self,
        session: WalletSession,
        query: FollowQueryService,
        settings: Optional[GraphSettings] = None,
    ) -> None:
        self._session = session
        self._query = query
        self._settings = settings or get_graph_settings()
        self._view: Optional[FollowGraphView] = None
        self._epoch = 0
        self._init_seq = 0
        self._loading: Set[Tuple[int, FollowListKind]] = set()
        session.subscribe(self._on_session_change)

    @property
    def view(self) -> Optional[FollowGraphView]:
        return self._view

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def loading(self) -> bool:
        return any(epoch == self._epoch for epoch, _ in self._loading)

    def is_loading(self, kind: FollowListKind) -> bool:
        return (self._epoch, FollowListKind(kind)) in self._loading

    def reset(self) -> None:
        self._view = None
        self._epoch += 1
        self._init_seq += 1

    def _on_session_change(self, previous: Optional[str], current: Optional[str]) -> None:
        self.reset()

    # ------------------------------------------------------------------
    # Remote loads
    # ------------------------------------------------------------------
    async def initialize(self, address: Optional[str] = None) -> Optional[FollowGraphView]:
        """Fetch the first page of both lists for the session address."""

        session_addr = self._session.address
        if not session_addr:
            return None
        if address and not self._session.matches(address):
            logger.warning("Ignoring initialize for %s; session is %s", address, session_addr)
            return self._view

        generation = self._session.generation
        self._init_seq += 1
        init_seq = self._init_seq
        page_size = self._settings.page_size
        try:
            fetched = await self._query.follow_list_info(
                session_addr,
                self._settings.namespace,
                self._settings.network,
                following_first=page_size,
                follower_first=page_size,
            )
        except QueryServiceError as exc:
            logger.warning("Initial follow list load for %s failed: %s", session_addr, exc)
            return self._view

        if not self._session.is_current(generation) or init_seq != self._init_seq:
            logger.debug("Discarding stale follow list response for %s", session_addr)
            return self._view
        if fetched is None:
            return self._view

        self._view = fetched
        self._epoch += 1
        logger.info(
            "Loaded follow lists for %s: followers=%d followings=%d",
            session_addr,
            fetched.follower_count,
            fetched.following_count,
        )
        return self._view

    async def load_more(self, kind: FollowListKind) -> Optional[FollowGraphView]:
        """Fetch the page after the stored cursor and merge it without duplicates."""

        kind = FollowListKind(kind)
        view = self._view
        session_addr = self._session.address
        if view is None or not session_addr:
            return view
        page = view.page(kind)
        if not page.has_more or not page.cursor:
            return view

        key = (self._epoch, kind)
        if key in self._loading:
            logger.debug("load_more(%s) already in flight", kind.value)
            return view

        generation = self._session.generation
        page_size = self._settings.page_size
        if kind is FollowListKind.FOLLOWERS:
            params = {"follower_first": page_size, "follower_after": page.cursor}
        else:
            params = {"following_first": page_size, "following_after": page.cursor}

        self._loading.add(key)
        try:
            fetched = await self._query.follow_list_info(
                session_addr,
                self._settings.namespace,
                self._settings.network,
                **params,
            )
        except QueryServiceError as exc:
            logger.warning("Loading more %s for %s failed: %s", kind.value, session_addr, exc)
            return self._view
        finally:
            self._loading.discard(key)

        if not self._session.is_current(generation) or key[0] != self._epoch or self._view is None:
            logger.debug("Discarding stale %s page for %s", kind.value, session_addr)
            return self._view
        if fetched is None:
            return self._view

        incoming = fetched.page(kind)
        self._view = reduce_view(self._view, PageAppended(kind, incoming))
        logger.info(
            "Loaded %d more %s for %s (total=%d, has_more=%s)",
            len(incoming.items),
            kind.value,
            session_addr,
            len(self._view.page(kind).items),
            self._view.page(kind).has_more,
        )
        return self._view

    # ------------------------------------------------------------------
    # Local deltas
    # ------------------------------------------------------------------
    def apply_follow_delta(self, identity: Identity, following: bool) -> Optional[FollowDelta]:
        """Apply an optimistic follow/unfollow to ``followings`` and its count."""

        if self._view is None:
            return None
        delta = FollowDelta(
            identity=identity,
            following=following,
            prior_index=index_of(self._view, identity.address),
            epoch=self._epoch,
        )
        event = FollowingAdded(identity) if following else FollowingRemoved(identity)
        self._view = reduce_view(self._view, event)
        return delta

    def confirm_follow_delta(self, identity: Identity, following: bool, delta: Optional[FollowDelta]) -> bool:
        """Make a confirmed follow/unfollow visible in the current view.

        A no-op when ``delta`` was applied to the current view. A view loaded
        while the mutation was pending gets the change once, only if it does
        not already reflect it.
        """

        if self._view is None:
            return False
        if delta is not None and delta.epoch == self._epoch:
            return False
        listed = index_of(self._view, identity.address) is not None
        if following == listed:
            return False
        event = FollowingAdded(identity) if following else FollowingRemoved(identity)
        self._view = reduce_view(self._view, event)
        logger.debug(
            "Re-applied confirmed %s of %s to reloaded view",
            "follow" if following else "unfollow",
            identity.address,
        )
        return True

    def revert_follow_delta(self, delta: FollowDelta) -> bool:
        """Undo ``delta`` if the view it was applied to is still current."""

        if self._view is None or delta.epoch != self._epoch:
            logger.debug("Skipping revert for %s; view was replaced", delta.identity.address)
            return False
        self._view = reduce_view(self._view, FollowDeltaReverted(delta))
        return True
