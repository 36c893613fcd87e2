"""Resolve a looked-up address against the signed-in user."""
from __future__ import annotations

import logging
from typing import Optional, Set

from .config import GraphSettings, get_graph_settings
from .errors import QueryServiceError
from .identity import is_valid_address, normalize_address
from .models import SearchResult
from .reducers import with_follow_status
from .services import FollowQueryService
from .session import WalletSession

logger = logging.getLogger(__name__)


class SearchResolver:
    """Holds at most one live ``SearchResult``.

    Every call to ``resolve`` is tagged with the input it was issued for and a
    sequence number. A response is applied only while its input is still the
    latest one, no newer response has been applied, and the session has not
    changed in the meantime.
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
        self._result: Optional[SearchResult] = None
        self._latest_input: Optional[str] = None
        self._seq = 0
        self._applied_seq = 0
        self._inflight: Set[int] = set()
        session.subscribe(self._on_session_change)

    @property
    def result(self) -> Optional[SearchResult]:
        return self._result

    @property
    def latest_input(self) -> Optional[str]:
        return self._latest_input

    @property
    def searching(self) -> bool:
        return self._seq in self._inflight

    def invalidate(self) -> None:
        """Drop the live result and orphan every in-flight lookup."""
        self._result = None
        self._latest_input = None
        self._seq += 1
        self._applied_seq = self._seq

    def _on_session_change(self, previous: Optional[str], current: Optional[str]) -> None:
        self.invalidate()

    async def resolve(self, to_addr: Optional[str]) -> Optional[SearchResult]:
        self._seq += 1
        seq = self._seq
        tag = normalize_address(to_addr)
        self._latest_input = tag

        from_addr = self._session.address
        if not is_valid_address(tag) or not from_addr or tag == from_addr:
            self._result = None
            return None

        generation = self._session.generation
        self._inflight.add(seq)
        try:
            fetched = await self._query.search_user_info(from_addr, tag, self._settings.network)
        except QueryServiceError as exc:
            logger.warning("Lookup of %s failed: %s", tag, exc)
            return None
        finally:
            self._inflight.discard(seq)

        if not self._session.is_current(generation) or tag != self._latest_input or seq < self._applied_seq:
            logger.debug("Discarding stale lookup response for %s (seq=%d)", tag, seq)
            return None

        self._applied_seq = seq
        self._result = fetched
        if fetched is None:
            logger.info("No identity found for %s", tag)
        return fetched

    def set_follow_status(self, address: str, is_following: bool) -> bool:
        """Overwrite ``is_following`` on the live result if it is for ``address``."""
        if self._result is None or self._result.identity.address != normalize_address(address):
            return False
        self._result = with_follow_status(self._result, is_following)
        return True
