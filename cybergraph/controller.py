"""Facade wiring session, store, resolver and mutation engine for a UI."""
from __future__ import annotations

import logging
from typing import Optional

from .config import GraphSettings, get_graph_settings
from .errors import InvalidAddressError
from .models import FollowGraphView, FollowListKind, SearchResult
from .mutation import FollowMutationEngine, MutationOutcome
from .notifications import NotificationEmitter, NotificationKind
from .search import SearchResolver
from .services import FollowMutator, FollowQueryService
from .session import WalletSession
from .store import FollowListStore

logger = logging.getLogger(__name__)


class FollowGraphController:
    """What the UI layer sees: current state, busy flags and the operations."""

    def __init__(
        self,
        query: FollowQueryService,
        mutator: FollowMutator,
        *,
        session: Optional[WalletSession] = None,
        settings: Optional[GraphSettings] = None,
        notifier: Optional[NotificationEmitter] = None,
    ) -> None:
        settings = settings or get_graph_settings()
        self.session = session or WalletSession()
        self.notifier = notifier or NotificationEmitter()
        self.store = FollowListStore(self.session, query, settings)
        self.resolver = SearchResolver(self.session, query, settings)
        self.engine = FollowMutationEngine(self.session, self.resolver, self.store, mutator, self.notifier)

    @property
    def view(self) -> Optional[FollowGraphView]:
        return self.store.view

    @property
    def search_result(self) -> Optional[SearchResult]:
        return self.resolver.result

    @property
    def searching(self) -> bool:
        return self.resolver.searching

    @property
    def follow_in_progress(self) -> bool:
        return self.engine.in_progress

    @property
    def credit_score(self) -> Optional[int]:
        view = self.store.view
        return view.credit_score if view is not None else None

    async def initialize(self) -> Optional[FollowGraphView]:
        return await self.store.initialize()

    async def resolve(self, to_addr: Optional[str]) -> Optional[SearchResult]:
        return await self.resolver.resolve(to_addr)

    async def load_more(self, kind: FollowListKind) -> Optional[FollowGraphView]:
        return await self.store.load_more(kind)

    async def toggle_follow(self, address: Optional[str] = None) -> MutationOutcome:
        return await self.engine.toggle_follow(address)

    async def connect_wallet(self, address: str) -> Optional[FollowGraphView]:
        """Switch the session to ``address`` and load its lists."""
        try:
            self.session.connect(address)
        except InvalidAddressError as exc:
            logger.error("Cannot connect wallet: %s", exc)
            self.notifier.emit("Invalid wallet address", NotificationKind.ERROR)
            raise
        return await self.initialize()

    def disconnect_wallet(self) -> None:
        self.session.disconnect()
