"""Optimistic follow/unfollow with rollback on remote failure."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import MutationError
from .identity import normalize_address
from .notifications import NotificationEmitter, NotificationKind
from .reducers import FollowDelta
from .search import SearchResolver
from .services import FollowMutator
from .session import WalletSession
from .store import FollowListStore

logger = logging.getLogger(__name__)

FOLLOW = "follow"
UNFOLLOW = "unfollow"

SUCCESS_MESSAGES = {
    FOLLOW: "Follow Success!",
    UNFOLLOW: "Unfollow Success!",
}
FAILURE_MESSAGES = {
    FOLLOW: "Follow Failed!",
    UNFOLLOW: "Unfollow Failed!",
}


class MutationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class MutationOutcome:
    state: MutationState
    intent: Optional[str] = None
    address: Optional[str] = None
    error: Optional[MutationError] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is MutationState.COMMITTED


class FollowMutationEngine:
    """Flips local state first, then asks the mutator to confirm.

    The optimistic step updates the live search result and the store's
    ``followings`` together before the remote call is awaited, so the two
    never disagree. A failed (or cancelled) call restores both to their
    pre-mutation values. One mutation per target address may be pending.
    """

    def __init__(
        self,
        session: WalletSession,
        resolver: SearchResolver,
        store: FollowListStore,
        mutator: FollowMutator,
        notifier: NotificationEmitter,
    ) -> None:
        self._session = session
        self._resolver = resolver
        self._store = store
        self._mutator = mutator
        self._notifier = notifier
        self._pending: Dict[str, str] = {}

    @property
    def in_progress(self) -> bool:
        return bool(self._pending)

    def is_pending(self, address: str) -> bool:
        return normalize_address(address) in self._pending

    def state_for(self, address: str) -> MutationState:
        return MutationState.PENDING if self.is_pending(address) else MutationState.IDLE

    async def toggle_follow(self, address: Optional[str] = None) -> MutationOutcome:
        """Follow the live search result if not followed yet, otherwise unfollow it."""

        result = self._resolver.result
        if result is None or not self._session.connected:
            return MutationOutcome(MutationState.REJECTED, reason="no live search result")
        target = result.identity.address
        if address is not None and normalize_address(address) != target:
            return MutationOutcome(MutationState.REJECTED, address=target, reason="target is not the live result")
        if target in self._pending:
            logger.debug("Ignoring toggle for %s; %s already pending", target, self._pending[target])
            return MutationOutcome(
                MutationState.REJECTED,
                intent=self._pending[target],
                address=target,
                reason="mutation already pending",
            )

        following = not result.is_following
        intent = FOLLOW if following else UNFOLLOW
        generation = self._session.generation

        self._pending[target] = intent
        self._resolver.set_follow_status(target, following)
        delta = self._store.apply_follow_delta(result.identity, following)
        try:
            try:
                if following:
                    await self._mutator.follow(target)
                else:
                    await self._mutator.unfollow(target)
            except asyncio.CancelledError:
                self._rollback(target, following, delta, generation)
                raise
            except MutationError as exc:
                return self._fail(intent, target, following, delta, generation, exc)
            except Exception as exc:
                return self._fail(intent, target, following, delta, generation, MutationError(intent, target, exc))
        finally:
            self._pending.pop(target, None)

        if not self._session.is_current(generation):
            logger.info("%s %s confirmed after the session changed", intent.capitalize(), target)
        else:
            # A lookup or reload that finished while pending may carry pre-mutation state.
            self._resolver.set_follow_status(target, following)
            self._store.confirm_follow_delta(result.identity, following, delta)
            logger.info("%s %s committed", intent.capitalize(), target)
        self._notifier.emit(SUCCESS_MESSAGES[intent], NotificationKind.SUCCESS)
        return MutationOutcome(MutationState.COMMITTED, intent=intent, address=target)

    def _fail(
        self,
        intent: str,
        target: str,
        following: bool,
        delta: Optional[FollowDelta],
        generation: int,
        error: MutationError,
    ) -> MutationOutcome:
        self._rollback(target, following, delta, generation)
        logger.error("%s %s failed; local state rolled back: %s", intent.capitalize(), target, error)
        self._notifier.emit(FAILURE_MESSAGES[intent], NotificationKind.ERROR)
        return MutationOutcome(MutationState.FAILED, intent=intent, address=target, error=error)

    def _rollback(self, target: str, following: bool, delta: Optional[FollowDelta], generation: int) -> None:
        if not self._session.is_current(generation):
            return
        self._resolver.set_follow_status(target, not following)
        if delta is not None:
            self._store.revert_follow_delta(delta)
