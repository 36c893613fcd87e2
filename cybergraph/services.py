"""Contracts for the external collaborators the engine talks to."""
from __future__ import annotations

from typing import Optional, Protocol

from .models import FollowGraphView, Network, SearchResult


class FollowQueryService(Protocol):
    """Read side of the social graph. Failures raise ``QueryServiceError``."""

    async def search_user_info(self, from_addr: str, to_addr: str, network: Network) -> Optional[SearchResult]:
        ...

    async def follow_list_info(
        self,
        address: str,
        namespace: str,
        network: Network,
        *,
        following_first: Optional[int] = None,
        follower_first: Optional[int] = None,
        following_after: Optional[str] = None,
        follower_after: Optional[str] = None,
    ) -> Optional[FollowGraphView]:
        ...


class FollowMutator(Protocol):
    """Write side of the social graph (wallet-signed connect/disconnect)."""

    async def follow(self, address: str) -> None:
        ...

    async def unfollow(self, address: str) -> None:
        ...
