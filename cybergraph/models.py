"""Value objects for the signed-in user's follow graph."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .identity import format_address, merge_identities, normalize_address


class Network(str, Enum):
    ETH = "ETH"
    SOLANA = "SOLANA"


class FollowListKind(str, Enum):
    FOLLOWERS = "followers"
    FOLLOWINGS = "followings"


@dataclass(frozen=True)
class Identity:
    """An address in the social graph plus pass-through profile data.

    Only ``address`` takes part in equality and hashing.
    """

    address: str
    domain: Optional[str] = field(default=None, compare=False)
    avatar: Optional[str] = field(default=None, compare=False)
    profile: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))

    @property
    def display_name(self) -> str:
        return self.domain or format_address(self.address)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Identity":
        extra = {k: v for k, v in payload.items() if k not in ("address", "domain", "avatar")}
        return cls(
            address=str(payload.get("address") or ""),
            domain=payload.get("domain") or None,
            avatar=payload.get("avatar") or None,
            profile=extra,
        )


@dataclass(frozen=True)
class FollowStatus:
    is_following: bool
    is_followed: bool = False


@dataclass(frozen=True)
class SearchResult:
    """The signed-in user's relationship to one looked-up identity."""

    identity: Identity
    follow_status: FollowStatus

    @property
    def is_following(self) -> bool:
        return self.follow_status.is_following

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SearchResult":
        connections = payload.get("connections") or []
        status: Dict[str, Any] = {}
        if connections:
            status = (connections[0] or {}).get("followStatus") or {}
        return cls(
            identity=Identity.from_payload(payload.get("identity") or {}),
            follow_status=FollowStatus(
                is_following=bool(status.get("isFollowing")),
                is_followed=bool(status.get("isFollowed")),
            ),
        )


@dataclass(frozen=True)
class Page:
    """One paginated list: items unique by address, plus the end cursor."""

    items: Tuple[Identity, ...] = ()
    cursor: Optional[str] = None
    has_more: bool = False

    @property
    def addresses(self) -> Tuple[str, ...]:
        return tuple(identity.address for identity in self.items)

    def __contains__(self, address: object) -> bool:
        return normalize_address(str(address)) in self.addresses

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "Page":
        payload = payload or {}
        page_info = payload.get("pageInfo") or {}
        cursor = page_info.get("endCursor") or None
        has_next = page_info.get("hasNextPage")
        items = merge_identities((), (Identity.from_payload(item) for item in payload.get("list") or []))
        return cls(
            items=items,
            cursor=cursor,
            has_more=cursor is not None and (has_next is None or bool(has_next)),
        )


@dataclass(frozen=True)
class FollowGraphView:
    """Aggregate follower/following view for the signed-in address."""

    follower_count: int = 0
    following_count: int = 0
    followers: Page = field(default_factory=Page)
    followings: Page = field(default_factory=Page)

    @property
    def credit_score(self) -> int:
        return self.follower_count + self.following_count

    def page(self, kind: FollowListKind) -> Page:
        return self.followers if FollowListKind(kind) is FollowListKind.FOLLOWERS else self.followings

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "FollowGraphView":
        return cls(
            follower_count=int(payload.get("followerCount") or 0),
            following_count=int(payload.get("followingCount") or 0),
            followers=Page.from_payload(payload.get("followers")),
            followings=Page.from_payload(payload.get("followings")),
        )
