"""Pure state transitions for the follow graph view and search result.

Every function takes the current immutable value plus an event and returns a
new value; nothing here performs I/O, so the store, the resolver and the
mutation engine all share the same transitions and tests can drive them
directly.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from .identity import merge_identities, normalize_address
from .models import FollowGraphView, FollowListKind, FollowStatus, Identity, Page, SearchResult


@dataclass(frozen=True)
class FollowDelta:
    """An optimistic follow/unfollow as applied to the view.

    ``prior_index`` is where the address sat in ``followings.items`` before
    the change (None when it was absent), which is enough to undo it exactly.
    ``epoch`` identifies the view instance the delta was applied to.
    """

    identity: Identity
    following: bool
    prior_index: Optional[int]
    epoch: int = 0


@dataclass(frozen=True)
class PageAppended:
    kind: FollowListKind
    page: Page


@dataclass(frozen=True)
class FollowingAdded:
    identity: Identity


@dataclass(frozen=True)
class FollowingRemoved:
    identity: Identity


@dataclass(frozen=True)
class FollowDeltaReverted:
    delta: FollowDelta


ViewEvent = Union[PageAppended, FollowingAdded, FollowingRemoved, FollowDeltaReverted]


def append_page(view: FollowGraphView, kind: FollowListKind, page: Page) -> FollowGraphView:
    """Merge a fetched page into ``kind`` and adopt its cursor."""
    current = view.page(kind)
    merged = Page(
        items=merge_identities(current.items, page.items),
        cursor=page.cursor,
        has_more=page.has_more,
    )
    if FollowListKind(kind) is FollowListKind.FOLLOWERS:
        return replace(view, followers=merged)
    return replace(view, followings=merged)


def add_following(view: FollowGraphView, identity: Identity) -> FollowGraphView:
    followings = replace(view.followings, items=merge_identities(view.followings.items, (identity,)))
    return replace(view, following_count=view.following_count + 1, followings=followings)


def remove_following(view: FollowGraphView, identity: Identity) -> FollowGraphView:
    items = tuple(item for item in view.followings.items if item.address != identity.address)
    followings = replace(view.followings, items=items)
    return replace(view, following_count=view.following_count - 1, followings=followings)


def revert_delta(view: FollowGraphView, delta: FollowDelta) -> FollowGraphView:
    """Undo ``delta``, restoring the list position the address had before it."""
    items = list(view.followings.items)
    present = delta.identity.address in view.followings
    if delta.following:
        count = view.following_count - 1
        if delta.prior_index is None and present:
            items = [item for item in items if item.address != delta.identity.address]
    else:
        count = view.following_count + 1
        if delta.prior_index is not None and not present:
            items.insert(min(delta.prior_index, len(items)), delta.identity)
    followings = replace(view.followings, items=tuple(items))
    return replace(view, following_count=count, followings=followings)


def reduce_view(view: FollowGraphView, event: ViewEvent) -> FollowGraphView:
    if isinstance(event, PageAppended):
        return append_page(view, event.kind, event.page)
    if isinstance(event, FollowingAdded):
        return add_following(view, event.identity)
    if isinstance(event, FollowingRemoved):
        return remove_following(view, event.identity)
    if isinstance(event, FollowDeltaReverted):
        return revert_delta(view, event.delta)
    raise TypeError(f"unsupported view event: {type(event).__name__}")


def index_of(view: FollowGraphView, address: str) -> Optional[int]:
    key = normalize_address(address)
    for idx, item in enumerate(view.followings.items):
        if item.address == key:
            return idx
    return None


def with_follow_status(result: SearchResult, is_following: bool) -> SearchResult:
    status = FollowStatus(is_following=is_following, is_followed=result.follow_status.is_followed)
    return replace(result, follow_status=status)
