"""Follow-graph synchronization engine for a wallet-based social graph."""

from __future__ import annotations

from .controller import FollowGraphController
from .errors import CyberGraphError, InvalidAddressError, MutationError, QueryServiceError
from .identity import format_address, is_valid_address, merge_identities, normalize_address
from .models import FollowGraphView, FollowListKind, FollowStatus, Identity, Network, Page, SearchResult
from .mutation import FollowMutationEngine, MutationOutcome, MutationState
from .notifications import Notification, NotificationEmitter, NotificationKind
from .search import SearchResolver
from .session import WalletSession
from .store import FollowListStore

__all__ = [
    "CyberGraphError",
    "FollowGraphController",
    "FollowGraphView",
    "FollowListKind",
    "FollowListStore",
    "FollowMutationEngine",
    "FollowStatus",
    "Identity",
    "InvalidAddressError",
    "MutationError",
    "MutationOutcome",
    "MutationState",
    "Network",
    "Notification",
    "NotificationEmitter",
    "NotificationKind",
    "Page",
    "QueryServiceError",
    "SearchResolver",
    "SearchResult",
    "WalletSession",
    "format_address",
    "is_valid_address",
    "merge_identities",
    "normalize_address",
]
