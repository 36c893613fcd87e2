"""Async GraphQL client for the CyberConnect social-graph indexer."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import GraphSettings, get_graph_settings
from .errors import QueryServiceError
from .models import FollowGraphView, Network, SearchResult

LOGGER = logging.getLogger(__name__)

FOLLOW_LIST_INFO_QUERY = """
query FollowListInfo(
  $address: String!
  $namespace: String
  $network: Network
  $followingFirst: Int
  $followingAfter: String
  $followerFirst: Int
  $followerAfter: String
) {
  identity(address: $address, network: $network) {
    followingCount(namespace: $namespace)
    followerCount(namespace: $namespace)
    followings(namespace: $namespace, first: $followingFirst, after: $followingAfter) {
      pageInfo {
        endCursor
        hasNextPage
      }
      list {
        address
        domain
        avatar
      }
    }
    followers(namespace: $namespace, first: $followerFirst, after: $followerAfter) {
      pageInfo {
        endCursor
        hasNextPage
      }
      list {
        address
        domain
        avatar
      }
    }
  }
}
"""

SEARCH_USER_INFO_QUERY = """
query SearchUserInfo($fromAddr: String!, $toAddr: String!, $network: Network) {
  identity(address: $toAddr, network: $network) {
    address
    domain
    avatar
  }
  connections(fromAddr: $fromAddr, toAddrList: [$toAddr], network: $network) {
    followStatus {
      isFollowing
      isFollowed
    }
  }
}
"""


class CyberConnectQueryClient:
    """Read-only query service backed by the indexer's GraphQL endpoint."""

    def __init__(
        self,
        settings: Optional[GraphSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or get_graph_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.timeout_seconds),
            headers={"Content-Type": "application/json", "User-Agent": "cybergraph/0.1"},
        )

    async def __aenter__(self) -> "CyberConnectQueryClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------
    async def _execute(self, operation: str, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            "operationName": operation,
            "query": query,
            "variables": {k: v for k, v in variables.items() if v is not None},
        }
        try:
            response = await self._client.post(self._settings.endpoint, json=payload)
        except httpx.HTTPError as exc:
            LOGGER.error("%s request failed: %s", operation, exc)
            raise QueryServiceError(operation, str(exc)) from exc

        if response.status_code != 200:
            LOGGER.error("%s returned %s: %s", operation, response.status_code, response.text[:200])
            raise QueryServiceError(operation, f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise QueryServiceError(operation, "response was not JSON", status_code=200) from exc

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            message = "; ".join(str(err.get("message", err)) for err in errors if isinstance(err, dict)) or str(errors)
            LOGGER.error("%s returned GraphQL errors: %s", operation, message)
            raise QueryServiceError(operation, message, status_code=200)

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise QueryServiceError(operation, "response had no data object", status_code=200)
        return data

    # ------------------------------------------------------------------
    # Public queries
    # ------------------------------------------------------------------
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
        data = await self._execute(
            "FollowListInfo",
            FOLLOW_LIST_INFO_QUERY,
            {
                "address": address,
                "namespace": namespace,
                "network": Network(network).value,
                "followingFirst": following_first,
                "followingAfter": following_after,
                "followerFirst": follower_first,
                "followerAfter": follower_after,
            },
        )
        identity = data.get("identity")
        if not identity:
            LOGGER.info("No identity returned for %s", address)
            return None
        return FollowGraphView.from_payload(identity)

    async def search_user_info(self, from_addr: str, to_addr: str, network: Network) -> Optional[SearchResult]:
        data = await self._execute(
            "SearchUserInfo",
            SEARCH_USER_INFO_QUERY,
            {"fromAddr": from_addr, "toAddr": to_addr, "network": Network(network).value},
        )
        if not data.get("identity"):
            LOGGER.info("No identity returned for %s", to_addr)
            return None
        return SearchResult.from_payload(data)
