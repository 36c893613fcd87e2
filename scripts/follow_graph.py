#!/usr/bin/env python3
"""Print a wallet's follow lists, credit score and one lookup's follow status."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cybergraph.config import GraphSettings, get_graph_settings, get_log_dir  # noqa: E402
from cybergraph.controller import FollowGraphController  # noqa: E402
from cybergraph.errors import CyberGraphError, MutationError  # noqa: E402
from cybergraph.logging_utils import setup_logging  # noqa: E402
from cybergraph.models import FollowGraphView, FollowListKind, Network, Page  # noqa: E402
from cybergraph.query_client import CyberConnectQueryClient  # noqa: E402
from cybergraph.session import WalletSession  # noqa: E402

CHECK = "✓"
CROSS = "✗"

logger = logging.getLogger("follow_graph")


class ReadOnlyMutator:
    """Follow/unfollow need a wallet signer, which this script does not have."""

    async def follow(self, address: str) -> None:
        raise MutationError("follow", address, RuntimeError("no wallet signer available"))

    async def unfollow(self, address: str) -> None:
        raise MutationError("unfollow", address, RuntimeError("no wallet signer available"))


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect a wallet's position in the CyberConnect social graph.")
    parser.add_argument("--address", default=os.getenv("WALLET_ADDRESS"), help="Signed-in wallet address.")
    parser.add_argument("--lookup", default=None, help="Address to resolve relative to --address.")
    parser.add_argument("--more-followers", type=int, default=0, help="Extra follower pages to load.")
    parser.add_argument("--more-followings", type=int, default=0, help="Extra following pages to load.")
    parser.add_argument("--page-size", type=int, default=None)
    parser.add_argument("--namespace", default=None)
    parser.add_argument("--network", choices=[n.value for n in Network], default=None)
    parser.add_argument("--endpoint", default=None)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--quiet", action="store_true", help="Only write the log file.")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Optional[GraphSettings] = None) -> GraphSettings:
    settings = base or get_graph_settings()
    overrides = {}
    if args.page_size is not None:
        if args.page_size <= 0:
            raise ValueError("--page-size must be > 0")
        overrides["page_size"] = int(args.page_size)
    if args.namespace:
        overrides["namespace"] = args.namespace
    if args.network:
        overrides["network"] = Network(args.network)
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    return replace(settings, **overrides)


def format_page(title: str, total: int, page: Page) -> List[str]:
    lines = [f"{title}: {total} (showing {len(page.items)}{', more available' if page.has_more else ''})"]
    for idx, identity in enumerate(page.items, start=1):
        lines.append(f"  {idx:3d}. {identity.display_name}  {identity.address}")
    return lines


def format_view(address: str, view: FollowGraphView) -> List[str]:
    lines = [f"address: {address}", f"cybercredit score: {view.credit_score}"]
    lines.extend(format_page("followers", view.follower_count, view.followers))
    lines.extend(format_page("followings", view.following_count, view.followings))
    return lines


async def run(
    args: argparse.Namespace,
    settings: GraphSettings,
    query=None,
    session: Optional[WalletSession] = None,
) -> int:
    own_client = query is None
    query = query or CyberConnectQueryClient(settings)
    controller = FollowGraphController(query, ReadOnlyMutator(), session=session, settings=settings)
    try:
        view = await controller.connect_wallet(args.address)
        if view is None:
            print(f"{CROSS} no follow lists found for {args.address}")
            return 1

        for kind, pages in (
            (FollowListKind.FOLLOWERS, args.more_followers),
            (FollowListKind.FOLLOWINGS, args.more_followings),
        ):
            for _ in range(max(0, pages)):
                if not controller.view.page(kind).has_more:
                    break
                await controller.load_more(kind)

        for line in format_view(controller.session.address, controller.view):
            print(line)

        if args.lookup:
            result = await controller.resolve(args.lookup)
            if result is None:
                print(f"{CROSS} lookup {args.lookup}: no result (invalid, self or unknown address)")
            else:
                status = "following" if result.is_following else "not following"
                print(f"{CHECK} lookup {result.identity.display_name}: {status}")
        return 0
    finally:
        if own_client:
            await query.aclose()


def main(argv: List[str]) -> int:
    args = parse_args(argv)
    session = WalletSession()
    setup_logging(
        console_level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        quiet=args.quiet,
        log_dir=get_log_dir(),
        session=session,
    )
    if not args.address:
        print(f"{CROSS} --address (or WALLET_ADDRESS) is required")
        return 2

    try:
        settings = build_settings(args)
        return asyncio.run(run(args, settings, session=session))
    except (CyberGraphError, ValueError, RuntimeError) as exc:
        logger.error("follow_graph failed: %s", exc)
        print(f"{CROSS} {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
