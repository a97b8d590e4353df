# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Antigravity Quota Checker CLI.

Usage:
    antigravity-quota                 # one-shot table
    antigravity-quota --watch         # refresh every 5 minutes with deltas
    antigravity-quota --json          # JSON output
    TZ=America/New_York antigravity-quota
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from quota_library.config import QuotaCheckerConfig
from quota_library.core.errors import ConfigurationError
from quota_library.core.types import QuotaSnapshot
from quota_library.credential_store import discover_accounts
from quota_library.providers.antigravity_quota_client import AntigravityQuotaClient
from quota_library.usage.delta import DeltaTracker
from quota_library.usage.poller import poll_quota, watch_quota

from .quota_viewer import QuotaViewer

EXAMPLES = """Examples:
  antigravity-quota
  antigravity-quota --watch
  antigravity-quota --json
  TZ=America/New_York antigravity-quota
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="antigravity-quota",
        description="Antigravity Quota Checker",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--watch", action="store_true", help="Refresh periodically and show deltas"
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--table", action="store_true", help="Output a table (default for non-JSON)"
    )
    output.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument(
        "--tz", metavar="ZONE", help="Time zone for reset times (default: TZ or local)"
    )
    parser.add_argument(
        "--interval",
        type=int,
        metavar="SECONDS",
        help="Refresh interval in watch mode (default: QUOTA_REFRESH_INTERVAL or 300)",
    )
    parser.add_argument(
        "--profiles", metavar="PATH", help="Path to auth-profiles.json"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def setup_logging(verbose: bool = False) -> None:
    """Route library logs through rich on stderr, keeping stdout for output."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logger = logging.getLogger("quota_library")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


async def run(args: argparse.Namespace, config: QuotaCheckerConfig) -> None:
    accounts = discover_accounts(args.profiles or config.auth_profiles_path)

    viewer = QuotaViewer(
        timezone_name=args.tz or config.timezone_name,
        account_count=len(accounts),
    )

    def render(snapshot: QuotaSnapshot) -> None:
        if args.json:
            viewer.show_json(snapshot)
        else:
            viewer.show_table(snapshot, clear=args.watch)

    async with AntigravityQuotaClient(timeout=config.request_timeout) as quota_client:
        if args.watch:
            interval = args.interval if args.interval and args.interval > 0 else config.refresh_interval
            await watch_quota(
                accounts,
                quota_client,
                render,
                interval=interval,
                tracker=DeltaTracker(),
                concurrency=config.fetch_concurrency,
            )
        else:
            snapshot = await poll_quota(
                accounts, quota_client, concurrency=config.fetch_concurrency
            )
            render(snapshot)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(args.verbose)
    config = QuotaCheckerConfig.from_env()
    error_console = Console(stderr=True)

    try:
        asyncio.run(run(args, config))
    except ConfigurationError as e:
        error_console.print(Text(e.message, style="red"))
        if e.hint:
            error_console.print(Text(e.hint))
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


def run_quota_checker() -> None:
    """Entry point for the antigravity-quota console script."""
    sys.exit(main())


if __name__ == "__main__":
    run_quota_checker()
