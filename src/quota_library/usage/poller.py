# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Poll driver: one collection pass into a snapshot, and the repeating
watch loop that shares a DeltaTracker between passes.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from ..core.constants import DEFAULT_FETCH_CONCURRENCY, DEFAULT_REFRESH_INTERVAL, TARGET_MODELS
from ..core.errors import BanCheck
from ..core.types import Account, QuotaSnapshot
from .collector import QuotaClient, collect_quota
from .delta import DeltaTracker
from .projection import project

lib_logger = logging.getLogger("quota_library")

SnapshotCallback = Callable[[QuotaSnapshot], Union[None, Awaitable[None]]]


async def poll_quota(
    accounts: Sequence[Account],
    quota_client: QuotaClient,
    tracker: Optional[DeltaTracker] = None,
    target_models: Sequence[str] = TARGET_MODELS,
    ban_classifier: Optional[BanCheck] = None,
    concurrency: int = DEFAULT_FETCH_CONCURRENCY,
    now: Optional[Callable[[], datetime]] = None,
) -> QuotaSnapshot:
    """
    Run one poll: collect, advance deltas, rank and project.

    Without a tracker a fresh one is used and discarded, so every delta in
    the snapshot is the no-prior-data sentinel.
    """
    if tracker is None:
        tracker = DeltaTracker()
    clock = now or (lambda: datetime.now(timezone.utc))

    timestamp = clock()
    outcome = await collect_quota(
        accounts,
        quota_client,
        target_models=target_models,
        ban_classifier=ban_classifier,
        concurrency=concurrency,
    )
    deltas = tracker.compute_deltas(outcome)
    groups = project(outcome.account_results, deltas, target_models)

    return QuotaSnapshot(
        timestamp=timestamp,
        groups=groups,
        diagnostics=list(outcome.diagnostics),
    )


async def watch_quota(
    accounts: Sequence[Account],
    quota_client: QuotaClient,
    on_snapshot: SnapshotCallback,
    interval: float = DEFAULT_REFRESH_INTERVAL,
    tracker: Optional[DeltaTracker] = None,
    max_polls: Optional[int] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **poll_kwargs: Any,
) -> DeltaTracker:
    """
    Poll immediately, then every `interval` seconds.

    Each poll completes (including the callback) before the next sleep
    starts, so polls never overlap. Runs until cancelled, or for
    `max_polls` polls when given.

    Returns:
        The tracker holding the session's last-seen values
    """
    if tracker is None:
        tracker = DeltaTracker()

    polls = 0
    while True:
        snapshot = await poll_quota(accounts, quota_client, tracker, **poll_kwargs)
        result = on_snapshot(snapshot)
        if inspect.isawaitable(result):
            await result

        polls += 1
        if max_polls is not None and polls >= max_polls:
            return tracker

        lib_logger.debug(f"Next quota poll in {interval}s")
        await sleep(interval)
