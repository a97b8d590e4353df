# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

from .collector import QuotaClient, collect_quota
from .delta import DeltaTracker, format_delta
from .poller import poll_quota, watch_quota
from .projection import project, rank_results

__all__ = [
    "QuotaClient",
    "collect_quota",
    "DeltaTracker",
    "format_delta",
    "poll_quota",
    "watch_quota",
    "project",
    "rank_results",
]
