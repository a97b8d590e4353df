# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""Quota collection and delta tracking for Antigravity accounts."""

from .core.errors import BanClassifier, ConfigurationError, TransportFailure
from .core.types import (
    Account,
    AccountResult,
    AccountStatus,
    CollectionOutcome,
    Delta,
    Diagnostic,
    DisplayGroup,
    DisplayRow,
    ModelQuota,
    QuotaSnapshot,
)
from .usage import DeltaTracker, collect_quota, poll_quota, project, watch_quota

__version__ = "0.1.0"

__all__ = [
    "Account",
    "AccountResult",
    "AccountStatus",
    "BanClassifier",
    "CollectionOutcome",
    "ConfigurationError",
    "Delta",
    "DeltaTracker",
    "Diagnostic",
    "DisplayGroup",
    "DisplayRow",
    "ModelQuota",
    "QuotaSnapshot",
    "TransportFailure",
    "collect_quota",
    "poll_quota",
    "project",
    "watch_quota",
]
