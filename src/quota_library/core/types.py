# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Shared type definitions for the quota library.

This module contains dataclasses and type definitions used across
the collector, delta tracker, projection and presentation layers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .constants import NO_DATA, REFERENCE_MODEL


# =============================================================================
# ACCOUNT STATUS
# =============================================================================


class AccountStatus:
    """
    Per-poll account classification.

    Recomputed fresh on every poll; nothing about status carries over
    between polls.
    """

    OK = "OK"
    BANNED = "BANNED"  # Upstream reports the account banned/suspended/disabled
    NO_MODELS = "NO_MODELS"  # Successful response without a models section
    ERROR = "ERROR"  # Transport or credential failure


# =============================================================================
# ACCOUNT TYPES
# =============================================================================


@dataclass(frozen=True)
class Account:
    """
    One configured upstream identity being monitored.

    Supplied by the account source and immutable for a poll cycle.
    """

    identity: str  # Email, stable unique key
    credential: Optional[str]  # OAuth refresh token
    account_ref: Optional[str] = None  # Cloud project id


# =============================================================================
# QUOTA TYPES
# =============================================================================


@dataclass
class ModelQuota:
    """Normalized quota for one model of one account."""

    model_id: str
    remaining_fraction: float  # 0.0 to 1.0
    reset_time: Optional[datetime] = None
    reset_time_iso: Optional[str] = None  # Raw value from the API

    @property
    def percent(self) -> float:
        """Remaining quota in percent, rounded to tenths."""
        return round(self.remaining_fraction * 100, 1)

    @property
    def quota_str(self) -> str:
        return f"{self.percent:.1f}%"


@dataclass
class AccountResult:
    """
    Result of one poll for one account.

    quotas only ever holds Target Model List members, in list order.
    """

    identity: str
    status: str
    quotas: List[ModelQuota] = field(default_factory=list)
    account_ref: Optional[str] = None
    source_index: int = 0  # Position in the account source, for stable ranking

    def get_quota(self, model_id: str) -> Optional[ModelQuota]:
        for quota in self.quotas:
            if quota.model_id == model_id:
                return quota
        return None

    def reference_percent(self, reference_model: str = REFERENCE_MODEL) -> Optional[float]:
        """Percent remaining for the reference model, or None if absent."""
        quota = self.get_quota(reference_model)
        return quota.percent if quota else None


@dataclass
class Diagnostic:
    """Failure details kept for troubleshooting a single account."""

    identity: str
    message: str
    raw_body: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class CollectionOutcome:
    """Everything one collection pass produced, in account-source order."""

    account_results: List[AccountResult] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


# =============================================================================
# DELTA / DISPLAY TYPES
# =============================================================================


@dataclass(frozen=True)
class Delta:
    """Change in remaining percent since the previous poll."""

    label: str  # "+2.0", "-4.7", "0.0" or the no-prior-data sentinel
    value: Optional[float] = None  # None when there is no earlier value


@dataclass
class DisplayRow:
    """
    One rendered line of the quota view.

    Gap rows and collapsed rows use NO_DATA for quota, delta and reset.
    reset_time is the raw instant; formatting is left to the adapter.
    """

    identity: str
    status: str
    model_id: Optional[str]
    model_label: str
    percent: Optional[float] = None
    quota_str: str = NO_DATA
    delta: str = NO_DATA
    delta_value: Optional[float] = None
    reset_time: Optional[datetime] = None
    reset_time_iso: Optional[str] = None
    first_in_group: bool = False
    collapsed: bool = False

    @property
    def is_gap(self) -> bool:
        return self.percent is None


@dataclass
class DisplayGroup:
    """All rows for one account, in Target Model List order."""

    identity: str
    status: str
    account_ref: Optional[str] = None
    rows: List[DisplayRow] = field(default_factory=list)

    @property
    def is_collapsed(self) -> bool:
        return len(self.rows) == 1 and self.rows[0].collapsed


@dataclass
class QuotaSnapshot:
    """
    Point-in-time result of one poll.

    Any output format is a pure function of this structure.
    """

    timestamp: datetime
    groups: List[DisplayGroup] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def to_dict(self, timezone_name: Optional[str] = None) -> Dict[str, Any]:
        """Serialize to the JSON output structure."""
        accounts = []
        for group in self.groups:
            quotas: Dict[str, Any] = {}
            for row in group.rows:
                if row.model_id is None or row.is_gap:
                    continue
                quotas[row.model_id] = {
                    "remaining": row.percent,
                    "reset": row.reset_time_iso,
                    "delta": row.delta_value,
                }
            accounts.append(
                {
                    "email": group.identity,
                    "projectId": group.account_ref,
                    "status": group.status,
                    "quotas": quotas,
                }
            )

        return {
            "timestamp": self.timestamp.isoformat(),
            "timezone": timezone_name,
            "accounts": accounts,
            "errors": [
                {
                    "email": d.identity,
                    "message": d.message,
                    "statusCode": d.status_code,
                    "raw": d.raw_body,
                }
                for d in self.diagnostics
            ],
        }
