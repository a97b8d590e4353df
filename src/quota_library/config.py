# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Environment-driven settings for the quota checker.

Environment variables:
    QUOTA_REFRESH_INTERVAL: Seconds between polls in watch mode (default: 300)
    QUOTA_FETCH_CONCURRENCY: Parallel account fetches per poll (default: 5)
    QUOTA_REQUEST_TIMEOUT: Upstream request timeout in seconds (default: 30)
    QUOTA_AUTH_PROFILES: Explicit path to auth-profiles.json
    ANTIGRAVITY_CLIENT_ID / ANTIGRAVITY_CLIENT_SECRET: OAuth client override
    TZ: Time zone for reset times
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .core.constants import (
    DEFAULT_FETCH_CONCURRENCY,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)

lib_logger = logging.getLogger("quota_library")


def _env_int(name: str, default: int) -> int:
    """Parse an integer from environment variable with fallback to default."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        lib_logger.warning(f"Invalid {name} value {raw!r}, using default {default}")
        return default


def _env_float(name: str, default: float) -> float:
    """Parse a float from environment variable with fallback to default."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        lib_logger.warning(f"Invalid {name} value {raw!r}, using default {default}")
        return default


@dataclass
class QuotaCheckerConfig:
    """Runtime settings, normally built with from_env()."""

    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    auth_profiles_path: Optional[str] = None
    timezone_name: Optional[str] = None

    @classmethod
    def from_env(cls) -> "QuotaCheckerConfig":
        return cls(
            refresh_interval=max(1, _env_int("QUOTA_REFRESH_INTERVAL", DEFAULT_REFRESH_INTERVAL)),
            fetch_concurrency=max(1, _env_int("QUOTA_FETCH_CONCURRENCY", DEFAULT_FETCH_CONCURRENCY)),
            request_timeout=max(1.0, _env_float("QUOTA_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            auth_profiles_path=os.environ.get("QUOTA_AUTH_PROFILES") or None,
            timezone_name=os.environ.get("TZ") or None,
        )
