# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Constants shared by the quota collection engine and its adapters.
"""

from typing import Dict, List


# =============================================================================
# UPSTREAM ENDPOINTS
# =============================================================================

TOKEN_URL = "https://oauth2.googleapis.com/token"
QUOTA_ENDPOINT = (
    "https://cloudcode-pa.googleapis.com/v1internal:fetchAvailableModels"
)
ANTIGRAVITY_USER_AGENT = "antigravity/0.3.0"

# Auth profile keys look like "google-antigravity:user@example.com"
PROFILE_KEY_PREFIX = "google-antigravity:"

# =============================================================================
# TARGET MODELS
# =============================================================================
# Order defines row order in every snapshot. The first entry is the
# reference model used to rank accounts.

TARGET_MODELS: List[str] = [
    "claude-opus-4-5-thinking",
    "claude-sonnet-4-5-thinking",
    "claude-sonnet-4-5",
    "gemini-3-pro-high",
    "gemini-3-flash",
]

MODEL_LABELS: Dict[str, str] = {
    "claude-opus-4-5-thinking": "Claude Opus",
    "claude-sonnet-4-5-thinking": "Claude Sonnet T",
    "claude-sonnet-4-5": "Claude Sonnet",
    "gemini-3-pro-high": "Gemini Pro",
    "gemini-3-flash": "Gemini Flash",
}

REFERENCE_MODEL = TARGET_MODELS[0]

# =============================================================================
# BAN DETECTION / DISPLAY
# =============================================================================

BAN_PATTERN = r"banned|suspended|disabled"

# Placeholder for gap rows and collapsed rows
NO_DATA = "—"

# Delta label when no earlier value exists for an account+model key
NO_PRIOR_DATA = "n/a"

# Rank assigned to accounts without a reference-model value
MISSING_REFERENCE_RANK = -1.0

DEFAULT_REFRESH_INTERVAL = 300  # 5 minutes
DEFAULT_FETCH_CONCURRENCY = 5
DEFAULT_REQUEST_TIMEOUT = 30.0

# Reset times further away than this show the date as well
RESET_DATE_THRESHOLD_HOURS = 8


def model_label(model_id: str) -> str:
    """Return the display label for a model, falling back to its id."""
    return MODEL_LABELS.get(model_id, model_id)
