# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Error taxonomy and ban classification.

Per-account failures (TransportFailure, ban detection) are converted into
classified results by the collector. Only ConfigurationError is fatal.
"""

import re
from typing import Callable, Optional, Pattern, Union

from .constants import BAN_PATTERN

# Signature of a pluggable ban classifier: response text -> banned?
BanCheck = Callable[[str], bool]


class QuotaCheckerError(Exception):
    """Base class for quota checker errors."""


class TransportFailure(QuotaCheckerError):
    """
    Network error or non-2xx response during token or quota retrieval.

    Timeouts are reported the same way with status_code=None.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class ConfigurationError(QuotaCheckerError):
    """
    Nothing to collect: credential store missing, unreadable, or empty.

    Carries a human-readable remediation hint for the CLI.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class BanClassifier:
    """
    Heuristic ban detector over free-text response bodies.

    Matches known ban/suspension/disablement phrasing, case-insensitive.

    Usage:
        classifier = BanClassifier()
        classifier('{"error": "Account suspended"}')  # True
    """

    def __init__(self, pattern: Union[str, Pattern[str]] = BAN_PATTERN):
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE)
        self.pattern = pattern

    def __call__(self, text: Optional[str]) -> bool:
        if not text:
            return False
        return bool(self.pattern.search(text))

    def __repr__(self) -> str:
        return f"BanClassifier({self.pattern.pattern!r})"


def mask_credential(credential: Optional[str], visible: int = 4) -> str:
    """Mask a token for logging, keeping only the last few characters."""
    if not credential:
        return "<none>"
    if len(credential) <= visible:
        return "*" * len(credential)
    return f"...{credential[-visible:]}"
