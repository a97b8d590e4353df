"""
Shared fixtures for quota checker tests.
"""
from typing import Any, Dict, Optional

import pytest

from quota_library.core.errors import TransportFailure
from quota_library.core.types import Account


def model_entry(fraction: Optional[float], reset: Optional[str] = "2026-01-05T15:04:00Z") -> Dict[str, Any]:
    quota_info: Dict[str, Any] = {}
    if fraction is not None:
        quota_info["remainingFraction"] = fraction
    if reset is not None:
        quota_info["resetTime"] = reset
    return {"quotaInfo": quota_info}


def full_payload(opus: float = 0.9, others: float = 0.5) -> Dict[str, Any]:
    return {
        "models": {
            "claude-opus-4-5-thinking": model_entry(opus),
            "claude-sonnet-4-5-thinking": model_entry(others),
            "claude-sonnet-4-5": model_entry(others),
            "gemini-3-pro-high": model_entry(others),
            "gemini-3-flash": model_entry(others),
        }
    }


class FakeQuotaClient:
    """
    Quota client returning canned responses keyed by credential.

    A response that is an Exception instance is raised instead of returned.
    """

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.calls = []

    async def fetch_quota(self, credential, project_id=None):
        self.calls.append((credential, project_id))
        response = self.responses[credential]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def accounts():
    return [
        Account(identity="a@example.com", credential="tok-a", account_ref="proj-a"),
        Account(identity="b@example.com", credential="tok-b", account_ref="proj-b"),
        Account(identity="c@example.com", credential="tok-c", account_ref="proj-c"),
    ]


@pytest.fixture
def banned_failure():
    return TransportFailure(
        "Token refresh failed: 400",
        status_code=400,
        body='{"error": "invalid_grant", "error_description": "Account has been suspended"}',
    )
