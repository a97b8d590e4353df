"""
Antigravity Quota Client

Fetches per-model quota for one Antigravity account using its stored
OAuth refresh token.

API Details:
- Token: POST https://oauth2.googleapis.com/token (refresh_token grant)
- Quota: POST https://cloudcode-pa.googleapis.com/v1internal:fetchAvailableModels
- Auth: Bearer access token, body {"project": project_id}
- Response: { "models": { "gemini-3-flash": {"quotaInfo": {"remainingFraction": 0.8,
  "resetTime": "2026-01-05T15:04:00Z"}, ...}, ... } }

Any failure (non-2xx, network error, timeout, unparsable body) is raised as
TransportFailure carrying the status code and raw body, so the collector can
classify it.

Environment variables:
    ANTIGRAVITY_CLIENT_ID: OAuth client id (default: Antigravity public client)
    ANTIGRAVITY_CLIENT_SECRET: OAuth client secret
"""

import base64
import logging
import os
from typing import Any, Dict, Optional

import httpx

from ..core.constants import (
    ANTIGRAVITY_USER_AGENT,
    DEFAULT_REQUEST_TIMEOUT,
    QUOTA_ENDPOINT,
    TOKEN_URL,
)
from ..core.errors import TransportFailure, mask_credential

# Use the shared quota_library logger
lib_logger = logging.getLogger("quota_library")

# Antigravity public OAuth client
_DEFAULT_CLIENT_ID = base64.b64decode(
    "MTA3MTAwNjA2MDU5MS10bWhzc2luMmgyMWxjcmUyMzV2dG9sb2poNGc0MDNlcC5hcHBzLmdvb2dsZXVzZXJjb250ZW50LmNvbQ=="
).decode()
_DEFAULT_CLIENT_SECRET = base64.b64decode(
    "R09DU1BYLUs1OEZXUjQ4NkxkTEoxbUxCOHNYQzR6NnFEQWY="
).decode()


class AntigravityQuotaClient:
    """
    Quota client capability for the collection engine.

    Usage:
        async with AntigravityQuotaClient() as quota_client:
            payload = await quota_client.fetch_quota(refresh_token, project_id)

    Pass an existing httpx.AsyncClient to share connections; otherwise one is
    created and closed with the context manager.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        token_url: str = TOKEN_URL,
        quota_url: str = QUOTA_ENDPOINT,
    ):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self.client_id = client_id or os.environ.get(
            "ANTIGRAVITY_CLIENT_ID", _DEFAULT_CLIENT_ID
        )
        self.client_secret = client_secret or os.environ.get(
            "ANTIGRAVITY_CLIENT_SECRET", _DEFAULT_CLIENT_SECRET
        )
        self.token_url = token_url
        self.quota_url = quota_url

    async def __aenter__(self) -> "AntigravityQuotaClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    # =========================================================================
    # HTTP HELPERS
    # =========================================================================

    async def _post(self, url: str, failure_label: str, **kwargs) -> Dict[str, Any]:
        """POST and decode JSON, converting every failure to TransportFailure."""
        try:
            response = await self._get_client().post(url, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportFailure(f"{failure_label}: timed out") from e
        except httpx.RequestError as e:
            raise TransportFailure(f"{failure_label}: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise TransportFailure(
                f"{failure_label}: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportFailure(
                f"{failure_label}: invalid JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise TransportFailure(
                f"{failure_label}: unexpected response type {type(data).__name__}",
                status_code=response.status_code,
                body=response.text,
            )
        return data

    # =========================================================================
    # TOKEN EXCHANGE
    # =========================================================================

    async def refresh_access_token(self, refresh_token: Optional[str]) -> str:
        """
        Exchange a refresh token for a short-lived access token.

        Raises:
            TransportFailure: On missing token or any upstream failure
        """
        if not refresh_token:
            raise TransportFailure("Token refresh failed: no refresh token stored")

        data = await self._post(
            self.token_url,
            "Token refresh failed",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )

        access_token = data.get("access_token")
        if not access_token:
            raise TransportFailure(
                "Token refresh failed: response has no access_token",
                body=str(data),
            )
        return access_token

    # =========================================================================
    # QUOTA API
    # =========================================================================

    async def fetch_quota(
        self, credential: Optional[str], project_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Fetch the raw fetchAvailableModels payload for one account.

        Args:
            credential: OAuth refresh token
            project_id: Cloud project id, sent as {"project": ...} when known

        Returns:
            The decoded JSON payload, untouched

        Raises:
            TransportFailure: On token or quota request failure
        """
        access_token = await self.refresh_access_token(credential)

        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "User-Agent": ANTIGRAVITY_USER_AGENT,
        }
        payload = {"project": project_id} if project_id else {}

        lib_logger.debug(
            f"Fetching Antigravity quota for token {mask_credential(credential)} "
            f"(project={project_id or 'none'})"
        )
        return await self._post(
            self.quota_url, "Quota fetch failed", headers=headers, json=payload
        )
