# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Quota collection engine.

Queries the quota client for every account, normalizes the per-model
payload and classifies each account as OK, BANNED, NO_MODELS or ERROR.
One account's failure never prevents the others from being collected.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..core.constants import DEFAULT_FETCH_CONCURRENCY, TARGET_MODELS
from ..core.errors import BanCheck, BanClassifier, TransportFailure
from ..core.types import (
    Account,
    AccountResult,
    AccountStatus,
    CollectionOutcome,
    Diagnostic,
    ModelQuota,
)

lib_logger = logging.getLogger("quota_library")


class QuotaClient(Protocol):
    """Capability the engine depends on to fetch one account's raw quota."""

    async def fetch_quota(
        self, credential: Optional[str], project_id: Optional[str] = None
    ) -> Dict[str, Any]:
        ...


# =============================================================================
# PAYLOAD NORMALIZATION
# =============================================================================


def parse_reset_time(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 reset time ("Z" suffix allowed); None if unusable."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        lib_logger.debug(f"Ignoring unparsable resetTime {value!r}")
        return None


def _coerce_fraction(value: Any) -> float:
    # NULL remainingFraction means exhausted
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        fraction = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(1.0, max(0.0, fraction))


def normalize_models(
    models: Dict[str, Any], target_models: Sequence[str] = TARGET_MODELS
) -> List[ModelQuota]:
    """
    Build ModelQuota records for the target models present in a payload.

    Models missing from the payload, or without a quotaInfo block, are
    skipped; projection fills them in as gap rows.
    """
    quotas = []
    for model_id in target_models:
        model_info = models.get(model_id)
        if not isinstance(model_info, dict):
            continue
        quota_info = model_info.get("quotaInfo")
        if not isinstance(quota_info, dict):
            continue

        reset_iso = quota_info.get("resetTime")
        quotas.append(
            ModelQuota(
                model_id=model_id,
                remaining_fraction=_coerce_fraction(quota_info.get("remainingFraction")),
                reset_time=parse_reset_time(reset_iso),
                reset_time_iso=reset_iso if isinstance(reset_iso, str) else None,
            )
        )
    return quotas


def ban_scan_text(payload: Dict[str, Any]) -> str:
    """
    Text of a success payload that is checked for ban phrasing.

    The per-model section is left out: model ids and display names are free
    text that can contain words like "disabled" without meaning anything
    about the account.
    """
    scoped = {key: value for key, value in payload.items() if key != "models"}
    if not scoped:
        return ""
    return json.dumps(scoped, default=str)


def classify_payload(
    account: Account,
    payload: Dict[str, Any],
    ban_classifier: BanCheck,
    target_models: Sequence[str] = TARGET_MODELS,
    source_index: int = 0,
) -> AccountResult:
    """Turn a successful quota response into an AccountResult."""
    result = AccountResult(
        identity=account.identity,
        status=AccountStatus.OK,
        account_ref=account.account_ref,
        source_index=source_index,
    )

    if not isinstance(payload, dict):
        lib_logger.warning(
            f"Unexpected quota payload type for {account.identity}: {type(payload).__name__}"
        )
        result.status = AccountStatus.NO_MODELS
        return result

    if ban_classifier(ban_scan_text(payload)):
        result.status = AccountStatus.BANNED
        return result

    models = payload.get("models")
    if not isinstance(models, dict):
        result.status = AccountStatus.NO_MODELS
        return result

    result.quotas = normalize_models(models, target_models)
    return result


# =============================================================================
# COLLECTION
# =============================================================================


async def collect_account(
    account: Account,
    quota_client: QuotaClient,
    ban_classifier: BanCheck,
    target_models: Sequence[str] = TARGET_MODELS,
    source_index: int = 0,
) -> Tuple[AccountResult, Optional[Diagnostic]]:
    """
    Collect and classify a single account.

    Never raises for upstream problems; failures come back as a BANNED or
    ERROR result plus a Diagnostic.
    """
    try:
        payload = await quota_client.fetch_quota(account.credential, account.account_ref)
    except TransportFailure as e:
        status = AccountStatus.BANNED if ban_classifier(e.body) else AccountStatus.ERROR
        lib_logger.warning(f"Quota collection failed for {account.identity}: {e.message}")
        diagnostic = Diagnostic(
            identity=account.identity,
            message=e.message,
            raw_body=e.body,
            status_code=e.status_code,
        )
    except Exception as e:
        lib_logger.warning(
            f"Quota collection failed for {account.identity}: {type(e).__name__}: {e}"
        )
        status = AccountStatus.ERROR
        diagnostic = Diagnostic(identity=account.identity, message=f"{type(e).__name__}: {e}")
    else:
        result = classify_payload(
            account, payload, ban_classifier, target_models, source_index
        )
        lib_logger.debug(
            f"Collected {account.identity}: {result.status}, {len(result.quotas)} models"
        )
        return result, None

    result = AccountResult(
        identity=account.identity,
        status=status,
        account_ref=account.account_ref,
        source_index=source_index,
    )
    return result, diagnostic


async def collect_quota(
    accounts: Sequence[Account],
    quota_client: QuotaClient,
    target_models: Sequence[str] = TARGET_MODELS,
    ban_classifier: Optional[BanCheck] = None,
    concurrency: int = DEFAULT_FETCH_CONCURRENCY,
) -> CollectionOutcome:
    """
    Collect quota for all accounts with limited concurrency.

    Args:
        accounts: Accounts in source order
        quota_client: Object providing async fetch_quota(credential, project_id)
        target_models: Models to report on, in display order
        ban_classifier: Text predicate for ban phrasing (default BanClassifier())
        concurrency: Maximum parallel account fetches

    Returns:
        CollectionOutcome with results in account-source order
    """
    if ban_classifier is None:
        ban_classifier = BanClassifier()

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def collect_with_semaphore(index: int, account: Account):
        async with semaphore:
            return await collect_account(
                account, quota_client, ban_classifier, target_models, index
            )

    # gather keeps input order, whatever order the requests complete in
    tasks = [collect_with_semaphore(i, account) for i, account in enumerate(accounts)]
    collected = await asyncio.gather(*tasks)

    outcome = CollectionOutcome()
    for result, diagnostic in collected:
        outcome.account_results.append(result)
        if diagnostic is not None:
            outcome.diagnostics.append(diagnostic)

    ok_count = sum(1 for r in outcome.account_results if r.status == AccountStatus.OK)
    lib_logger.debug(f"Quota collection complete: {ok_count}/{len(accounts)} OK")
    return outcome
