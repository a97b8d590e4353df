# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Ranking and projection of account results into display groups.

Pure functions: projecting the same results and deltas twice yields the
same rows.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.constants import MISSING_REFERENCE_RANK, NO_DATA, TARGET_MODELS, model_label
from ..core.types import AccountResult, Delta, DisplayGroup, DisplayRow


def ranking_sort_key(
    result: AccountResult, reference_model: str
) -> Tuple[float, int]:
    """
    Sort key: reference percent descending, then source order.

    Accounts without a reference value rank as -1, below 0.0%.
    """
    percent = result.reference_percent(reference_model)
    rank = percent if percent is not None else MISSING_REFERENCE_RANK
    return (-rank, result.source_index)


def rank_results(
    account_results: Sequence[AccountResult],
    target_models: Sequence[str] = TARGET_MODELS,
) -> List[AccountResult]:
    """Order accounts by the reference model (first target model)."""
    reference_model = target_models[0]
    return sorted(account_results, key=lambda r: ranking_sort_key(r, reference_model))


def _collapsed_row(result: AccountResult) -> DisplayRow:
    return DisplayRow(
        identity=result.identity,
        status=result.status,
        model_id=None,
        model_label=NO_DATA,
        first_in_group=True,
        collapsed=True,
    )


def delta_owners(account_results: Sequence[AccountResult]) -> Dict[Tuple[str, str], int]:
    """
    Source index of the result each (identity, model) delta belongs to.

    DeltaTracker keeps the first reading per key in source order; a
    duplicate identity further down gets no delta of its own.
    """
    owners: Dict[Tuple[str, str], int] = {}
    for result in sorted(account_results, key=lambda r: r.source_index):
        for quota in result.quotas:
            owners.setdefault((result.identity, quota.model_id), result.source_index)
    return owners


def project_result(
    result: AccountResult,
    deltas: Mapping[Tuple[str, str], Delta],
    target_models: Sequence[str] = TARGET_MODELS,
    owners: Optional[Mapping[Tuple[str, str], int]] = None,
) -> DisplayGroup:
    """Build the display group for one account."""
    group = DisplayGroup(
        identity=result.identity,
        status=result.status,
        account_ref=result.account_ref,
    )

    if not result.quotas:
        group.rows.append(_collapsed_row(result))
        return group

    for idx, model_id in enumerate(target_models):
        quota = result.get_quota(model_id)
        row = DisplayRow(
            identity=result.identity,
            status=result.status,
            model_id=model_id,
            model_label=model_label(model_id),
            first_in_group=idx == 0,
        )
        if quota is not None:
            key = (result.identity, model_id)
            delta: Optional[Delta] = None
            if owners is None or owners.get(key) == result.source_index:
                delta = deltas.get(key)
            row.percent = quota.percent
            row.quota_str = quota.quota_str
            row.reset_time = quota.reset_time
            row.reset_time_iso = quota.reset_time_iso
            if delta is not None:
                row.delta = delta.label
                row.delta_value = delta.value
        group.rows.append(row)

    return group


def project(
    account_results: Sequence[AccountResult],
    deltas: Optional[Mapping[Tuple[str, str], Delta]] = None,
    target_models: Sequence[str] = TARGET_MODELS,
) -> List[DisplayGroup]:
    """
    Rank accounts and project each into a fixed, model-ordered row set.

    Args:
        account_results: Results from one collection pass
        deltas: (identity, model_id) -> Delta, as produced by DeltaTracker
        target_models: Row order; the first entry is the reference model

    Returns:
        One DisplayGroup per account, best reference quota first
    """
    deltas = deltas if deltas is not None else {}
    owners = delta_owners(account_results)
    return [
        project_result(result, deltas, target_models, owners)
        for result in rank_results(account_results, target_models)
    ]


def flatten_rows(groups: Sequence[DisplayGroup]) -> List[DisplayRow]:
    return [row for group in groups for row in group.rows]
