# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Delta tracking across successive polls of one watch session.
"""

import logging
from typing import Dict, Optional, Tuple

from ..core.constants import NO_PRIOR_DATA
from ..core.types import AccountStatus, CollectionOutcome, Delta

lib_logger = logging.getLogger("quota_library")

DeltaKey = Tuple[str, str]  # (account identity, model id)


def format_delta(current: float, previous: Optional[float]) -> Delta:
    """
    Compute the signed change between two percent values.

    Positive values get an explicit "+", everything is shown with one
    decimal place. A missing previous value yields the no-prior-data sentinel.
    """
    if previous is None:
        return Delta(label=NO_PRIOR_DATA, value=None)
    # + 0.0 turns -0.0 into 0.0
    value = round(current - previous, 1) + 0.0
    sign = "+" if value > 0 else ""
    return Delta(label=f"{sign}{value:.1f}", value=value)


class DeltaTracker:
    """
    Remembers the last-seen percent per (account, model) for one session.

    Owned by the poll driver and passed into every poll. A one-shot run uses
    a fresh tracker, so all of its deltas are the no-prior-data sentinel.
    """

    def __init__(self):
        self._state: Dict[DeltaKey, float] = {}

    def __len__(self) -> int:
        return len(self._state)

    def __contains__(self, key: DeltaKey) -> bool:
        return key in self._state

    def get(self, identity: str, model_id: str) -> Optional[float]:
        return self._state.get((identity, model_id))

    def peek_delta(self, identity: str, model_id: str, current_percent: float) -> Delta:
        """Delta against the stored value, without updating it."""
        return format_delta(current_percent, self._state.get((identity, model_id)))

    def compute_delta(self, identity: str, model_id: str, current_percent: float) -> Delta:
        """Delta against the stored value, then store current_percent."""
        delta = self.peek_delta(identity, model_id, current_percent)
        self._state[(identity, model_id)] = current_percent
        return delta

    def compute_deltas(self, outcome: CollectionOutcome) -> Dict[DeltaKey, Delta]:
        """
        Advance the tracker with one poll's results.

        Only models with a current value are touched; banned, failed and
        gap entries keep their previous values for the next poll.
        """
        deltas: Dict[DeltaKey, Delta] = {}
        for result in outcome.account_results:
            if result.status != AccountStatus.OK:
                continue
            for quota in result.quotas:
                key = (result.identity, quota.model_id)
                if key in deltas:
                    # Duplicate identity in the source; keep the first reading
                    lib_logger.warning(
                        f"Duplicate quota entry for {result.identity}/{quota.model_id}, ignoring"
                    )
                    continue
                deltas[key] = self.compute_delta(
                    result.identity, quota.model_id, quota.percent
                )
        return deltas

    def reset(self) -> None:
        self._state.clear()
