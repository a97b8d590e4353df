"""
Unit tests for quota_library/usage/delta.py - DeltaTracker
"""
import pytest

from quota_library.core.constants import NO_PRIOR_DATA
from quota_library.core.types import (
    AccountResult,
    AccountStatus,
    CollectionOutcome,
    ModelQuota,
)
from quota_library.usage.delta import DeltaTracker, format_delta


def outcome_with(identity: str, status: str = AccountStatus.OK, **fractions) -> CollectionOutcome:
    quotas = [ModelQuota(model_id=m.replace("_", "-"), remaining_fraction=f) for m, f in fractions.items()]
    return CollectionOutcome(
        account_results=[AccountResult(identity=identity, status=status, quotas=quotas)]
    )


class TestFormatDelta:
    """Test delta label formatting."""

    def test_no_prior_value(self):
        delta = format_delta(50.0, None)
        assert delta.label == NO_PRIOR_DATA
        assert delta.value is None

    def test_negative(self):
        delta = format_delta(65.3, 70.0)
        assert delta.label == "-4.7"
        assert delta.value == pytest.approx(-4.7)

    def test_positive_has_explicit_sign(self):
        assert format_delta(72.0, 70.0).label == "+2.0"

    def test_zero(self):
        assert format_delta(70.0, 70.0).label == "0.0"

    def test_no_negative_zero(self):
        # 0.1 + 0.2 - 0.3 style float noise must not render as "-0.0"
        assert format_delta(30.0, 30.000000000000004).label == "0.0"


class TestDeltaTracker:
    """Test DeltaTracker state handling."""

    def test_first_reading_seeds_state(self):
        tracker = DeltaTracker()
        delta = tracker.compute_delta("a", "m", 70.0)
        assert delta.label == NO_PRIOR_DATA
        assert tracker.get("a", "m") == 70.0

    def test_second_reading(self):
        tracker = DeltaTracker()
        tracker.compute_delta("a", "m", 70.0)
        delta = tracker.compute_delta("a", "m", 65.3)
        assert delta.label == "-4.7"
        assert tracker.get("a", "m") == 65.3

    def test_keys_are_per_account(self):
        tracker = DeltaTracker()
        tracker.compute_delta("a", "m", 70.0)
        assert tracker.compute_delta("b", "m", 10.0).label == NO_PRIOR_DATA

    def test_peek_does_not_mutate(self):
        tracker = DeltaTracker()
        tracker.compute_delta("a", "m", 70.0)
        assert tracker.peek_delta("a", "m", 80.0).label == "+10.0"
        assert tracker.get("a", "m") == 70.0

    def test_compute_deltas_over_polls(self):
        tracker = DeltaTracker()
        first = tracker.compute_deltas(outcome_with("a", gemini_3_flash=0.70))
        second = tracker.compute_deltas(outcome_with("a", gemini_3_flash=0.653))

        assert first[("a", "gemini-3-flash")].label == NO_PRIOR_DATA
        assert second[("a", "gemini-3-flash")].label == "-4.7"

    def test_failed_poll_leaves_state_untouched(self):
        tracker = DeltaTracker()
        tracker.compute_deltas(outcome_with("a", gemini_3_flash=0.70))
        deltas = tracker.compute_deltas(outcome_with("a", status=AccountStatus.ERROR))
        assert deltas == {}
        assert tracker.get("a", "gemini-3-flash") == 70.0

        # Next good poll compares against the last good value
        deltas = tracker.compute_deltas(outcome_with("a", gemini_3_flash=0.75))
        assert deltas[("a", "gemini-3-flash")].label == "+5.0"

    def test_reset(self):
        tracker = DeltaTracker()
        tracker.compute_delta("a", "m", 1.0)
        tracker.reset()
        assert len(tracker) == 0
        assert ("a", "m") not in tracker
