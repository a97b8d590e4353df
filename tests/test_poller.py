"""
Unit tests for quota_library/usage/poller.py - poll and watch drivers
"""
from datetime import datetime, timezone

import pytest

from conftest import FakeQuotaClient, full_payload
from quota_library.core.constants import NO_PRIOR_DATA
from quota_library.core.types import AccountStatus
from quota_library.usage.delta import DeltaTracker
from quota_library.usage.poller import poll_quota, watch_quota

OPUS = "claude-opus-4-5-thinking"


def delta_labels(snapshot):
    return [row.delta for group in snapshot.groups for row in group.rows if not row.is_gap]


class TestPollQuota:
    """Test a single poll end to end."""

    @pytest.mark.asyncio
    async def test_first_poll_has_no_prior_deltas(self, accounts):
        client = FakeQuotaClient({a.credential: full_payload() for a in accounts})
        snapshot = await poll_quota(accounts, client)

        labels = delta_labels(snapshot)
        assert labels
        assert all(label == NO_PRIOR_DATA for label in labels)

    @pytest.mark.asyncio
    async def test_second_poll_reports_delta(self, accounts):
        tracker = DeltaTracker()
        client = FakeQuotaClient({a.credential: full_payload(opus=0.70) for a in accounts})
        await poll_quota(accounts, client, tracker)

        client.responses["tok-a"] = full_payload(opus=0.653)
        client.responses["tok-b"] = full_payload(opus=0.72)
        snapshot = await poll_quota(accounts, client, tracker)

        opus_deltas = {g.identity: g.rows[0].delta for g in snapshot.groups}
        assert opus_deltas["a@example.com"] == "-4.7"
        assert opus_deltas["b@example.com"] == "+2.0"
        assert opus_deltas["c@example.com"] == "0.0"

    @pytest.mark.asyncio
    async def test_scenario_ranking_and_diagnostics(self, accounts, banned_failure):
        client = FakeQuotaClient(
            {
                "tok-a": full_payload(opus=0.9),
                "tok-b": banned_failure,
                "tok-c": full_payload(opus=0.4),
            }
        )
        fixed = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)
        snapshot = await poll_quota(accounts, client, now=lambda: fixed)

        assert snapshot.timestamp == fixed
        assert [g.identity for g in snapshot.groups] == [
            "a@example.com",
            "c@example.com",
            "b@example.com",
        ]
        assert snapshot.groups[2].status == AccountStatus.BANNED
        assert snapshot.groups[2].is_collapsed
        assert [d.identity for d in snapshot.diagnostics] == ["b@example.com"]

    @pytest.mark.asyncio
    async def test_to_dict_shape(self, accounts):
        client = FakeQuotaClient({a.credential: full_payload() for a in accounts})
        data = (await poll_quota(accounts, client)).to_dict("UTC")

        assert data["timezone"] == "UTC"
        assert data["errors"] == []
        first = data["accounts"][0]
        assert first["email"] == "a@example.com"
        assert first["projectId"] == "proj-a"
        assert first["status"] == "OK"
        assert first["quotas"][OPUS] == {
            "remaining": 90.0,
            "reset": "2026-01-05T15:04:00Z",
            "delta": None,
        }


class TestWatchQuota:
    """Test the repeating poll driver."""

    @pytest.mark.asyncio
    async def test_polls_share_tracker_and_sleep_between(self, accounts):
        client = FakeQuotaClient({a.credential: full_payload(opus=0.5) for a in accounts})
        snapshots = []
        sleeps = []

        def on_snapshot(snapshot):
            snapshots.append(snapshot)
            # Simulate usage between polls
            client.responses["tok-a"] = full_payload(opus=0.4)

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        tracker = await watch_quota(
            accounts,
            client,
            on_snapshot,
            interval=300,
            max_polls=3,
            sleep=fake_sleep,
        )

        assert len(snapshots) == 3
        assert sleeps == [300, 300]
        assert snapshots[0].groups[0].rows[0].delta == NO_PRIOR_DATA
        second_a = next(g for g in snapshots[1].groups if g.identity == "a@example.com")
        assert second_a.rows[0].delta == "-10.0"
        assert tracker.get("a@example.com", OPUS) == 40.0

    @pytest.mark.asyncio
    async def test_async_callback_awaited(self, accounts):
        client = FakeQuotaClient({a.credential: full_payload() for a in accounts})
        seen = []

        async def on_snapshot(snapshot):
            seen.append(len(snapshot.groups))

        async def no_sleep(seconds):
            return None

        await watch_quota(accounts, client, on_snapshot, max_polls=2, sleep=no_sleep)
        assert seen == [3, 3]
