"""Unit tests for rate budget tracking."""

from __future__ import annotations

import datetime as dt

import pytest

from prtriage.github import (
    LOW_REMAINING_THRESHOLD,
    ApiKind,
    QuotaTracker,
    RateLimitSnapshot,
    rate_limit_from_headers,
)
from prtriage.observability import TriageEventType
from tests.helpers.femtologging_capture import capture_femto_logs

_RESET_EPOCH = 4_085_740_800


class TestRateLimitFromHeaders:
    """Parsing of ``x-ratelimit-*`` headers."""

    def test_full_headers(self) -> None:
        """Remaining, limit and reset are all read."""
        snapshot = rate_limit_from_headers(
            {
                "x-ratelimit-remaining": "4321",
                "x-ratelimit-limit": "5000",
                "x-ratelimit-reset": str(_RESET_EPOCH),
            },
            ApiKind.REST,
        )

        assert snapshot == RateLimitSnapshot(
            kind=ApiKind.REST,
            remaining=4321,
            limit=5000,
            reset_at=dt.datetime.fromtimestamp(_RESET_EPOCH, dt.UTC),
        )

    def test_missing_reset_leaves_it_unset(self) -> None:
        """A missing reset header is tolerated."""
        snapshot = rate_limit_from_headers(
            {"x-ratelimit-remaining": "1", "x-ratelimit-limit": "5000"},
            ApiKind.GRAPHQL,
        )

        assert snapshot is not None
        assert snapshot.reset_at is None

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"x-ratelimit-remaining": "10"},
            {"x-ratelimit-remaining": "many", "x-ratelimit-limit": "5000"},
        ],
    )
    def test_unusable_headers_yield_none(self, headers: dict[str, str]) -> None:
        """Incomplete or non-numeric headers produce no snapshot."""
        assert rate_limit_from_headers(headers, ApiKind.REST) is None


class TestQuotaTracker:
    """Latest-snapshot bookkeeping."""

    def test_starts_empty(self) -> None:
        """Without telemetry there is nothing to describe."""
        tracker = QuotaTracker()

        assert tracker.latest is None
        assert not tracker.is_low
        assert tracker.describe() is None

    def test_keeps_latest_per_kind(self) -> None:
        """Each kind keeps its own most recent snapshot."""
        tracker = QuotaTracker()
        rest = RateLimitSnapshot(kind=ApiKind.REST, remaining=4000, limit=5000)
        graphql = RateLimitSnapshot(kind=ApiKind.GRAPHQL, remaining=4900, limit=5000)

        tracker.record(rest)
        tracker.record(graphql)

        assert tracker.snapshot(ApiKind.REST) == rest
        assert tracker.snapshot(ApiKind.GRAPHQL) == graphql
        assert tracker.latest == graphql

    def test_describe_without_reset(self) -> None:
        """The summary line shows remaining and limit."""
        tracker = QuotaTracker()
        tracker.record(RateLimitSnapshot(kind=ApiKind.REST, remaining=42, limit=60))

        assert tracker.describe() == "API: 42/60"

    def test_describe_with_reset(self) -> None:
        """The reset time is rendered as local wall-clock time."""
        reset_at = dt.datetime.fromtimestamp(_RESET_EPOCH, dt.UTC)
        tracker = QuotaTracker()
        tracker.record(
            RateLimitSnapshot(
                kind=ApiKind.REST, remaining=42, limit=60, reset_at=reset_at
            )
        )

        expected = f"API: 42/60 (resets {reset_at.astimezone():%H:%M:%S})"
        assert tracker.describe() == expected

    def test_low_budget_is_flagged_and_logged(self) -> None:
        """Dropping below the threshold sets the flag and warns."""
        tracker = QuotaTracker()

        with capture_femto_logs("prtriage.github.quota") as capture:
            tracker.record(
                RateLimitSnapshot(
                    kind=ApiKind.GRAPHQL,
                    remaining=LOW_REMAINING_THRESHOLD - 1,
                    limit=5000,
                )
            )
            capture.wait_for_count(1)

        assert tracker.is_low
        record = capture.records[0]
        assert record.level in {"WARN", "WARNING"}
        assert TriageEventType.QUOTA_LOW in record.message
        assert "api_kind=graphql" in record.message

    def test_threshold_itself_is_not_low(self) -> None:
        """Exactly the threshold remaining is still healthy."""
        tracker = QuotaTracker()
        tracker.record(
            RateLimitSnapshot(
                kind=ApiKind.REST, remaining=LOW_REMAINING_THRESHOLD, limit=5000
            )
        )

        assert not tracker.is_low
