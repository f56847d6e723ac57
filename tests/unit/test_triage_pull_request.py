"""Unit tests for pull request predicates, title parsing and classification."""

from __future__ import annotations

import datetime as dt

import pytest

from prtriage.github.models import Mergeability, ReviewDecision, RollupState
from prtriage.triage import PullRequest, TriageLabel
from tests.helpers.builders import BASE_TIME, DEFAULT_OID, make_record


class TestReviewPredicates:
    """Review and mergeability predicates."""

    @pytest.mark.parametrize("decision", [*ReviewDecision, None])
    def test_conflicting_is_never_ready(self, decision: ReviewDecision | None) -> None:
        """A conflicting branch is never ready to merge."""
        pr = PullRequest(
            make_record(mergeable=Mergeability.CONFLICTING, review_decision=decision)
        )

        assert not pr.is_ready_to_be_merged()
        assert not pr.has_no_conflicts()

    @pytest.mark.parametrize("decision", [*ReviewDecision, None])
    def test_draft_is_neither_ready_nor_blocked_by_other(
        self, decision: ReviewDecision | None
    ) -> None:
        """Drafts are excluded from both ordering buckets."""
        pr = PullRequest(make_record(is_draft=True, review_decision=decision))

        assert not pr.is_ready_to_be_merged()
        assert not pr.is_blocked_by_other()
        assert not pr.waiting_for_review()

    def test_approved_and_mergeable_is_ready(self) -> None:
        """Approval plus a clean branch is ready to merge."""
        pr = PullRequest(make_record(review_decision=ReviewDecision.APPROVED))

        assert pr.has_been_approved()
        assert pr.is_ready_to_be_merged()
        assert not pr.is_blocked_by_other()

    def test_changes_requested_is_not_approved(self) -> None:
        """A changes-requested verdict is not an approval."""
        pr = PullRequest(make_record(review_decision=ReviewDecision.CHANGES_REQUESTED))

        assert pr.has_changes_requested()
        assert not pr.has_been_approved()
        assert not pr.waiting_for_review()

    def test_review_required_and_mergeable_is_blocked_by_other(self) -> None:
        """A clean branch waiting on review is blocked by someone else."""
        pr = PullRequest(make_record(review_decision=ReviewDecision.REVIEW_REQUIRED))

        assert pr.waiting_for_review()
        assert pr.is_blocked_by_other()

    def test_review_required_with_unknown_mergeability(self) -> None:
        """An unknown merge verdict does not count as conflict free."""
        pr = PullRequest(
            make_record(
                review_decision=ReviewDecision.REVIEW_REQUIRED,
                mergeable=Mergeability.UNKNOWN,
            )
        )

        assert pr.waiting_for_review()
        assert not pr.is_blocked_by_other()


class TestTitleParsing:
    """Ticket key extraction from titles."""

    def test_ticket_prefix_is_extracted(self) -> None:
        """A leading ``[ABC-123]`` becomes the ticket key."""
        pr = PullRequest(make_record(title="[ABC-123] Fix bug"))

        assert pr.ticket_key == "ABC-123"
        assert pr.display_title == "Fix bug"
        assert pr.title == "[ABC-123] Fix bug"

    @pytest.mark.parametrize("title", ["Fix bug", "[abc-123] Fix bug", "Fix [ABC-1]"])
    def test_titles_without_a_leading_key_are_unchanged(self, title: str) -> None:
        """Titles without an upper-case leading key keep their text."""
        pr = PullRequest(make_record(title=title))

        assert pr.ticket_key is None
        assert pr.display_title == title


class TestCommitAccessors:
    """Latest commit accessors."""

    def test_missing_commit_returns_none(self) -> None:
        """A pull request without commits yields ``None`` rather than raising."""
        pr = PullRequest(make_record(commit_oid=None))

        assert pr.latest_commit_id() is None
        assert pr.ci_rollup_state() is None

    def test_commit_and_rollup_are_exposed(self) -> None:
        """The head commit id and rollup come from the last commit."""
        pr = PullRequest(make_record(rollup=RollupState.FAILURE))

        assert pr.latest_commit_id() == DEFAULT_OID
        assert pr.ci_rollup_state() is RollupState.FAILURE

    def test_repository_identity(self) -> None:
        """Owner and name are derived from the repository slug."""
        pr = PullRequest(make_record(repo="acme/widgets"))

        assert pr.owner == "acme"
        assert pr.repository_name == "widgets"
        assert pr.slug == "acme/widgets"


class TestStaleness:
    """Calendar-day staleness."""

    def test_updated_yesterday_is_stale(self) -> None:
        """Any update on the previous calendar day is stale."""
        pr = PullRequest(make_record(updated_at=BASE_TIME - dt.timedelta(days=1)))

        assert pr.is_stale(BASE_TIME)

    def test_updated_earlier_today_is_fresh(self) -> None:
        """An update earlier on the same local day is not stale."""
        now = BASE_TIME.astimezone()
        earlier = now.replace(hour=0, minute=1, second=0)
        pr = PullRequest(make_record(updated_at=earlier))

        assert not pr.is_stale(now)


class TestClassify:
    """Label assignment."""

    @pytest.mark.parametrize(
        ("overrides", "expected"),
        [
            ({"is_draft": True}, TriageLabel.DRAFT),
            (
                {"review_decision": ReviewDecision.APPROVED},
                TriageLabel.READY_TO_MERGE,
            ),
            (
                {"review_decision": ReviewDecision.REVIEW_REQUIRED},
                TriageLabel.BLOCKED_BY_OTHER,
            ),
            (
                {"review_decision": ReviewDecision.CHANGES_REQUESTED},
                TriageLabel.BLOCKED_BY_YOU,
            ),
            (
                {
                    "review_decision": ReviewDecision.APPROVED,
                    "mergeable": Mergeability.CONFLICTING,
                },
                TriageLabel.BLOCKED_BY_YOU,
            ),
        ],
    )
    def test_exactly_one_primary_label(
        self, overrides: dict[str, object], expected: TriageLabel
    ) -> None:
        """Each pull request carries exactly one primary label."""
        pr = PullRequest(make_record(**overrides))  # type: ignore[arg-type]

        assert pr.classify(BASE_TIME) == frozenset({expected})

    def test_stale_combines_with_primary_label(self) -> None:
        """Staleness is reported alongside the primary label."""
        pr = PullRequest(
            make_record(
                review_decision=ReviewDecision.APPROVED,
                updated_at=BASE_TIME - dt.timedelta(days=3),
            )
        )

        assert pr.classify(BASE_TIME) == frozenset(
            {TriageLabel.READY_TO_MERGE, TriageLabel.STALE}
        )
