"""Derived predicates and classification for a single pull request."""

from __future__ import annotations

import datetime as dt
import enum
import re
import typing as typ

from prtriage.common.slug import parse_repo_slug
from prtriage.common.time import local_date, utcnow
from prtriage.github.models import Mergeability, ReviewDecision

if typ.TYPE_CHECKING:
    from prtriage.github.models import PullRequestRecord, RollupState

_TICKET_PREFIX = re.compile(r"^\[([A-Z]+-\d+)\]\s*")


class TriageLabel(enum.StrEnum):
    """Actionable states a pull request can be in.

    ``DRAFT``, ``READY_TO_MERGE``, ``BLOCKED_BY_OTHER`` and ``BLOCKED_BY_YOU``
    are mutually exclusive; ``STALE`` and ``CI_FAILED`` combine with any of
    them.
    """

    DRAFT = "draft"
    READY_TO_MERGE = "ready_to_merge"
    BLOCKED_BY_OTHER = "blocked_by_other"
    BLOCKED_BY_YOU = "blocked_by_you"
    STALE = "stale"
    CI_FAILED = "ci_failed"


class PullRequest:
    """Read-only view over a :class:`PullRequestRecord`.

    All predicates are pure; none of them performs I/O. The review predicates
    trust GitHub's ``reviewDecision`` summary rather than re-deriving a
    verdict from individual reviews.
    """

    __slots__ = ("_display_title", "_record", "_ticket_key")

    def __init__(self, record: PullRequestRecord) -> None:
        """Wrap ``record`` and parse the ticket prefix from its title."""
        self._record = record
        match = _TICKET_PREFIX.match(record.title)
        if match is None:
            self._ticket_key: str | None = None
            self._display_title = record.title
        else:
            self._ticket_key = match.group(1)
            self._display_title = record.title[match.end() :]

    def __repr__(self) -> str:
        """Return a short identifying representation."""
        return f"PullRequest({self.slug}#{self.number})"

    @property
    def record(self) -> PullRequestRecord:
        """Return the wrapped record."""
        return self._record

    @property
    def number(self) -> int:
        """Return the pull request number."""
        return self._record.number

    @property
    def url(self) -> str:
        """Return the pull request URL, unique across organizations."""
        return self._record.url

    @property
    def title(self) -> str:
        """Return the title as GitHub reports it."""
        return self._record.title

    @property
    def is_draft(self) -> bool:
        """Return whether the pull request is a draft."""
        return self._record.is_draft

    @property
    def updated_at(self) -> dt.datetime:
        """Return the last update timestamp."""
        return self._record.updated_at

    @property
    def slug(self) -> str:
        """Return the repository's ``owner/name``."""
        return self._record.repository.name_with_owner

    @property
    def owner(self) -> str:
        """Return the repository owner."""
        return parse_repo_slug(self.slug)[0]

    @property
    def repository_name(self) -> str:
        """Return the repository name without its owner."""
        return self._record.repository.name

    @property
    def ticket_key(self) -> str | None:
        """Return the ``ABC-123`` style key prefixed to the title, if any."""
        return self._ticket_key

    @property
    def display_title(self) -> str:
        """Return the title with any ticket prefix removed."""
        return self._display_title

    def latest_commit_id(self) -> str | None:
        """Return the head commit id, or ``None`` without commits."""
        commit = self._record.last_commit
        return commit.oid if commit is not None else None

    def ci_rollup_state(self) -> RollupState | None:
        """Return the head commit's CI rollup, or ``None`` when unknown."""
        commit = self._record.last_commit
        return commit.rollup_state if commit is not None else None

    def has_no_conflicts(self) -> bool:
        """Return whether GitHub reports the branch as mergeable."""
        return self._record.mergeable is Mergeability.MERGEABLE

    def has_changes_requested(self) -> bool:
        """Return whether a reviewer has requested changes."""
        return self._record.review_decision is ReviewDecision.CHANGES_REQUESTED

    def has_been_approved(self) -> bool:
        """Return whether the pull request is approved.

        A changes-requested verdict always wins over an approval.
        """
        return (
            self._record.review_decision is ReviewDecision.APPROVED
            and not self.has_changes_requested()
        )

    def waiting_for_review(self) -> bool:
        """Return whether the pull request still needs a review."""
        return (
            not self.is_draft
            and not self.has_been_approved()
            and not self.has_changes_requested()
            and self._record.review_decision is ReviewDecision.REVIEW_REQUIRED
        )

    def is_ready_to_be_merged(self) -> bool:
        """Return whether nothing stands between the pull request and a merge."""
        return not self.is_draft and self.has_been_approved() and self.has_no_conflicts()

    def is_blocked_by_other(self) -> bool:
        """Return whether the pull request only waits on someone else's review."""
        return not self.is_draft and self.waiting_for_review() and self.has_no_conflicts()

    def is_stale(self, now: dt.datetime | None = None) -> bool:
        """Return whether the last update happened on an earlier calendar day.

        Both instants are compared as local calendar dates, so an update at
        23:59 becomes stale at midnight.
        """
        reference = now if now is not None else utcnow()
        return local_date(self._record.updated_at) != local_date(reference)

    def classify(self, now: dt.datetime | None = None) -> frozenset[TriageLabel]:
        """Return the triage labels that apply, ignoring CI status."""
        labels: set[TriageLabel] = set()
        if self.is_draft:
            labels.add(TriageLabel.DRAFT)
        elif self.is_ready_to_be_merged():
            labels.add(TriageLabel.READY_TO_MERGE)
        elif self.is_blocked_by_other():
            labels.add(TriageLabel.BLOCKED_BY_OTHER)
        else:
            labels.add(TriageLabel.BLOCKED_BY_YOU)
        if self.is_stale(now):
            labels.add(TriageLabel.STALE)
        return frozenset(labels)
