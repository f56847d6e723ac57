"""Typed records decoded from GitHub responses.

Records are immutable msgspec structs holding exactly what the API returned;
derived predicates live on :class:`prtriage.triage.pull_request.PullRequest`.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import enum

import msgspec


class Mergeability(enum.StrEnum):
    """GitHub's ``mergeable`` verdict for a pull request."""

    MERGEABLE = "MERGEABLE"
    CONFLICTING = "CONFLICTING"
    UNKNOWN = "UNKNOWN"


class MergeStateStatus(enum.StrEnum):
    """Detailed merge state reported in ``mergeStateStatus``."""

    BEHIND = "BEHIND"
    BLOCKED = "BLOCKED"
    CLEAN = "CLEAN"
    DIRTY = "DIRTY"
    DRAFT = "DRAFT"
    HAS_HOOKS = "HAS_HOOKS"
    UNKNOWN = "UNKNOWN"
    UNSTABLE = "UNSTABLE"


class ReviewDecision(enum.StrEnum):
    """Aggregated review verdict computed by GitHub."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


class RollupState(enum.StrEnum):
    """Combined CI state of a commit (``statusCheckRollup.state``)."""

    ERROR = "ERROR"
    EXPECTED = "EXPECTED"
    FAILURE = "FAILURE"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"


class RepositoryRef(msgspec.Struct, kw_only=True, frozen=True):
    """Repository a pull request belongs to."""

    name: str
    name_with_owner: str


class Actor(msgspec.Struct, kw_only=True, frozen=True):
    """A GitHub user or bot."""

    login: str
    avatar_url: str | None = None


class CommitRef(msgspec.Struct, kw_only=True, frozen=True):
    """The most recent commit on a pull request and its CI rollup."""

    oid: str
    rollup_state: RollupState | None = None


class Review(msgspec.Struct, kw_only=True, frozen=True):
    """One submitted review, kept for display only."""

    state: str
    author: Actor | None = None


class PullRequestRecord(msgspec.Struct, kw_only=True, frozen=True):
    """One open pull request as returned by the bulk search.

    Attributes
    ----------
    node_id
        GraphQL node id, needed to mark a draft ready for review.
    title, url, number
        Identity and display fields.
    is_draft
        Whether the pull request is a draft.
    mergeable
        Conflict verdict; ``UNKNOWN`` while GitHub is still computing it.
    merge_state_status
        Finer merge state such as ``BEHIND`` or ``DIRTY``.
    head_ref_name, base_ref_name
        Branch names.
    created_at, updated_at
        Timezone-aware timestamps.
    repository
        Repository name and ``owner/name``.
    author
        Author, absent for deleted accounts.
    last_commit
        Most recent commit, absent when the pull request has no commits.
    review_decision
        GitHub's precedence-resolved review verdict, if any.
    assignees
        Logins of assignees.
    reviews
        Submitted reviews.

    """

    node_id: str
    title: str
    url: str
    number: int
    is_draft: bool = False
    mergeable: Mergeability = Mergeability.UNKNOWN
    merge_state_status: MergeStateStatus = MergeStateStatus.UNKNOWN
    head_ref_name: str = ""
    base_ref_name: str = ""
    created_at: dt.datetime
    updated_at: dt.datetime
    repository: RepositoryRef
    author: Actor | None = None
    last_commit: CommitRef | None = None
    review_decision: ReviewDecision | None = None
    assignees: tuple[str, ...] = ()
    reviews: tuple[Review, ...] = ()


class CheckRun(msgspec.Struct, kw_only=True, frozen=True):
    """A completed check run on a commit (REST ``check_runs`` entry)."""

    name: str
    conclusion: str | None = None
    html_url: str | None = None
    details_url: str | None = None


class CheckRunList(msgspec.Struct, kw_only=True, frozen=True):
    """REST envelope for ``/commits/{sha}/check-runs``."""

    check_runs: tuple[CheckRun, ...] = ()


class WorkflowRun(msgspec.Struct, kw_only=True, frozen=True):
    """A GitHub Actions workflow run for a commit."""

    id: int
    name: str | None = None
    status: str | None = None
    conclusion: str | None = None
    html_url: str | None = None


class WorkflowRunList(msgspec.Struct, kw_only=True, frozen=True):
    """REST envelope for ``/actions/runs``."""

    workflow_runs: tuple[WorkflowRun, ...] = ()


class OrganizationRecord(msgspec.Struct, kw_only=True, frozen=True):
    """An organization the authenticated user belongs to."""

    login: str
    avatar_url: str | None = None
    description: str | None = None


class Viewer(msgspec.Struct, kw_only=True, frozen=True):
    """The user the token authenticates as."""

    login: str
    avatar_url: str | None = None
