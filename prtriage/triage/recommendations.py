"""Remediation actions recommended for a pull request.

Each recommendation carries exactly the identifiers its command needs, so
the action layer never has to look back at the pull request record.
"""

from __future__ import annotations

import typing as typ

import msgspec

from prtriage.github.models import MergeStateStatus

if typ.TYPE_CHECKING:
    from .ci import CIReport
    from .pull_request import PullRequest


class MarkReady(msgspec.Struct, kw_only=True, frozen=True, tag="mark_ready"):
    """Convert a draft pull request into one ready for review."""

    node_id: str
    number: int


class SyncBranch(msgspec.Struct, kw_only=True, frozen=True, tag="sync_branch"):
    """Merge the base branch into a pull request that has fallen behind."""

    owner: str
    repo: str
    base_branch: str
    number: int


class RerunFailedJobs(
    msgspec.Struct, kw_only=True, frozen=True, tag="rerun_failed_jobs"
):
    """Re-run failed workflow jobs for a pull request's head commit."""

    owner: str
    repo: str
    commit_id: str
    number: int


RecommendedAction = MarkReady | SyncBranch | RerunFailedJobs


def recommend_actions(
    pull_request: PullRequest, ci: CIReport | None = None
) -> tuple[RecommendedAction, ...]:
    """Return every action worth offering for ``pull_request``.

    The checks are independent; a pull request can need several actions at
    once or none at all. Without a CI report no re-run is offered.
    """
    record = pull_request.record
    actions: list[RecommendedAction] = []

    if record.is_draft:
        actions.append(MarkReady(node_id=record.node_id, number=record.number))

    if record.merge_state_status is MergeStateStatus.BEHIND:
        actions.append(
            SyncBranch(
                owner=pull_request.owner,
                repo=pull_request.repository_name,
                base_branch=record.base_ref_name,
                number=record.number,
            )
        )

    commit_id = pull_request.latest_commit_id()
    if (
        ci is not None
        and ci.status.is_failing
        and ci.failed_checks
        and commit_id is not None
    ):
        actions.append(
            RerunFailedJobs(
                owner=pull_request.owner,
                repo=pull_request.repository_name,
                commit_id=commit_id,
                number=record.number,
            )
        )

    return tuple(actions)
