"""Remediation commands offered on the dashboard."""

from __future__ import annotations

import typing as typ

import msgspec

from prtriage.logging import get_logger, log_info
from prtriage.triage.recommendations import MarkReady, RerunFailedJobs, SyncBranch

from .executor import CommandOutcome, CommandState

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from prtriage.github.client import GitHubClient
    from prtriage.triage.recommendations import RecommendedAction
    from prtriage.workspace.session import SessionContext

    from .executor import ActionExecutor, CommandStatus

logger = get_logger(__name__)

RERUNNABLE_CONCLUSIONS = frozenset({"failure", "cancelled"})
NO_FAILED_RUNS_LABEL = "No failed runs found"


class RerunSummary(msgspec.Struct, kw_only=True, frozen=True):
    """How many failed workflow runs were re-run successfully."""

    succeeded: int
    attempted: int

    def describe(self) -> str:
        """Render the summary as ``K of N succeeded``."""
        return f"{self.succeeded} of {self.attempted} succeeded"

    def outcome(self) -> CommandOutcome:
        """Map the summary to the command's terminal display state."""
        if self.attempted == 0:
            return CommandOutcome(state=CommandState.WARNING, label=NO_FAILED_RUNS_LABEL)
        if self.succeeded == self.attempted:
            state = CommandState.SUCCESS
        elif self.succeeded:
            state = CommandState.WARNING
        else:
            state = CommandState.ERROR
        return CommandOutcome(state=state, label=self.describe())


async def rerun_failed_workflows(
    client: GitHubClient, action: RerunFailedJobs
) -> RerunSummary:
    """Re-run every failed or cancelled workflow run for the action's commit.

    Runs are re-triggered one after another; a rejected re-run counts as a
    failure without stopping the rest.
    """
    runs = await client.list_workflow_runs(action.owner, action.repo, action.commit_id)
    failed = [run for run in runs if run.conclusion in RERUNNABLE_CONCLUSIONS]
    succeeded = 0
    for run in failed:
        if await client.rerun_failed_jobs(action.owner, action.repo, run.id):
            succeeded += 1
    summary = RerunSummary(succeeded=succeeded, attempted=len(failed))
    log_info(
        logger,
        "Re-ran failed jobs for %s/%s@%s: %s",
        action.owner,
        action.repo,
        action.commit_id,
        summary.describe(),
    )
    return summary


def command_id(action: RecommendedAction) -> str:
    """Return the identity used to guard re-entry for ``action``."""
    match action:
        case MarkReady(node_id=node_id):
            return f"mark_ready:{node_id}"
        case SyncBranch(owner=owner, repo=repo, number=number):
            return f"sync_branch:{owner}/{repo}#{number}"
        case RerunFailedJobs(owner=owner, repo=repo, commit_id=commit_id):
            return f"rerun_failed_jobs:{owner}/{repo}@{commit_id}"
    msg = f"Unsupported action: {action!r}"
    raise TypeError(msg)


def _failure_label(exc: Exception) -> str:
    return f"Failed: {exc}"


class DashboardActions:
    """Run recommended actions through an :class:`ActionExecutor`.

    ``on_completed`` is awaited after any command that ends in success or
    warning, usually to refresh the dashboard.
    """

    def __init__(
        self,
        session: SessionContext,
        executor: ActionExecutor,
        *,
        on_completed: cabc.Callable[[], cabc.Awaitable[object]] | None = None,
    ) -> None:
        """Bind the commands to ``session``'s client."""
        self._session = session
        self._executor = executor
        self._on_completed = on_completed

    async def execute(self, action: RecommendedAction) -> CommandStatus | None:
        """Dispatch ``action`` to its command."""
        match action:
            case MarkReady():
                return await self.mark_ready(action)
            case SyncBranch():
                return await self.sync_branch(action)
            case RerunFailedJobs():
                return await self.rerun_failed_jobs(action)
        msg = f"Unsupported action: {action!r}"
        raise TypeError(msg)

    async def mark_ready(self, action: MarkReady) -> CommandStatus | None:
        """Take a draft pull request out of draft."""
        client = self._session.client
        status = await self._executor.run(
            command_id(action),
            loading_label="Marking ready...",
            operation=lambda: client.mark_ready_for_review(action.node_id),
            on_success=lambda _: CommandOutcome(label="Ready for review"),
            on_error=_failure_label,
        )
        return await self._after(status)

    async def sync_branch(self, action: SyncBranch) -> CommandStatus | None:
        """Merge the base branch into the pull request branch."""
        client = self._session.client
        status = await self._executor.run(
            command_id(action),
            loading_label="Syncing...",
            operation=lambda: client.update_branch(
                action.owner, action.repo, action.number
            ),
            on_success=lambda _: CommandOutcome(
                label=f"Synced with {action.base_branch}"
            ),
            on_error=_failure_label,
        )
        return await self._after(status)

    async def rerun_failed_jobs(self, action: RerunFailedJobs) -> CommandStatus | None:
        """Re-run the failed workflow runs of the head commit."""
        client = self._session.client
        status = await self._executor.run(
            command_id(action),
            loading_label="Re-running...",
            operation=lambda: rerun_failed_workflows(client, action),
            on_success=RerunSummary.outcome,
            on_error=_failure_label,
        )
        return await self._after(status)

    async def _after(self, status: CommandStatus | None) -> CommandStatus | None:
        if (
            status is not None
            and self._on_completed is not None
            and status.state in {CommandState.SUCCESS, CommandState.WARNING}
        ):
            await self._on_completed()
        return status
