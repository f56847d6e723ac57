"""Behavioural tests for re-running failed workflow jobs."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from prtriage.actions import ActionExecutor, DashboardActions
from prtriage.github.models import WorkflowRun
from prtriage.triage import RerunFailedJobs
from tests.helpers.builders import DEFAULT_OID, make_session
from tests.helpers.fake_github import FakeGitHubClient

if typ.TYPE_CHECKING:
    from prtriage.actions import CommandStatus


class RerunContext(typ.TypedDict, total=False):
    """Shared state used by re-run steps."""

    client: FakeGitHubClient
    status: CommandStatus | None


@scenario("../rerun_failed_jobs.feature", "Some re-runs are rejected")
def test_some_reruns_rejected() -> None:
    """Behavioural test: partial success is reported as a count."""


@scenario("../rerun_failed_jobs.feature", "Every re-run is accepted")
def test_every_rerun_accepted() -> None:
    """Behavioural test: only failed or cancelled runs are attempted."""


@scenario("../rerun_failed_jobs.feature", "No failed runs")
def test_no_failed_runs() -> None:
    """Behavioural test: nothing to re-run is a warning."""


@pytest.fixture
def rerun_context() -> RerunContext:
    """Provide a fresh fake client per scenario."""
    return {"client": FakeGitHubClient()}


@given(
    parsers.parse(
        'workflow runs concluding "{first}", "{second}" and "{third}"'
    )
)
def workflow_runs(
    rerun_context: RerunContext, first: str, second: str, third: str
) -> None:
    """Register three workflow runs numbered from 1."""
    rerun_context["client"].workflow_runs = [
        WorkflowRun(id=index, conclusion=conclusion)
        for index, conclusion in enumerate((first, second, third), start=1)
    ]


@given(parsers.parse("GitHub rejects the re-run of workflow run {run_id:d}"))
def rejects_rerun(rerun_context: RerunContext, run_id: int) -> None:
    """Make one re-run request fail."""
    rerun_context["client"].rejected_reruns.add(run_id)


@when("I re-run the failed jobs")
def rerun_failed_jobs(rerun_context: RerunContext) -> None:
    """Run the re-run command through the executor."""

    async def _run() -> CommandStatus | None:
        executor = ActionExecutor()
        actions = DashboardActions(make_session(rerun_context["client"]), executor)
        try:
            return await actions.execute(
                RerunFailedJobs(
                    owner="acme", repo="api", commit_id=DEFAULT_OID, number=5
                )
            )
        finally:
            executor.close()

    rerun_context["status"] = asyncio.run(_run())


@then(parsers.parse('the command ends in "{state}" with "{label}"'))
def command_ends_in(rerun_context: RerunContext, state: str, label: str) -> None:
    """Check the terminal state and label."""
    status = rerun_context["status"]
    assert status is not None
    assert status.state == state
    assert status.label == label
