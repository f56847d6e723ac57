"""CI status enrichment for pull requests.

The bulk search already carries each head commit's CI rollup, so most pull
requests need no further calls. Only a failing or erroring rollup triggers a
targeted check-run lookup to name the failing checks.
"""

from __future__ import annotations

import enum
import re
import typing as typ

import msgspec

from prtriage.github.errors import GitHubError
from prtriage.github.models import RollupState

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from prtriage.github.models import CheckRun
    from prtriage.observability import TriageEventLogger

    from .pull_request import PullRequest

_CHECK_NAME_PREFIX = re.compile(r"^rails-ci\s/ ")
_FAILED_CONCLUSION = "failure"
_MISSING_LINK = "#"


class CIStatus(enum.StrEnum):
    """CI verdict shown for a pull request."""

    NONE = "none"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"
    PENDING = "pending"

    @property
    def is_failing(self) -> bool:
        """Return whether the status reports a failure or an error."""
        return self in {CIStatus.FAILURE, CIStatus.ERROR}


_ROLLUP_STATUS_MAP: dict[RollupState, CIStatus] = {
    RollupState.SUCCESS: CIStatus.SUCCESS,
    RollupState.PENDING: CIStatus.PENDING,
    RollupState.EXPECTED: CIStatus.PENDING,
    RollupState.FAILURE: CIStatus.FAILURE,
    RollupState.ERROR: CIStatus.ERROR,
}


class FailedCheck(msgspec.Struct, kw_only=True, frozen=True):
    """A failing check run, with a display name and a link to its details."""

    name: str
    link: str


class CIReport(msgspec.Struct, kw_only=True, frozen=True):
    """CI status of one pull request; rebuilt on every refresh.

    ``failed_checks`` is only ever non-empty for failing statuses.
    """

    status: CIStatus
    failed_checks: tuple[FailedCheck, ...] = ()


NO_CI = CIReport(status=CIStatus.NONE)


class CheckRunSource(typ.Protocol):
    """Anything that can list completed check runs for a commit."""

    def list_check_runs(
        self, owner: str, repo: str, sha: str
    ) -> cabc.Awaitable[list[CheckRun]]:
        """Return completed check runs for ``sha``."""
        ...


def status_from_rollup(state: RollupState | None) -> CIStatus:
    """Map a commit rollup state to a :class:`CIStatus`."""
    if state is None:
        return CIStatus.NONE
    return _ROLLUP_STATUS_MAP.get(state, CIStatus.NONE)


def display_check_name(name: str) -> str:
    """Strip the ``rails-ci / `` prefix that CI adds to check names."""
    return _CHECK_NAME_PREFIX.sub("", name, count=1)


def failed_checks_from_runs(runs: cabc.Iterable[CheckRun]) -> tuple[FailedCheck, ...]:
    """Return the failing check runs as display-ready :class:`FailedCheck` items."""
    return tuple(
        FailedCheck(
            name=display_check_name(run.name),
            link=run.html_url or run.details_url or _MISSING_LINK,
        )
        for run in runs
        if run.conclusion == _FAILED_CONCLUSION
    )


async def enrich_ci(
    pull_request: PullRequest,
    source: CheckRunSource,
    *,
    events: TriageEventLogger | None = None,
) -> CIReport:
    """Compute the CI report for one pull request.

    A lookup failure degrades to ``ERROR`` with no failed checks instead of
    propagating, so one broken repository never hides its siblings.
    """
    commit_id = pull_request.latest_commit_id()
    if commit_id is None:
        return NO_CI

    status = status_from_rollup(pull_request.ci_rollup_state())
    if not status.is_failing:
        return CIReport(status=status)

    try:
        runs = await source.list_check_runs(
            pull_request.owner, pull_request.repository_name, commit_id
        )
    except (GitHubError, ValueError) as exc:
        if events is not None:
            events.log_ci_degraded(
                pull_request_url=pull_request.url, commit_id=commit_id, error=exc
            )
        return CIReport(status=CIStatus.ERROR)

    return CIReport(status=status, failed_checks=failed_checks_from_runs(runs))
