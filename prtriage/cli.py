"""Triage the open pull requests assigned to you in a GitHub organization."""

from __future__ import annotations

import argparse
import asyncio
import os
import typing as typ

from prtriage.actions import ActionExecutor, CommandState, DashboardActions
from prtriage.cache import CacheConfig
from prtriage.github import GitHubClientConfig, GitHubConfigError, GitHubError
from prtriage.github.errors import GitHubErrorKind
from prtriage.logging import configure_logging, get_logger, log_info, log_warning
from prtriage.triage import TriageEngine, TriageLabel
from prtriage.workspace import (
    Dashboard,
    OrganizationDirectory,
    SessionContext,
    WorkspaceSelection,
)

if typ.TYPE_CHECKING:
    from prtriage.triage import RecommendedAction, TriagedPullRequest, TriageResult

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_REAUTHENTICATE = 2

ACTION_NAMES = ("mark_ready", "sync_branch", "rerun_failed_jobs")

_REAUTHENTICATE_MESSAGE = (
    "GitHub rejected the token. Create a new personal access token and set "
    "PRTRIAGE_GITHUB_TOKEN."
)


def _parse_act(value: str) -> tuple[int, str]:
    number, sep, action = value.partition(":")
    if not sep or action not in ACTION_NAMES:
        msg = f"expected NUMBER:ACTION with ACTION one of {', '.join(ACTION_NAMES)}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return int(number), action
    except ValueError as exc:
        msg = f"invalid pull request number: {number!r}"
        raise argparse.ArgumentTypeError(msg) from exc


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``prtriage`` command."""
    parser = argparse.ArgumentParser(prog="prtriage", description=__doc__)
    parser.add_argument(
        "--org",
        default=None,
        help="Organization to triage; lists your organizations when omitted",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (defaults to PRTRIAGE_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete every cached entry before running",
    )
    parser.add_argument(
        "--act",
        type=_parse_act,
        default=None,
        metavar="NUMBER:ACTION",
        help="Run a recommended action on a pull request after triage",
    )
    return parser


def _action_name(action: RecommendedAction) -> str:
    return str(type(action).__struct_config__.tag)


def format_item(item: TriagedPullRequest) -> str:
    """Render one triaged pull request as a single line."""
    pr = item.pull_request
    labels = ",".join(label for label in TriageLabel if label in item.labels)
    line = f"{pr.slug}#{pr.number} {pr.display_title} [{labels}]"
    if pr.ticket_key is not None:
        line = f"{line} ticket={pr.ticket_key}"
    if item.ci is not None:
        line = f"{line} ci={item.ci.status}"
        if item.ci.failed_checks:
            names = ", ".join(check.name for check in item.ci.failed_checks)
            line = f"{line} ({names})"
    if item.actions:
        actions = ",".join(_action_name(action) for action in item.actions)
        line = f"{line} actions={actions}"
    return line


def render_result(result: TriageResult, quota_summary: str | None) -> None:
    """Print a triage result followed by the rate budget line."""
    if result.is_empty:
        print(f"No open pull requests assigned to you in {result.organization}")
    for item in result.items:
        print(format_item(item))
    if quota_summary is not None:
        print(quota_summary)


def _find_action(
    result: TriageResult, number: int, name: str
) -> RecommendedAction | None:
    for item in result.items:
        if item.pull_request.number != number:
            continue
        for action in item.actions:
            if _action_name(action) == name:
                return action
    return None


async def _act(
    session: SessionContext, dashboard: Dashboard, number: int, name: str
) -> int:
    result = dashboard.result
    action = _find_action(result, number, name) if result is not None else None
    if action is None:
        print(f"No {name} action is recommended for #{number}")
        return EXIT_FAILURE

    executor = ActionExecutor()
    actions = DashboardActions(session, executor, on_completed=dashboard.refresh)
    try:
        status = await actions.execute(action)
    finally:
        executor.close()
    if status is None:
        return EXIT_FAILURE
    print(f"#{number} {name}: {status.state} {status.label}")
    if status.state is CommandState.ERROR:
        return EXIT_FAILURE
    return EXIT_OK


async def run(args: argparse.Namespace, session: SessionContext) -> int:
    """Run the command against an already constructed session."""
    try:
        viewer = await session.client.fetch_viewer()
    except GitHubError as exc:
        if exc.kind is GitHubErrorKind.AUTH_INVALID:
            print(_REAUTHENTICATE_MESSAGE)
            return EXIT_REAUTHENTICATE
        print(f"Unable to reach GitHub: {exc}")
        return EXIT_FAILURE
    log_info(logger, "Authenticated as %s", viewer.login)

    if args.clear_cache:
        session.cache.clear()
        print("Cache cleared")

    directory = OrganizationDirectory(session)
    try:
        if args.org is None:
            for org in await directory.list_organizations():
                print(org.login)
            return EXIT_OK
        if not await directory.contains(args.org):
            print(f"Organization {args.org} not found for {viewer.login}")
            return EXIT_FAILURE
    except GitHubError as exc:
        print(f"Unable to load organizations: {exc}")
        return EXIT_FAILURE

    selection = WorkspaceSelection()
    dashboard = Dashboard(session, selection, TriageEngine(session))
    await selection.select(args.org)
    if dashboard.error is not None:
        print(f"Error loading pull requests: {dashboard.error}")
        return EXIT_FAILURE

    exit_code = EXIT_OK
    if args.act is not None:
        exit_code = await _act(session, dashboard, *args.act)

    if dashboard.result is not None:
        render_result(dashboard.result, dashboard.quota_summary)
    dashboard.close()
    return exit_code


async def _run_with_session(
    args: argparse.Namespace,
    github_config: GitHubClientConfig,
    cache_config: CacheConfig,
) -> int:
    session = SessionContext.from_config(github_config, cache_config)
    try:
        return await run(args, session)
    finally:
        await session.aclose()


def main(argv: list[str] | None = None) -> int:
    """Triage pull requests from the command line.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 on failure, 2 when the token must be
        replaced.

    """
    args = build_parser().parse_args(argv)

    raw_level = args.log_level or os.environ.get("PRTRIAGE_LOG_LEVEL")
    normalized_level, invalid_level = configure_logging(raw_level)
    if raw_level and invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            raw_level,
            normalized_level,
        )

    try:
        github_config = GitHubClientConfig.from_env()
    except GitHubConfigError as exc:
        print(f"Configuration error: {exc}")
        return EXIT_REAUTHENTICATE

    return asyncio.run(_run_with_session(args, github_config, CacheConfig.from_env()))


if __name__ == "__main__":
    raise SystemExit(main())
