"""Remediation commands and the executor that runs them.

Public API
----------
ActionExecutor
    Runs one command per identity with in-flight guarding.
CommandState, CommandStatus, CommandOutcome
    Display state of a command and the outcome chosen on success.
DashboardActions
    Mark-ready, sync-branch and re-run commands bound to a session.
RerunSummary
    Partial-success report for re-running failed workflow runs.
"""

from __future__ import annotations

from .commands import (
    NO_FAILED_RUNS_LABEL,
    RERUNNABLE_CONCLUSIONS,
    DashboardActions,
    RerunSummary,
    command_id,
    rerun_failed_workflows,
)
from .executor import (
    FAILED_LABEL,
    ActionExecutor,
    CommandOutcome,
    CommandState,
    CommandStatus,
    StatusListener,
)

__all__ = [
    "FAILED_LABEL",
    "NO_FAILED_RUNS_LABEL",
    "RERUNNABLE_CONCLUSIONS",
    "ActionExecutor",
    "CommandOutcome",
    "CommandState",
    "CommandStatus",
    "DashboardActions",
    "RerunSummary",
    "StatusListener",
    "command_id",
    "rerun_failed_workflows",
]
