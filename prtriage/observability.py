"""Structured log events for triage refreshes and remediation actions.

Events are emitted through femtologging as ``[event.type] key=value`` lines
so log aggregators can parse them without a dedicated metrics pipeline.
Successful lifecycle steps log at INFO, per-item degradation and low rate
budgets at WARNING, and aborted refreshes or failed actions at ERROR.
"""

from __future__ import annotations

import enum
import typing as typ

from prtriage.github.errors import (
    GitHubConfigError,
    GitHubError,
    GitHubErrorKind,
    NoPullRequestsFoundError,
)
from prtriage.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)


class TriageEventType(enum.StrEnum):
    """Structured log event types."""

    REFRESH_STARTED = "triage.refresh.started"
    REFRESH_COMPLETED = "triage.refresh.completed"
    REFRESH_EMPTY = "triage.refresh.empty"
    REFRESH_FAILED = "triage.refresh.failed"
    CI_DEGRADED = "triage.ci.degraded"
    ACTIONS_DEGRADED = "triage.actions.degraded"
    QUOTA_LOW = "github.quota.low"
    ACTION_COMPLETED = "action.completed"
    ACTION_FAILED = "action.failed"


class ErrorCategory(enum.StrEnum):
    """Categories used to route failures to the right remedy."""

    REAUTHENTICATE = "reauthenticate"
    WAIT_FOR_QUOTA = "wait_for_quota"
    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    EMPTY_RESULT = "empty_result"
    UNKNOWN = "unknown"


_KIND_CATEGORY_MAP: dict[GitHubErrorKind, ErrorCategory] = {
    GitHubErrorKind.AUTH_INVALID: ErrorCategory.REAUTHENTICATE,
    GitHubErrorKind.RATE_LIMITED: ErrorCategory.WAIT_FOR_QUOTA,
    GitHubErrorKind.TRANSPORT_FAILURE: ErrorCategory.TRANSIENT,
    GitHubErrorKind.REQUEST_REJECTED: ErrorCategory.CLIENT_ERROR,
    GitHubErrorKind.MALFORMED_RESPONSE: ErrorCategory.SCHEMA_DRIFT,
}


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting and user messaging."""
    if isinstance(exc, GitHubError):
        return _KIND_CATEGORY_MAP.get(exc.kind, ErrorCategory.UNKNOWN)
    if isinstance(exc, GitHubConfigError):
        return ErrorCategory.CONFIGURATION
    if isinstance(exc, NoPullRequestsFoundError):
        return ErrorCategory.EMPTY_RESULT
    return ErrorCategory.UNKNOWN


class TriageEventLogger:
    """Emit structured triage and action events via femtologging."""

    def log_refresh_started(self, *, refresh_id: int, organization: str) -> None:
        """Log the start of a refresh cycle."""
        log_info(
            logger,
            "[%s] refresh_id=%d organization=%s",
            TriageEventType.REFRESH_STARTED,
            refresh_id,
            organization,
        )

    def log_refresh_completed(
        self,
        *,
        refresh_id: int,
        organization: str,
        pull_requests: int,
        ci_failing: int,
        duration: dt.timedelta,
    ) -> None:
        """Log a finished refresh with item counts."""
        log_info(
            logger,
            "[%s] refresh_id=%d organization=%s pull_requests=%d "
            "ci_failing=%d duration_seconds=%.3f",
            TriageEventType.REFRESH_COMPLETED,
            refresh_id,
            organization,
            pull_requests,
            ci_failing,
            duration.total_seconds(),
        )

    def log_refresh_empty(self, *, refresh_id: int, organization: str) -> None:
        """Log a refresh whose search matched nothing."""
        log_info(
            logger,
            "[%s] refresh_id=%d organization=%s",
            TriageEventType.REFRESH_EMPTY,
            refresh_id,
            organization,
        )

    def log_refresh_failed(
        self,
        *,
        refresh_id: int,
        organization: str,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log an aborted refresh with its error category."""
        log_error(
            logger,
            "[%s] refresh_id=%d organization=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            TriageEventType.REFRESH_FAILED,
            refresh_id,
            organization,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_ci_degraded(
        self, *, pull_request_url: str, commit_id: str, error: BaseException
    ) -> None:
        """Log a CI lookup that fell back to an ``ERROR`` status."""
        log_warning(
            logger,
            "[%s] pull_request=%s commit=%s error_category=%s error_message=%s",
            TriageEventType.CI_DEGRADED,
            pull_request_url,
            commit_id,
            categorize_error(error),
            str(error),
        )

    def log_actions_degraded(
        self, *, pull_request_url: str, error: BaseException
    ) -> None:
        """Log a pull request whose actions could not be derived."""
        log_warning(
            logger,
            "[%s] pull_request=%s error_type=%s error_message=%s",
            TriageEventType.ACTIONS_DEGRADED,
            pull_request_url,
            type(error).__name__,
            str(error),
        )

    def log_action_completed(
        self, *, command_id: str, state: str, label: str
    ) -> None:
        """Log the outcome of a remediation command."""
        log_info(
            logger,
            "[%s] command_id=%s state=%s label=%s",
            TriageEventType.ACTION_COMPLETED,
            command_id,
            state,
            label,
        )

    def log_action_failed(self, *, command_id: str, error: BaseException) -> None:
        """Log a remediation command whose operation raised."""
        log_error(
            logger,
            "[%s] command_id=%s error_type=%s error_category=%s error_message=%s",
            TriageEventType.ACTION_FAILED,
            command_id,
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )
