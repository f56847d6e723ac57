"""GitHub API client, records, errors and rate budget tracking."""

from __future__ import annotations

from .client import GitHubClient
from .config import GitHubClientConfig
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubError,
    GitHubErrorKind,
    GitHubResponseShapeError,
    NoPullRequestsFoundError,
)
from .models import (
    CheckRun,
    Mergeability,
    MergeStateStatus,
    OrganizationRecord,
    PullRequestRecord,
    ReviewDecision,
    RollupState,
    WorkflowRun,
)
from .quota import (
    LOW_REMAINING_THRESHOLD,
    ApiKind,
    QuotaTracker,
    RateLimitSnapshot,
    rate_limit_from_headers,
)

__all__ = [
    "LOW_REMAINING_THRESHOLD",
    "ApiKind",
    "CheckRun",
    "GitHubAPIError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConfigError",
    "GitHubError",
    "GitHubErrorKind",
    "GitHubResponseShapeError",
    "MergeStateStatus",
    "Mergeability",
    "NoPullRequestsFoundError",
    "OrganizationRecord",
    "PullRequestRecord",
    "QuotaTracker",
    "RateLimitSnapshot",
    "ReviewDecision",
    "RollupState",
    "WorkflowRun",
    "rate_limit_from_headers",
]
