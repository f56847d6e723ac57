"""GitHub API errors.

Every failure surfaced by :class:`~prtriage.github.client.GitHubClient`
carries a :class:`GitHubErrorKind` so callers can decide between asking for a
new token, waiting for the rate budget to refill, or offering a retry.
"""

from __future__ import annotations

import datetime as dt
import enum

_CONTENT_PREVIEW_LIMIT = 100
_HTTP_UNAUTHORIZED = 401
_HTTP_RATE_LIMITED = 429
_HTTP_SERVER_ERROR_THRESHOLD = 500


class GitHubErrorKind(enum.StrEnum):
    """Failure classes reported by the GitHub client."""

    AUTH_INVALID = "auth_invalid"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_FAILURE = "transport_failure"
    REQUEST_REJECTED = "request_rejected"
    MALFORMED_RESPONSE = "malformed_response"


class GitHubError(RuntimeError):
    """Base class for errors raised while talking to GitHub."""

    kind: GitHubErrorKind = GitHubErrorKind.TRANSPORT_FAILURE

    @property
    def is_retryable(self) -> bool:
        """Return whether the user may simply try the same call again."""
        return self.kind is GitHubErrorKind.TRANSPORT_FAILURE


class GitHubAPIError(GitHubError):
    """Raised when GitHub rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        kind: GitHubErrorKind,
        status_code: int | None = None,
        reset_at: dt.datetime | None = None,
    ) -> None:
        """Initialise with a message, failure kind and optional HTTP context."""
        self.kind = kind
        self.status_code = status_code
        self.reset_at = reset_at
        super().__init__(message)

    @classmethod
    def auth_invalid(cls) -> GitHubAPIError:
        """Return an error for a rejected or expired token."""
        return cls(
            "Invalid or expired GitHub token. Please check your token and try again.",
            kind=GitHubErrorKind.AUTH_INVALID,
            status_code=_HTTP_UNAUTHORIZED,
        )

    @classmethod
    def rate_limited(
        cls,
        *,
        status_code: int | None = _HTTP_RATE_LIMITED,
        reset_at: dt.datetime | None = None,
    ) -> GitHubAPIError:
        """Return an error for an exhausted rate budget."""
        msg = "GitHub API rate limit exceeded"
        if reset_at is not None:
            msg = f"{msg}, resets at {reset_at.isoformat()}"
        return cls(
            msg,
            kind=GitHubErrorKind.RATE_LIMITED,
            status_code=status_code,
            reset_at=reset_at,
        )

    @classmethod
    def http_error(cls, status_code: int, reason: str = "") -> GitHubAPIError:
        """Return an error for a non-2xx response.

        5xx responses are transport failures; anything else is a rejected
        request.
        """
        kind = (
            GitHubErrorKind.TRANSPORT_FAILURE
            if status_code >= _HTTP_SERVER_ERROR_THRESHOLD
            else GitHubErrorKind.REQUEST_REJECTED
        )
        msg = f"GitHub HTTP {status_code}"
        if reason:
            msg = f"{msg}: {reason}"
        return cls(msg, kind=kind, status_code=status_code)

    @classmethod
    def graphql_errors(cls, errors: object) -> GitHubAPIError:
        """Return an error for a GraphQL ``errors`` payload."""
        messages = _graphql_error_messages(errors)
        return cls(
            f"GitHub GraphQL errors: {messages}",
            kind=GitHubErrorKind.REQUEST_REJECTED,
        )

    @classmethod
    def timeout(cls) -> GitHubAPIError:
        """Return an error for a request that timed out."""
        return cls(
            "GitHub API request timed out",
            kind=GitHubErrorKind.TRANSPORT_FAILURE,
        )

    @classmethod
    def network_error(cls, detail: str) -> GitHubAPIError:
        """Return an error for DNS, connection or TLS failures."""
        return cls(
            f"GitHub API network error: {detail}",
            kind=GitHubErrorKind.TRANSPORT_FAILURE,
        )


def _graphql_error_messages(errors: object) -> str:
    if isinstance(errors, list):
        parts = [
            str(error.get("message", error)) if isinstance(error, dict) else str(error)
            for error in errors
        ]
        return ", ".join(parts)
    return str(errors)


class GitHubResponseShapeError(GitHubError):
    """Raised when a GitHub response is not the shape the client expects."""

    kind = GitHubErrorKind.MALFORMED_RESPONSE

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, content: str) -> GitHubResponseShapeError:
        """Return an error for a body that is not valid JSON."""
        if len(content) > _CONTENT_PREVIEW_LIMIT:
            content = content[:_CONTENT_PREVIEW_LIMIT] + "..."
        return cls(f"GitHub response is not valid JSON: {content}")

    @classmethod
    def invalid_field(cls, field: str, detail: str) -> GitHubResponseShapeError:
        """Return an error for a field whose value fails validation."""
        return cls(f"GitHub response field {field} is invalid: {detail}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("PRTRIAGE_GITHUB_TOKEN is required for the GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")

    @classmethod
    def invalid_timeout(cls, value: str) -> GitHubConfigError:
        """Return an error for an unusable timeout setting."""
        return cls(
            f"Invalid PRTRIAGE_GITHUB_TIMEOUT_S '{value}'. Must be a positive number"
        )


class NoPullRequestsFoundError(LookupError):
    """Raised when the assigned pull request search matches nothing.

    This is an expected outcome rather than a failure; it is kept separate
    from :class:`GitHubError` so an empty dashboard is never mistaken for a
    transport problem.
    """

    def __init__(self, organization: str) -> None:
        """Record the organization that returned no results."""
        self.organization = organization
        super().__init__(
            f"No open pull requests assigned to you in {organization}"
        )
