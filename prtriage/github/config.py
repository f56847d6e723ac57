"""Configuration for the GitHub API client."""

from __future__ import annotations

import dataclasses
import os

from prtriage.github.errors import GitHubConfigError

_DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
_DEFAULT_REST_URL = "https://api.github.com"
_DEFAULT_TIMEOUT_S = 20.0


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubClientConfig:
    """Connection settings for one authenticated GitHub identity.

    Attributes
    ----------
    token
        Bearer token supplied by the caller. It is never validated locally;
        GitHub answers 401 when it is unusable.
    graphql_url
        GraphQL endpoint used for the bulk pull request search and mutations.
    rest_url
        REST API root used for check runs, workflow runs and branch updates.
    timeout_s
        Per-request timeout in seconds.
    user_agent
        ``User-Agent`` header sent with every request.

    """

    token: str
    graphql_url: str = _DEFAULT_GRAPHQL_URL
    rest_url: str = _DEFAULT_REST_URL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    user_agent: str = "prtriage/0.1"

    @staticmethod
    def _parse_timeout_from_env() -> float:
        raw_timeout = os.environ.get("PRTRIAGE_GITHUB_TIMEOUT_S")
        if raw_timeout is None:
            return _DEFAULT_TIMEOUT_S
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise GitHubConfigError.invalid_timeout(raw_timeout) from exc
        if timeout <= 0:
            raise GitHubConfigError.invalid_timeout(raw_timeout)
        return timeout

    @classmethod
    def from_env(cls) -> GitHubClientConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``PRTRIAGE_GITHUB_TOKEN``: required bearer token
        - ``PRTRIAGE_GITHUB_GRAPHQL_URL``: optional GraphQL endpoint override
        - ``PRTRIAGE_GITHUB_REST_URL``: optional REST root override
        - ``PRTRIAGE_GITHUB_TIMEOUT_S``: optional positive timeout in seconds

        Raises
        ------
        GitHubConfigError
            If the token is missing or the timeout is invalid.

        """
        token = os.environ.get("PRTRIAGE_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        return cls(
            token=token,
            graphql_url=os.environ.get(
                "PRTRIAGE_GITHUB_GRAPHQL_URL", _DEFAULT_GRAPHQL_URL
            ),
            rest_url=os.environ.get(
                "PRTRIAGE_GITHUB_REST_URL", _DEFAULT_REST_URL
            ).rstrip("/"),
            timeout_s=cls._parse_timeout_from_env(),
        )
