"""GitHub API client used by the triage engine and the action commands.

Two call shapes share one authenticated ``httpx.AsyncClient``: a bulk GraphQL
search that returns every field the triage rules need, and narrow REST
lookups or mutations for CI details and remediation actions. Every response,
including failed ones, feeds its rate-limit headers to the optional
:class:`~prtriage.github.quota.QuotaTracker`.
"""

from __future__ import annotations

import typing as typ

import httpx
import msgspec

from prtriage.logging import get_logger, log_warning

from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubError,
    GitHubResponseShapeError,
    NoPullRequestsFoundError,
)
from .models import (
    CheckRun,
    CheckRunList,
    OrganizationRecord,
    PullRequestRecord,
    Viewer,
    WorkflowRun,
    WorkflowRunList,
)
from .quota import ApiKind, rate_limit_from_headers

if typ.TYPE_CHECKING:
    from .config import GitHubClientConfig
    from .quota import QuotaTracker

logger = get_logger(__name__)

SEARCH_PAGE_SIZE = 100

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_RATE_LIMITED = 429

_ASSIGNED_PULL_REQUESTS_QUERY = """
query AssignedPullRequests($searchQuery: String!, $first: Int!) {
  search(query: $searchQuery, type: ISSUE, first: $first) {
    issueCount
    edges {
      node {
        ... on PullRequest {
          id
          title
          url
          number
          isDraft
          mergeable
          mergeStateStatus
          headRefName
          baseRefName
          createdAt
          updatedAt
          repository {
            name
            nameWithOwner
          }
          author {
            login
            avatarUrl
          }
          commits(last: 1) {
            nodes {
              commit {
                oid
                statusCheckRollup {
                  state
                }
              }
            }
          }
          assignees(first: 10) {
            nodes {
              login
            }
          }
          reviewDecision
          reviews(first: 10) {
            nodes {
              state
              author {
                login
                avatarUrl
              }
            }
          }
        }
      }
    }
  }
}
"""

_MARK_READY_MUTATION = """
mutation MarkReadyForReview($pullRequestId: ID!) {
  markPullRequestReadyForReview(input: {pullRequestId: $pullRequestId}) {
    pullRequest {
      id
      isDraft
    }
  }
}
"""


def assigned_pull_requests_search(organization: str) -> str:
    """Return the search string for open pull requests assigned to the viewer."""
    return f"is:pr is:open org:{organization} assignee:@me"


def _actor(raw: object) -> dict[str, typ.Any] | None:
    if not isinstance(raw, dict) or not isinstance(raw.get("login"), str):
        return None
    return {"login": raw["login"], "avatar_url": raw.get("avatarUrl")}


def _nodes(connection: object) -> list[dict[str, typ.Any]]:
    if not isinstance(connection, dict):
        return []
    nodes = connection.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [node for node in nodes if isinstance(node, dict)]


def _last_commit(node: dict[str, typ.Any]) -> dict[str, typ.Any] | None:
    commits = _nodes(node.get("commits"))
    if not commits:
        return None
    commit = commits[-1].get("commit")
    if not isinstance(commit, dict) or not isinstance(commit.get("oid"), str):
        return None
    rollup = commit.get("statusCheckRollup")
    state = rollup.get("state") if isinstance(rollup, dict) else None
    return {"oid": commit["oid"], "rollup_state": state}


def _pull_request_payload(node: dict[str, typ.Any]) -> dict[str, typ.Any]:
    """Flatten a GraphQL search node into ``PullRequestRecord`` fields."""
    repository = node.get("repository")
    if not isinstance(repository, dict):
        raise GitHubResponseShapeError.missing("search.edges.node.repository")
    return {
        "node_id": node.get("id"),
        "title": node.get("title"),
        "url": node.get("url"),
        "number": node.get("number"),
        "is_draft": bool(node.get("isDraft", False)),
        "mergeable": node.get("mergeable") or "UNKNOWN",
        "merge_state_status": node.get("mergeStateStatus") or "UNKNOWN",
        "head_ref_name": node.get("headRefName") or "",
        "base_ref_name": node.get("baseRefName") or "",
        "created_at": node.get("createdAt"),
        "updated_at": node.get("updatedAt"),
        "repository": {
            "name": repository.get("name"),
            "name_with_owner": repository.get("nameWithOwner"),
        },
        "author": _actor(node.get("author")),
        "last_commit": _last_commit(node),
        "review_decision": node.get("reviewDecision"),
        "assignees": [
            assignee["login"]
            for assignee in _nodes(node.get("assignees"))
            if isinstance(assignee.get("login"), str)
        ],
        "reviews": [
            {"state": review.get("state"), "author": _actor(review.get("author"))}
            for review in _nodes(node.get("reviews"))
            if isinstance(review.get("state"), str)
        ],
    }


def _search_nodes(data: dict[str, typ.Any]) -> list[dict[str, typ.Any]]:
    search = data.get("search")
    if not isinstance(search, dict):
        raise GitHubResponseShapeError.missing("search")
    edges = search.get("edges")
    if not isinstance(edges, list):
        raise GitHubResponseShapeError.missing("search.edges")
    nodes: list[dict[str, typ.Any]] = []
    for edge in edges:
        node = edge.get("node") if isinstance(edge, dict) else None
        # Non-pull-request hits come back as empty objects from the fragment.
        if isinstance(node, dict) and node:
            nodes.append(node)
    return nodes


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == _HTTP_RATE_LIMITED:
        return True
    return (
        response.status_code == _HTTP_FORBIDDEN
        and response.headers.get("x-ratelimit-remaining") == "0"
    )


def _has_rate_limited_error(errors: object) -> bool:
    return isinstance(errors, list) and any(
        isinstance(error, dict) and error.get("type") == "RATE_LIMITED"
        for error in errors
    )


def _convert[T](payload: object, target: type[T], *, field: str) -> T:
    try:
        return msgspec.convert(payload, type=target)
    except msgspec.ValidationError as exc:
        raise GitHubResponseShapeError.invalid_field(field, str(exc)) from exc


class GitHubClient:
    """Authenticated GitHub client for triage queries and remediation actions."""

    def __init__(
        self,
        config: GitHubClientConfig,
        *,
        quota: QuotaTracker | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration and optional collaborators."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._quota = quota
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={"User-Agent": config.user_agent},
        )

    @property
    def config(self) -> GitHubClientConfig:
        """Return the configuration this client was built with."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_viewer(self) -> Viewer:
        """Return the user the token authenticates as.

        Raises
        ------
        GitHubAPIError
            With kind ``auth_invalid`` when the token is rejected.

        """
        payload = await self._rest("GET", "/user")
        return _convert(payload, Viewer, field="user")

    async def list_organizations(self) -> list[OrganizationRecord]:
        """Return the organizations the authenticated user belongs to."""
        payload = await self._rest("GET", "/user/orgs", params={"per_page": 100})
        return list(_convert(payload, tuple[OrganizationRecord, ...], field="orgs"))

    async def search_assigned_pull_requests(
        self, organization: str
    ) -> list[PullRequestRecord]:
        """Return up to 100 open pull requests in ``organization`` assigned to me.

        Results beyond the first page are silently dropped.

        Raises
        ------
        NoPullRequestsFoundError
            When the search matches no pull requests.
        GitHubError
            For authentication, rate-limit, transport or shape failures.

        """
        data = await self._graphql(
            _ASSIGNED_PULL_REQUESTS_QUERY,
            {
                "searchQuery": assigned_pull_requests_search(organization),
                "first": SEARCH_PAGE_SIZE,
            },
        )
        nodes = _search_nodes(data)
        if not nodes:
            raise NoPullRequestsFoundError(organization)
        return [
            _convert(
                _pull_request_payload(node),
                PullRequestRecord,
                field="search.edges.node",
            )
            for node in nodes
        ]

    async def list_check_runs(self, owner: str, repo: str, sha: str) -> list[CheckRun]:
        """Return completed check runs for a commit."""
        payload = await self._rest(
            "GET",
            f"/repos/{owner}/{repo}/commits/{sha}/check-runs",
            params={"status": "completed", "per_page": 100},
        )
        return list(_convert(payload, CheckRunList, field="check_runs").check_runs)

    async def list_workflow_runs(
        self, owner: str, repo: str, sha: str
    ) -> list[WorkflowRun]:
        """Return workflow runs for a commit, or an empty list on failure."""
        try:
            payload = await self._rest(
                "GET",
                f"/repos/{owner}/{repo}/actions/runs",
                params={"head_sha": sha, "per_page": 100},
            )
            runs = _convert(payload, WorkflowRunList, field="workflow_runs")
        except GitHubError as exc:
            log_warning(
                logger,
                "Error fetching workflow runs for %s/%s@%s: %s",
                owner,
                repo,
                sha,
                exc,
            )
            return []
        return list(runs.workflow_runs)

    async def mark_ready_for_review(self, node_id: str) -> None:
        """Convert a draft pull request into one ready for review."""
        await self._graphql(_MARK_READY_MUTATION, {"pullRequestId": node_id})

    async def update_branch(self, owner: str, repo: str, number: int) -> None:
        """Merge the base branch into the head branch of a pull request."""
        await self._rest("PUT", f"/repos/{owner}/{repo}/pulls/{number}/update-branch")

    async def rerun_failed_jobs(self, owner: str, repo: str, run_id: int) -> bool:
        """Re-run the failed jobs of one workflow run; return whether it was accepted."""
        try:
            await self._rest(
                "POST", f"/repos/{owner}/{repo}/actions/runs/{run_id}/rerun-failed-jobs"
            )
        except GitHubError as exc:
            log_warning(
                logger,
                "Error re-running failed jobs for %s/%s run %d: %s",
                owner,
                repo,
                run_id,
                exc,
            )
            return False
        return True

    async def _graphql(
        self, query: str, variables: dict[str, typ.Any]
    ) -> dict[str, typ.Any]:
        """Execute a GraphQL document and return its validated ``data`` field."""
        response = await self._send(
            "POST",
            self._config.graphql_url,
            kind=ApiKind.GRAPHQL,
            json_body={"query": query, "variables": variables},
        )
        payload = self._decode(response)
        if not isinstance(payload, dict):
            raise GitHubResponseShapeError.missing("response")

        errors = payload.get("errors")
        if errors:
            if _has_rate_limited_error(errors):
                raise GitHubAPIError.rate_limited(status_code=None)
            raise GitHubAPIError.graphql_errors(errors)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise GitHubResponseShapeError.missing("data")
        return data

    async def _rest(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, typ.Any] | None = None,
    ) -> object:
        """Call a REST endpoint and return its decoded JSON body, if any."""
        response = await self._send(
            method,
            f"{self._config.rest_url}{path}",
            kind=ApiKind.REST,
            params=params,
            headers={"Accept": "application/vnd.github+json"},
        )
        if not response.content:
            return None
        return self._decode(response)

    async def _send(  # noqa: PLR0913
        self,
        method: str,
        url: str,
        *,
        kind: ApiKind,
        params: dict[str, typ.Any] | None = None,
        json_body: dict[str, typ.Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        request_headers = {"Authorization": f"Bearer {self._config.token}"}
        if headers:
            request_headers.update(headers)
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=request_headers,
            )
        except httpx.TimeoutException as exc:
            raise GitHubAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise GitHubAPIError.network_error(str(exc)) from exc

        self._record_rate_limit(response, kind)
        self._check_response_errors(response)
        return response

    def _record_rate_limit(self, response: httpx.Response, kind: ApiKind) -> None:
        if self._quota is None:
            return
        snapshot = rate_limit_from_headers(response.headers, kind)
        if snapshot is not None:
            self._quota.record(snapshot)

    def _check_response_errors(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < _HTTP_ERROR_STATUS_THRESHOLD:
            return
        if status == _HTTP_UNAUTHORIZED:
            raise GitHubAPIError.auth_invalid()
        if _is_rate_limited(response):
            snapshot = rate_limit_from_headers(response.headers, ApiKind.REST)
            raise GitHubAPIError.rate_limited(
                status_code=status,
                reset_at=snapshot.reset_at if snapshot is not None else None,
            )
        raise GitHubAPIError.http_error(status, response.reason_phrase)

    @staticmethod
    def _decode(response: httpx.Response) -> object:
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubResponseShapeError.invalid_json(response.text) from exc
