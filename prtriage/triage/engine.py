"""Refresh cycle that turns an organization name into a triaged result.

A refresh runs in two phases. The bulk search is awaited first and produces
a CI-unaware, fully sorted :class:`TriageResult` that is handed to the sink
straight away. CI enrichment then fans out as one task per pull request;
each task reports its item to the sink the moment it finishes, without
waiting for its siblings. The coroutine returns the fully enriched result
once every task is done.

Refreshes are not cancellable. When two overlap, whichever finishes last
overwrites what the sink shows.
"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from prtriage.github.errors import GitHubError, NoPullRequestsFoundError
from prtriage.observability import TriageEventLogger

from .ci import CIReport, enrich_ci
from .ordering import sort_pull_requests
from .pull_request import PullRequest, TriageLabel
from .recommendations import recommend_actions

if typ.TYPE_CHECKING:
    import datetime as dt

    from prtriage.workspace.session import SessionContext

    from .recommendations import RecommendedAction


def _recommend(
    pull_request: PullRequest,
    ci: CIReport | None,
    events: TriageEventLogger | None,
) -> tuple[RecommendedAction, ...]:
    """Return the actions for one item, or none when they cannot be derived."""
    try:
        return recommend_actions(pull_request, ci)
    except ValueError as exc:
        if events is not None:
            events.log_actions_degraded(pull_request_url=pull_request.url, error=exc)
        return ()


@dataclasses.dataclass(frozen=True, slots=True)
class TriagedPullRequest:
    """One pull request with its labels, CI report and recommended actions.

    ``ci`` is ``None`` until enrichment for this item has finished.
    """

    pull_request: PullRequest
    labels: frozenset[TriageLabel]
    actions: tuple[RecommendedAction, ...]
    ci: CIReport | None = None

    @property
    def key(self) -> str:
        """Return the identifier used to patch this item in place."""
        return self.pull_request.url

    @classmethod
    def initial(
        cls,
        pull_request: PullRequest,
        now: dt.datetime,
        *,
        events: TriageEventLogger | None = None,
    ) -> TriagedPullRequest:
        """Build the CI-unaware item shown before enrichment completes."""
        return cls(
            pull_request=pull_request,
            labels=pull_request.classify(now),
            actions=_recommend(pull_request, None, events),
        )

    def with_ci(
        self, ci: CIReport, *, events: TriageEventLogger | None = None
    ) -> TriagedPullRequest:
        """Return a copy carrying ``ci`` and the actions it unlocks."""
        labels = self.labels
        if ci.status.is_failing:
            labels = labels | {TriageLabel.CI_FAILED}
        return dataclasses.replace(
            self,
            ci=ci,
            labels=labels,
            actions=_recommend(self.pull_request, ci, events),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class TriageResult:
    """Ordered, classified pull requests for one refresh of one organization."""

    refresh_id: int
    organization: str
    fetched_at: dt.datetime
    items: tuple[TriagedPullRequest, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Return whether the search matched no pull requests."""
        return not self.items

    def replace_item(self, item: TriagedPullRequest) -> TriageResult:
        """Return a copy with the item sharing ``item.key`` swapped for ``item``."""
        return dataclasses.replace(
            self,
            items=tuple(item if old.key == item.key else old for old in self.items),
        )


class TriageSink(typ.Protocol):
    """Receiver of refresh output, typically a display."""

    def on_result(self, result: TriageResult) -> None:
        """Replace whatever is shown with ``result``."""
        ...

    def on_item_updated(self, refresh_id: int, item: TriagedPullRequest) -> None:
        """Patch one enriched item into the result of ``refresh_id``."""
        ...


class TriageEngine:
    """Fetch, classify, order and CI-enrich the pull requests assigned to me."""

    def __init__(
        self,
        session: SessionContext,
        *,
        events: TriageEventLogger | None = None,
    ) -> None:
        """Bind the engine to an authenticated session."""
        self._session = session
        self._events = events or TriageEventLogger()
        self._last_refresh_id = 0

    async def refresh(
        self, organization: str, sink: TriageSink | None = None
    ) -> TriageResult:
        """Run one full refresh cycle for ``organization``.

        Raises
        ------
        GitHubError
            When the bulk search fails; nothing is delivered to the sink.

        """
        self._last_refresh_id += 1
        refresh_id = self._last_refresh_id
        clock = self._session.clock
        started_at = clock.now()
        self._events.log_refresh_started(
            refresh_id=refresh_id, organization=organization
        )

        try:
            records = await self._session.client.search_assigned_pull_requests(
                organization
            )
        except NoPullRequestsFoundError:
            result = TriageResult(
                refresh_id=refresh_id,
                organization=organization,
                fetched_at=clock.now(),
            )
            self._events.log_refresh_empty(
                refresh_id=refresh_id, organization=organization
            )
            if sink is not None:
                sink.on_result(result)
            return result
        except GitHubError as exc:
            self._events.log_refresh_failed(
                refresh_id=refresh_id,
                organization=organization,
                error=exc,
                duration=clock.now() - started_at,
            )
            raise

        fetched_at = clock.now()
        ordered = sort_pull_requests(PullRequest(record) for record in records)
        result = TriageResult(
            refresh_id=refresh_id,
            organization=organization,
            fetched_at=fetched_at,
            items=tuple(
                TriagedPullRequest.initial(pr, fetched_at, events=self._events)
                for pr in ordered
            ),
        )
        if sink is not None:
            sink.on_result(result)

        enriched = await asyncio.gather(
            *(self._enrich(refresh_id, item, sink) for item in result.items)
        )
        result = dataclasses.replace(result, items=tuple(enriched))

        self._events.log_refresh_completed(
            refresh_id=refresh_id,
            organization=organization,
            pull_requests=len(result.items),
            ci_failing=sum(
                1 for item in result.items if TriageLabel.CI_FAILED in item.labels
            ),
            duration=clock.now() - started_at,
        )
        return result

    async def _enrich(
        self,
        refresh_id: int,
        item: TriagedPullRequest,
        sink: TriageSink | None,
    ) -> TriagedPullRequest:
        report = await enrich_ci(
            item.pull_request, self._session.client, events=self._events
        )
        updated = item.with_ci(report, events=self._events)
        if sink is not None:
            sink.on_item_updated(refresh_id, updated)
        return updated
