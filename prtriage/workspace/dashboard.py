"""Dashboard state that follows the organization selection."""

from __future__ import annotations

import typing as typ

from prtriage.github.errors import GitHubError
from prtriage.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from prtriage.triage import TriagedPullRequest, TriageEngine, TriageResult

    from .selection import OrganizationChanged, WorkspaceSelection
    from .session import SessionContext

logger = get_logger(__name__)


class Dashboard:
    """Displayed triage result for the selected organization.

    The dashboard is the engine's sink: the sorted CI-unaware result replaces
    whatever was shown, then enriched items are patched in one by one. Items
    belonging to a refresh other than the one on display are ignored.
    """

    def __init__(
        self,
        session: SessionContext,
        selection: WorkspaceSelection,
        engine: TriageEngine,
    ) -> None:
        """Subscribe to ``selection`` so changes trigger a refresh."""
        self._session = session
        self._selection = selection
        self._engine = engine
        self._result: TriageResult | None = None
        self._error: GitHubError | None = None
        self._unsubscribe: cabc.Callable[[], None] | None = selection.subscribe(
            self._on_organization_changed
        )

    @property
    def result(self) -> TriageResult | None:
        """Return the result currently on display."""
        return self._result

    @property
    def error(self) -> GitHubError | None:
        """Return the error that aborted the last refresh, if any."""
        return self._error

    @property
    def quota_summary(self) -> str | None:
        """Return the rate budget line shown alongside the result."""
        return self._session.quota.describe()

    def on_result(self, result: TriageResult) -> None:
        """Replace the displayed result."""
        self._result = result

    def on_item_updated(self, refresh_id: int, item: TriagedPullRequest) -> None:
        """Patch ``item`` into the displayed result of refresh ``refresh_id``."""
        current = self._result
        if current is None or current.refresh_id != refresh_id:
            log_debug(logger, "Dropping item %s from refresh %d", item.key, refresh_id)
            return
        self._result = current.replace_item(item)

    async def refresh(self) -> TriageResult | None:
        """Re-run triage for the selected organization.

        A bulk failure is kept in :attr:`error` and the previous result stays
        on display.
        """
        organization = self._selection.current
        if organization is None:
            return None
        try:
            result = await self._engine.refresh(organization, sink=self)
        except GitHubError as exc:
            self._error = exc
            return None
        self._error = None
        return result

    def close(self) -> None:
        """Stop following the selection."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _on_organization_changed(self, event: OrganizationChanged) -> None:
        log_debug(
            logger,
            "Organization changed from %s to %s",
            event.previous,
            event.current,
        )
        self._result = None
        await self.refresh()
