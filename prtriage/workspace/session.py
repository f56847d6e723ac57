"""Explicit session context shared by the engine, directory and actions."""

from __future__ import annotations

import dataclasses

from prtriage.cache import CacheConfig, FileCacheBackend, TimeBoxedCache
from prtriage.common.time import Clock, SystemClock
from prtriage.github import GitHubClient, GitHubClientConfig, QuotaTracker


@dataclasses.dataclass(frozen=True, slots=True)
class SessionContext:
    """Collaborators for one authenticated session.

    Attributes
    ----------
    client
        GitHub client bound to the session's token.
    quota
        Tracker receiving rate budget telemetry from ``client``.
    cache
        Time-boxed cache for slow-changing lookups.
    clock
        Time source for staleness and cache expiry.

    """

    client: GitHubClient
    quota: QuotaTracker
    cache: TimeBoxedCache
    clock: Clock = dataclasses.field(default_factory=SystemClock)

    @classmethod
    def from_config(
        cls,
        github_config: GitHubClientConfig,
        cache_config: CacheConfig,
        *,
        clock: Clock | None = None,
    ) -> SessionContext:
        """Build a session with an on-disk cache and a fresh quota tracker."""
        resolved_clock = clock or SystemClock()
        quota = QuotaTracker()
        return cls(
            client=GitHubClient(github_config, quota=quota),
            quota=quota,
            cache=TimeBoxedCache(
                FileCacheBackend(cache_config.directory), clock=resolved_clock
            ),
            clock=resolved_clock,
        )

    async def aclose(self) -> None:
        """Release the client's HTTP resources."""
        await self.client.aclose()
