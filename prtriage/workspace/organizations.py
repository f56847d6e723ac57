"""Cached directory of the organizations the viewer belongs to."""

from __future__ import annotations

import typing as typ

from prtriage.cache import ORGANIZATIONS_CACHE_KEY, ORGANIZATIONS_TTL
from prtriage.github.models import OrganizationRecord
from prtriage.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    from .session import SessionContext

logger = get_logger(__name__)


class OrganizationDirectory:
    """List organizations, serving repeat lookups from a 24-hour cache."""

    def __init__(self, session: SessionContext) -> None:
        """Bind the directory to ``session``'s client and cache."""
        self._session = session

    async def list_organizations(self) -> tuple[OrganizationRecord, ...]:
        """Return the viewer's organizations, from cache when still fresh."""
        cache = self._session.cache
        cached = cache.get(ORGANIZATIONS_CACHE_KEY, tuple[OrganizationRecord, ...])
        if cached is not None:
            log_debug(logger, "Serving %d organizations from cache", len(cached))
            return cached

        organizations = tuple(await self._session.client.list_organizations())
        cache.set(ORGANIZATIONS_CACHE_KEY, organizations, ttl=ORGANIZATIONS_TTL)
        return organizations

    def invalidate(self) -> None:
        """Drop the cached organization list."""
        self._session.cache.delete(ORGANIZATIONS_CACHE_KEY)

    async def contains(self, login: str) -> bool:
        """Return whether ``login`` names one of the viewer's organizations.

        The comparison ignores case, as GitHub logins do.
        """
        wanted = login.casefold()
        return any(
            org.login.casefold() == wanted for org in await self.list_organizations()
        )
