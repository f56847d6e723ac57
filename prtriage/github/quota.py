"""Rate budget tracking.

GitHub reports the remaining call budget in ``x-ratelimit-*`` headers on
every response. :class:`QuotaTracker` keeps only the latest snapshot for each
API kind and exposes a *low* flag so the front end can warn before calls
start failing with ``rate_limited``.
"""

from __future__ import annotations

import datetime as dt
import enum
import typing as typ

import msgspec

from prtriage.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)

LOW_REMAINING_THRESHOLD = 100


class ApiKind(enum.StrEnum):
    """GitHub API flavours that keep separate rate budgets."""

    GRAPHQL = "graphql"
    REST = "rest"


class RateLimitSnapshot(msgspec.Struct, kw_only=True, frozen=True):
    """Rate budget reported by GitHub after one call.

    Attributes
    ----------
    kind
        API flavour the budget applies to.
    remaining
        Calls left in the current window.
    limit
        Size of the window.
    reset_at
        When the window resets, if reported.

    """

    kind: ApiKind
    remaining: int
    limit: int
    reset_at: dt.datetime | None = None

    @property
    def is_low(self) -> bool:
        """Return whether the remaining budget is below the warning threshold."""
        return self.remaining < LOW_REMAINING_THRESHOLD


def _header_int(headers: cabc.Mapping[str, str], name: str) -> int | None:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def rate_limit_from_headers(
    headers: cabc.Mapping[str, str], kind: ApiKind
) -> RateLimitSnapshot | None:
    """Build a snapshot from response headers.

    Returns ``None`` when the remaining or limit header is missing or not an
    integer; a missing reset header only leaves ``reset_at`` unset.
    """
    remaining = _header_int(headers, "x-ratelimit-remaining")
    limit = _header_int(headers, "x-ratelimit-limit")
    if remaining is None or limit is None:
        return None

    reset_epoch = _header_int(headers, "x-ratelimit-reset")
    reset_at = (
        dt.datetime.fromtimestamp(reset_epoch, dt.UTC)
        if reset_epoch is not None
        else None
    )
    return RateLimitSnapshot(
        kind=kind, remaining=remaining, limit=limit, reset_at=reset_at
    )


class QuotaTracker:
    """Hold the most recent rate budget reported for each API kind."""

    def __init__(self) -> None:
        """Start with no telemetry."""
        self._snapshots: dict[ApiKind, RateLimitSnapshot] = {}
        self._latest: RateLimitSnapshot | None = None

    def record(self, snapshot: RateLimitSnapshot) -> None:
        """Overwrite the stored snapshot for ``snapshot.kind``."""
        self._snapshots[snapshot.kind] = snapshot
        self._latest = snapshot
        if snapshot.is_low:
            # Imported lazily: observability depends on the github package.
            from prtriage.observability import TriageEventType

            log_warning(
                logger,
                "[%s] api_kind=%s remaining=%d limit=%d",
                TriageEventType.QUOTA_LOW,
                snapshot.kind,
                snapshot.remaining,
                snapshot.limit,
            )

    @property
    def latest(self) -> RateLimitSnapshot | None:
        """Return the snapshot from the most recent call of any kind."""
        return self._latest

    def snapshot(self, kind: ApiKind) -> RateLimitSnapshot | None:
        """Return the latest snapshot for one API kind."""
        return self._snapshots.get(kind)

    @property
    def is_low(self) -> bool:
        """Return whether the most recent snapshot is below the threshold."""
        return self._latest is not None and self._latest.is_low

    def describe(self) -> str | None:
        """Render the latest snapshot as ``API: remaining/limit (resets ...)``."""
        snapshot = self._latest
        if snapshot is None:
            return None
        text = f"API: {snapshot.remaining}/{snapshot.limit}"
        if snapshot.reset_at is not None:
            reset_local = snapshot.reset_at.astimezone()
            text = f"{text} (resets {reset_local:%H:%M:%S})"
        return text
