"""Time-boxed cache with delete-on-expired-read semantics."""

from __future__ import annotations

import datetime as dt
import typing as typ

import msgspec

from prtriage.common.time import SystemClock
from prtriage.logging import get_logger, log_debug, log_warning

if typ.TYPE_CHECKING:
    from prtriage.common.time import Clock

    from .backends import CacheBackend

logger = get_logger(__name__)


class CacheEntry(msgspec.Struct, kw_only=True, frozen=True):
    """Stored wrapper around a cached payload.

    Attributes
    ----------
    payload
        The cached value, in its JSON-compatible form.
    fetched_at
        When the payload was written.
    expires_at
        Instant from which the entry is considered expired.

    """

    payload: msgspec.Raw
    fetched_at: dt.datetime
    expires_at: dt.datetime

    def is_expired(self, now: dt.datetime) -> bool:
        """Return whether the entry has expired at ``now``."""
        return now >= self.expires_at


class TimeBoxedCache:
    """Typed cache whose entries expire after a fixed time-to-live.

    Reading an expired or unreadable entry deletes it from the backend before
    reporting a miss, so stale data never lingers in storage. The
    read/invalidate/write sequence is synchronous and unguarded; one process
    owns one cache.
    """

    def __init__(self, backend: CacheBackend, *, clock: Clock | None = None) -> None:
        """Wrap ``backend`` using ``clock`` for expiry decisions."""
        self._backend = backend
        self._clock = clock or SystemClock()
        self._decoder = msgspec.json.Decoder(CacheEntry)

    @property
    def backend(self) -> CacheBackend:
        """Return the underlying storage backend."""
        return self._backend

    def get[T](self, key: str, type_: type[T]) -> T | None:
        """Return the cached value for ``key`` decoded as ``type_``, or ``None``."""
        raw = self._backend.get(key)
        if raw is None:
            return None

        try:
            entry = self._decoder.decode(raw)
            if entry.is_expired(self._clock.now()):
                log_debug(logger, "Cache entry %s expired, deleting", key)
                self._backend.delete(key)
                return None
            return msgspec.json.decode(entry.payload, type=type_)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            log_warning(logger, "Discarding unreadable cache entry %s: %s", key, exc)
            self._backend.delete(key)
            return None

    def set(self, key: str, payload: object, *, ttl: dt.timedelta) -> CacheEntry:
        """Store ``payload`` under ``key`` for ``ttl`` and return the wrapper."""
        now = self._clock.now()
        entry = CacheEntry(
            payload=msgspec.Raw(msgspec.json.encode(payload)),
            fetched_at=now,
            expires_at=now + ttl,
        )
        self._backend.set(key, msgspec.json.encode(entry))
        return entry

    def delete(self, key: str) -> None:
        """Remove ``key`` from the cache."""
        self._backend.delete(key)

    def clear(self) -> None:
        """Remove every entry."""
        self._backend.clear()
