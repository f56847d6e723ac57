"""Key/value storage backends for the time-boxed cache.

Backends store opaque bytes; expiry and encoding belong to
:class:`~prtriage.cache.store.TimeBoxedCache`.
"""

from __future__ import annotations

import hashlib
import os
import typing as typ
from pathlib import Path

from prtriage.logging import get_logger, log_warning

logger = get_logger(__name__)

_CACHE_SUFFIX = ".json"


@typ.runtime_checkable
class CacheBackend(typ.Protocol):
    """Minimal storage interface: get, set, delete and clear."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value for ``key`` or ``None``."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""
        ...

    def clear(self) -> None:
        """Remove every stored key."""
        ...


class MemoryCacheBackend:
    """Process-local backend, used by tests and short-lived sessions."""

    def __init__(self) -> None:
        """Start with an empty store."""
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        """Return the stored value for ``key`` or ``None``."""
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``."""
        self._data[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._data.pop(key, None)

    def clear(self) -> None:
        """Remove every key."""
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        """Return whether ``key`` is currently stored."""
        return key in self._data


class FileCacheBackend:
    """Backend storing one file per key under a directory.

    File names are derived from a hash of the key so arbitrary keys are safe
    on every filesystem. Writes go through a temporary file and an atomic
    rename so a crash never leaves a half-written entry behind.
    """

    def __init__(self, directory: Path) -> None:
        """Use ``directory`` for cache files, creating it lazily on write."""
        self._directory = directory

    @property
    def directory(self) -> Path:
        """Return the directory holding cache files."""
        return self._directory

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
        return self._directory / f"{digest}{_CACHE_SUFFIX}"

    def get(self, key: str) -> bytes | None:
        """Return the stored value for ``key`` or ``None``."""
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            log_warning(logger, "Unable to read cache file %s: %s", path, exc)
            return None

    def set(self, key: str, value: bytes) -> None:
        """Atomically write ``value`` for ``key``."""
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        tmp_path.write_bytes(value)
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        """Remove the file for ``key`` if it exists."""
        self._path_for(key).unlink(missing_ok=True)

    def clear(self) -> None:
        """Remove every cache file in the directory."""
        if not self._directory.is_dir():
            return
        for path in self._directory.glob(f"*{_CACHE_SUFFIX}"):
            path.unlink(missing_ok=True)
