"""Configuration for the on-disk cache."""

from __future__ import annotations

import dataclasses
import datetime as dt
import os
from pathlib import Path

ORGANIZATIONS_CACHE_KEY = "github_orgs_cache"
ORGANIZATIONS_TTL = dt.timedelta(hours=24)


def _default_cache_dir() -> Path:
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg_cache) if xdg_cache else Path.home() / ".cache"
    return base / "prtriage"


@dataclasses.dataclass(frozen=True, slots=True)
class CacheConfig:
    """Where cached entries are stored."""

    directory: Path = dataclasses.field(default_factory=_default_cache_dir)

    @classmethod
    def from_env(cls) -> CacheConfig:
        """Build configuration from ``PRTRIAGE_CACHE_DIR`` when it is set."""
        raw_dir = os.environ.get("PRTRIAGE_CACHE_DIR", "").strip()
        if not raw_dir:
            return cls()
        return cls(directory=Path(raw_dir).expanduser())
