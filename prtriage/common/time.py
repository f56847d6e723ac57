"""Clock helpers.

Time-dependent behaviour (cache expiry, staleness) takes a :class:`Clock` so
tests can substitute a fixed or advancing clock for the system one.
"""

from __future__ import annotations

import datetime as dt
import typing as typ


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def local_date(moment: dt.datetime) -> dt.date:
    """Return the calendar date of ``moment`` in the local time zone.

    Naive datetimes are assumed to already be local wall-clock time.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


class Clock(typ.Protocol):
    """Source of the current time."""

    def now(self) -> dt.datetime:
        """Return the current aware UTC time."""
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> dt.datetime:
        """Return the current aware UTC time."""
        return utcnow()
