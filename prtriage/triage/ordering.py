"""Priority ordering for a batch of pull requests."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .pull_request import PullRequest


def triage_sort_key(pull_request: PullRequest) -> tuple[bool, bool, dt.datetime]:
    """Return the sort key that puts actionable pull requests first.

    The tiers, in order: ready-to-merge before everything else,
    blocked-by-other after everything else, then least recently updated
    first so neglected work surfaces.
    """
    return (
        not pull_request.is_ready_to_be_merged(),
        pull_request.is_blocked_by_other(),
        pull_request.updated_at,
    )


def sort_pull_requests(pull_requests: cabc.Iterable[PullRequest]) -> list[PullRequest]:
    """Return ``pull_requests`` in triage order; ties keep their input order."""
    return sorted(pull_requests, key=triage_sort_key)
