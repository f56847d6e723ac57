"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from prtriage.workspace import SessionContext
from tests.helpers.builders import FixedClock, make_session
from tests.helpers.fake_github import FakeGitHubClient


@pytest.fixture
def clock() -> FixedClock:
    """Return a clock pinned to the shared base time."""
    return FixedClock()


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    """Return an empty fake GitHub client."""
    return FakeGitHubClient()


@pytest.fixture
def session(fake_client: FakeGitHubClient, clock: FixedClock) -> SessionContext:
    """Return a session wired to the fake client and fixed clock."""
    return make_session(fake_client, clock)
