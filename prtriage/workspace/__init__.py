"""Session wiring, organization selection and the dashboard state.

Public API
----------
SessionContext
    Client, quota tracker, cache and clock for one session.
OrganizationDirectory
    Viewer organizations with a 24-hour cache.
WorkspaceSelection, OrganizationChanged
    Selected organization and its change notification.
Dashboard
    Displayed triage result that refreshes on selection changes.
"""

from __future__ import annotations

from .dashboard import Dashboard
from .organizations import OrganizationDirectory
from .selection import OrganizationChanged, SelectionListener, WorkspaceSelection
from .session import SessionContext

__all__ = [
    "Dashboard",
    "OrganizationChanged",
    "OrganizationDirectory",
    "SelectionListener",
    "SessionContext",
    "WorkspaceSelection",
]
