"""Triage dashboard for GitHub pull requests assigned to the current user.

The package fetches open pull requests for one organization, classifies each
one (ready to merge, blocked on a reviewer, blocked on you, stale, CI
failed), orders them so actionable items come first, and offers remediation
commands such as marking a draft ready or re-running failed CI jobs.
"""

from __future__ import annotations

__version__ = "0.1.0"
