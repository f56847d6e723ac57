"""Pull-request triage: classification, CI enrichment, ordering and actions.

Public API
----------
PullRequest
    Read-only view over a fetched record with derived predicates.
TriageLabel
    Actionable states reported for a pull request.
TriageEngine
    Runs the fetch, sort and CI enrichment cycle for one organization.
TriageResult, TriagedPullRequest
    Ordered refresh output and its items.
TriageSink
    Protocol for displays that receive incremental refresh output.
CIStatus, CIReport, FailedCheck
    CI verdict for one pull request.
MarkReady, SyncBranch, RerunFailedJobs
    Recommended remediation actions.

Examples
--------
>>> engine = TriageEngine(session)
>>> result = await engine.refresh("acme")
>>> [item.pull_request.number for item in result.items]
[12, 7, 3]

"""

from __future__ import annotations

from .ci import (
    NO_CI,
    CIReport,
    CIStatus,
    FailedCheck,
    display_check_name,
    enrich_ci,
    status_from_rollup,
)
from .engine import TriagedPullRequest, TriageEngine, TriageResult, TriageSink
from .ordering import sort_pull_requests, triage_sort_key
from .pull_request import PullRequest, TriageLabel
from .recommendations import (
    MarkReady,
    RecommendedAction,
    RerunFailedJobs,
    SyncBranch,
    recommend_actions,
)

__all__ = [
    "NO_CI",
    "CIReport",
    "CIStatus",
    "FailedCheck",
    "MarkReady",
    "PullRequest",
    "RecommendedAction",
    "RerunFailedJobs",
    "SyncBranch",
    "TriageEngine",
    "TriageLabel",
    "TriageResult",
    "TriageSink",
    "TriagedPullRequest",
    "display_check_name",
    "enrich_ci",
    "recommend_actions",
    "sort_pull_requests",
    "status_from_rollup",
    "triage_sort_key",
]
