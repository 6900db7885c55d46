"""Participation reconciliation core.

Layered flow for one (email, event) pair:
1) ingest source records into signals
2) detect conflicts between active signals
3) resolve the canonical status
4) score confidence and evaluate flags
5) apply the assessment to the record and append an audit entry
"""

from __future__ import annotations

from .batch import PairDispatcher, reconcile_emails
from .conflicts import detect_conflicts
from .contracts import (
    Assessment,
    BatchResult,
    EventStats,
    ReconciliationSummary,
    Resolution,
    StatusView,
)
from .engine import ReconciliationService
from .errors import (
    ConcurrentUpdateError,
    OverrideValidationError,
    PermissionDeniedError,
    ReconciliationError,
    ReconciliationFailedError,
    RecordNotFoundError,
    SourceReadError,
    SourceTimeoutError,
)
from .ingest import SignalIngestor, build_signals
from .policy import DEFAULT_TRUST_SCORES, TrustPolicy
from .resolve import resolve_canonical_status
from .scoring import assess, evaluate_flags, score_confidence, status_breakdown

__all__ = [
    "DEFAULT_TRUST_SCORES",
    "Assessment",
    "BatchResult",
    "ConcurrentUpdateError",
    "EventStats",
    "OverrideValidationError",
    "PairDispatcher",
    "PermissionDeniedError",
    "ReconciliationError",
    "ReconciliationFailedError",
    "ReconciliationService",
    "ReconciliationSummary",
    "RecordNotFoundError",
    "Resolution",
    "SignalIngestor",
    "SourceReadError",
    "SourceTimeoutError",
    "StatusView",
    "TrustPolicy",
    "assess",
    "build_signals",
    "detect_conflicts",
    "evaluate_flags",
    "reconcile_emails",
    "resolve_canonical_status",
    "score_confidence",
    "status_breakdown",
]
