"""Public domain model surface."""

from __future__ import annotations

from rollcall.domain.model.actor import Actor
from rollcall.domain.model.base import Entity, new_id, utcnow
from rollcall.domain.model.enums import (
    ActorRole,
    CanonicalStatus,
    ConflictType,
    ResolutionStrategy,
    SignalSource,
    SignalType,
    SourceModel,
)
from rollcall.domain.model.record import (
    AuditEntry,
    Flags,
    ManualOverride,
    ParticipationRecord,
    ReconciliationInfo,
    StatusBreakdown,
    normalize_email,
)
from rollcall.domain.model.signals import Conflict, Signal, SourceRef, active_signals

__all__ = [
    "Actor",
    "ActorRole",
    "AuditEntry",
    "CanonicalStatus",
    "Conflict",
    "ConflictType",
    "Entity",
    "Flags",
    "ManualOverride",
    "ParticipationRecord",
    "ReconciliationInfo",
    "ResolutionStrategy",
    "Signal",
    "SignalSource",
    "SignalType",
    "SourceModel",
    "SourceRef",
    "StatusBreakdown",
    "active_signals",
    "new_id",
    "normalize_email",
    "utcnow",
]
