"""Apply an assessment or an override to a participation record.

Both paths bump the reconciliation version and return the audit entry that has to
be persisted in the same transaction as the record.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from rollcall.domain.model import (
    AuditEntry,
    ManualOverride,
    ReconciliationInfo,
    ResolutionStrategy,
    SourceModel,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rollcall.domain.model import Actor, CanonicalStatus, ParticipationRecord, Signal

    from .contracts import Assessment
    from .policy import TrustPolicy


def subject_from_signals(signals: Sequence[Signal]) -> str | None:
    for signal in signals:
        if signal.source_ref.model is SourceModel.PARTICIPANT and signal.source_ref.id:
            return signal.source_ref.id
    return None


def apply_assessment(
    record: ParticipationRecord,
    assessment: Assessment,
    *,
    policy: TrustPolicy,
    now: datetime,
) -> AuditEntry:
    previous_status = record.canonical_status if record.version else None
    status = assessment.canonical_status
    strategy = ResolutionStrategy.TRUST_SCORE
    flags = assessment.flags
    notes = ""

    if record.is_overridden and policy.respect_manual_override:
        # keep the human decision; refresh the evidence around it
        status = record.canonical_status
        strategy = ResolutionStrategy.MANUAL_OVERRIDE
        flags = replace(flags, requires_manual_review=False)
        if assessment.canonical_status is not status:
            notes = (
                f"Automatic status {assessment.canonical_status} withheld: "
                f"manually overridden to {status}"
            )

    version = record.version + 1
    record.signals = list(assessment.signals)
    record.subject_id = subject_from_signals(assessment.signals) or record.subject_id
    record.canonical_status = status
    record.reconciliation = ReconciliationInfo(
        last_reconciled_at=now,
        reconciliation_version=version,
        confidence_score=assessment.confidence_score,
        conflicts=assessment.conflicts,
        resolution_strategy=strategy,
        notes=notes,
    )
    record.flags = flags
    record.status_breakdown = assessment.status_breakdown
    record.updated_at = now

    return AuditEntry(
        email=record.email,
        event_id=record.event_id,
        version=version,
        strategy=strategy,
        status=status,
        previous_status=previous_status,
        confidence_score=assessment.confidence_score,
        reason=notes,
        signals=list(assessment.signals),
        recorded_at=now,
    )


def apply_override(
    record: ParticipationRecord,
    new_status: CanonicalStatus,
    *,
    actor: Actor,
    reason: str,
    now: datetime,
) -> AuditEntry:
    previous_status = record.canonical_status
    version = record.version + 1

    record.canonical_status = new_status
    record.manual_override = ManualOverride(
        is_overridden=True,
        overridden_by=actor.actor_id,
        overridden_at=now,
        override_reason=reason,
        previous_status=previous_status,
    )
    record.flags = replace(record.flags, requires_manual_review=False)
    record.reconciliation = replace(
        record.reconciliation,
        last_reconciled_at=now,
        reconciliation_version=version,
        resolution_strategy=ResolutionStrategy.MANUAL_OVERRIDE,
        notes=f"Status manually overridden from {previous_status} to {new_status}",
    )
    record.updated_at = now

    return AuditEntry(
        email=record.email,
        event_id=record.event_id,
        version=version,
        strategy=ResolutionStrategy.MANUAL_OVERRIDE,
        status=new_status,
        previous_status=previous_status,
        confidence_score=record.confidence_score,
        actor=actor.actor_id,
        reason=reason,
        signals=list(record.signals),
        recorded_at=now,
    )
