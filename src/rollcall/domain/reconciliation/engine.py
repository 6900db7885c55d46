"""Reconciliation service: the single mutation path for participation records.

Each ``reconcile`` call reads every source, assesses the signal set and writes the
record plus its audit entry inside one unit of work. Anything that goes wrong
rolls the transaction back and surfaces as ``ReconciliationFailedError``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rollcall.domain.model import ParticipationRecord, normalize_email, utcnow

from .apply import apply_assessment, apply_override
from .batch import reconcile_emails
from .contracts import ReconciliationSummary, StatusView
from .errors import ReconciliationFailedError, RecordNotFoundError
from .ingest import SignalIngestor
from .override import authorize_override, parse_override
from .policy import TrustPolicy
from .queries import event_stats
from .scoring import assess

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rollcall.domain.model import Actor, AuditEntry, CanonicalStatus
    from rollcall.domain.ports.persistence import RecordFilters
    from rollcall.domain.ports.sources import SignalSources
    from rollcall.domain.ports.unit_of_work import ReconciliationUnitOfWork

    from .batch import PairDispatcher
    from .contracts import BatchResult, EventStats

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


@dataclass(slots=True)
class ReconciliationService:
    unit_of_work_factory: UnitOfWorkFactory
    sources: SignalSources
    policy: TrustPolicy = field(default_factory=TrustPolicy)
    clock: Callable[[], datetime] = field(default=utcnow)
    _ingest: SignalIngestor = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._ingest = SignalIngestor(self.sources, self.policy, self.clock)

    def reconcile(self, email: str, event_id: str) -> ReconciliationSummary:
        """Recompute and persist the canonical state of one (email, event) pair."""

        email = normalize_email(email)
        try:
            summary = self._reconcile(email, event_id)
        except Exception as exc:
            raise ReconciliationFailedError(email, event_id, str(exc)) from exc

        log.info(
            "Reconciled %s @ %s: status=%s confidence=%s version=%s",
            email,
            event_id,
            summary.canonical_status,
            summary.confidence_score,
            summary.reconciliation_version,
        )
        return summary

    def _reconcile(self, email: str, event_id: str) -> ReconciliationSummary:
        signals = self._ingest(email, event_id)

        with self.unit_of_work_factory() as uow:
            records = uow.repositories.records
            record = records.get(email, event_id)
            now = self.clock()
            if record is None:
                record = ParticipationRecord(email=email, event_id=event_id, created_at=now)
                records.add(record)

            assessment = assess(signals, policy=self.policy, now=now)
            entry = apply_assessment(record, assessment, policy=self.policy, now=now)
            uow.repositories.audit.add(entry)
            uow.commit()

        return ReconciliationSummary.from_record(record)

    def reconcile_event(
        self,
        event_id: str,
        *,
        dispatcher: PairDispatcher | None = None,
    ) -> BatchResult:
        emails = self.sources.registrations.list_registrants(event_id)
        return reconcile_emails(
            event_id,
            emails,
            reconcile=self.reconcile,
            dispatcher=dispatcher,
        )

    def override(
        self,
        email: str,
        event_id: str,
        new_status: CanonicalStatus | str,
        actor: Actor,
        reason: str,
    ) -> ParticipationRecord:
        """Force the canonical status of an existing record."""

        authorize_override(actor, policy=self.policy)
        status, reason = parse_override(new_status, reason)
        email = normalize_email(email)

        with self.unit_of_work_factory() as uow:
            record = uow.repositories.records.get(email, event_id)
            if record is None:
                raise RecordNotFoundError(email, event_id)
            entry = apply_override(record, status, actor=actor, reason=reason, now=self.clock())
            uow.repositories.audit.add(entry)
            uow.commit()

        log.info(
            "Override %s @ %s by %s: %s -> %s",
            email,
            event_id,
            actor.actor_id,
            record.manual_override.previous_status,
            record.canonical_status,
        )
        return record

    def get_record(self, email: str, event_id: str) -> ParticipationRecord:
        email = normalize_email(email)
        with self.unit_of_work_factory() as uow:
            record = uow.repositories.records.get(email, event_id)
        if record is None:
            raise RecordNotFoundError(email, event_id)
        return record

    def get_status(self, email: str, event_id: str) -> StatusView:
        return StatusView.from_record(self.get_record(email, event_id))

    def list_records(
        self,
        event_id: str,
        filters: RecordFilters | None = None,
    ) -> list[ParticipationRecord]:
        with self.unit_of_work_factory() as uow:
            return list(uow.repositories.records.list_for_event(event_id, filters))

    def needs_review(self, event_id: str | None = None) -> list[ParticipationRecord]:
        with self.unit_of_work_factory() as uow:
            return list(
                uow.repositories.records.needing_review(
                    event_id,
                    confidence_below=self.policy.review_threshold,
                )
            )

    def get_event_stats(self, event_id: str) -> EventStats:
        with self.unit_of_work_factory() as uow:
            return event_stats(uow.repositories.records, event_id)

    def get_history(self, email: str, event_id: str) -> Sequence[AuditEntry]:
        with self.unit_of_work_factory() as uow:
            return list(uow.repositories.audit.history(normalize_email(email), event_id))
