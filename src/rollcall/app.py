"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from rollcall.adapters.http import HttpSignalSources
from rollcall.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from rollcall.config import get_reconciliation_config
from rollcall.domain.ports.sources import SignalSources
from rollcall.domain.ports.unit_of_work import ReconciliationUnitOfWork
from rollcall.domain.reconciliation import ReconciliationService
from rollcall.worker import Dispatcher

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rollcall.config import ReconciliationConfig
    from rollcall.domain.model import Actor, AuditEntry, CanonicalStatus, ParticipationRecord
    from rollcall.domain.ports.persistence import RecordFilters
    from rollcall.domain.reconciliation import (
        BatchResult,
        EventStats,
        ReconciliationSummary,
        StatusView,
        TrustPolicy,
    )

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]


log = getLogger(__name__)


def build_http_sources() -> SignalSources:
    http = HttpSignalSources()
    return SignalSources(registrations=http, attendance=http, certificates=http)


def build_service(
    *,
    sources: SignalSources | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    policy: TrustPolicy | None = None,
    config: ReconciliationConfig | None = None,
) -> ReconciliationService:
    """Wire the reconciliation service to the configured adapters."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyReconciliationUnitOfWork
    effective_config = config or get_reconciliation_config()
    return ReconciliationService(
        unit_of_work_factory=unit_of_work_factory,
        sources=sources or build_http_sources(),
        policy=policy or effective_config.trust_policy(),
    )


def build_dispatcher(
    service: ReconciliationService,
    *,
    config: ReconciliationConfig | None = None,
) -> Dispatcher:
    effective_config = config or get_reconciliation_config()
    return Dispatcher(
        service.reconcile,
        workers=effective_config.workers,
        max_pending=effective_config.max_pending,
    )


def reconcile_participation(
    email: str,
    event_id: str,
    *,
    service: ReconciliationService | None = None,
) -> ReconciliationSummary:
    return (service or build_service()).reconcile(email, event_id)


def reconcile_event(
    event_id: str,
    *,
    service: ReconciliationService | None = None,
    parallel: bool = False,
    config: ReconciliationConfig | None = None,
) -> BatchResult:
    """Reconcile every registrant of ``event_id``, optionally over the worker pool."""

    effective_service = service or build_service(config=config)
    log.info("Starting event reconciliation: event=%s, parallel=%s", event_id, parallel)
    if not parallel:
        return effective_service.reconcile_event(event_id)

    with build_dispatcher(effective_service, config=config) as dispatcher:
        result = effective_service.reconcile_event(event_id, dispatcher=dispatcher)
        stats = dispatcher.stats()
    log.info(
        f"Dispatcher finished: submitted={stats.submitted}, coalesced={stats.coalesced}, "
        f"completed={stats.completed}, failed={stats.failed}"
    )
    return result


def get_status(
    email: str,
    event_id: str,
    *,
    service: ReconciliationService | None = None,
) -> StatusView:
    return (service or build_service()).get_status(email, event_id)


def override_status(
    email: str,
    event_id: str,
    new_status: CanonicalStatus | str,
    *,
    actor: Actor,
    reason: str,
    service: ReconciliationService | None = None,
) -> ParticipationRecord:
    return (service or build_service()).override(email, event_id, new_status, actor, reason)


def list_records(
    event_id: str,
    filters: RecordFilters | None = None,
    *,
    service: ReconciliationService | None = None,
) -> list[ParticipationRecord]:
    return (service or build_service()).list_records(event_id, filters)


def event_stats(
    event_id: str,
    *,
    service: ReconciliationService | None = None,
) -> EventStats:
    return (service or build_service()).get_event_stats(event_id)


def review_queue(
    event_id: str | None = None,
    *,
    service: ReconciliationService | None = None,
) -> list[ParticipationRecord]:
    return (service or build_service()).needs_review(event_id)


def history(
    email: str,
    event_id: str,
    *,
    service: ReconciliationService | None = None,
) -> Sequence[AuditEntry]:
    return (service or build_service()).get_history(email, event_id)
