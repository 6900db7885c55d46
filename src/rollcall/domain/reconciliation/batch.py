"""Event-wide reconciliation with per-subject failure isolation."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from rollcall.domain.model import normalize_email

from .contracts import BatchResult

if TYPE_CHECKING:
    from collections.abc import Iterable
    from concurrent.futures import Future

    from .contracts import ReconciliationSummary

log = getLogger(__name__)

type ReconcilePair = Callable[[str, str], ReconciliationSummary]


class PairDispatcher(Protocol):
    def submit(
        self,
        email: str,
        event_id: str,
        *,
        block: bool = False,
    ) -> Future[ReconciliationSummary]: ...


def reconcile_emails(
    event_id: str,
    emails: Iterable[str],
    *,
    reconcile: ReconcilePair,
    dispatcher: PairDispatcher | None = None,
) -> BatchResult:
    """Reconcile every email for ``event_id``; failures are counted, not raised."""

    result = BatchResult(event_id=event_id)
    unique = list(dict.fromkeys(normalize_email(email) for email in emails))
    result.total = len(unique)

    if dispatcher is None:
        for email in unique:
            _record(result, email, partial(reconcile, email, event_id))
    else:
        futures: list[tuple[str, Future[ReconciliationSummary]]] = []
        for email in unique:
            try:
                futures.append((email, dispatcher.submit(email, event_id, block=True)))
            except Exception:
                _fail(result, email)
        for email, future in futures:
            _record(result, email, future.result)

    log.info(
        "Batch %s: total=%s reconciled=%s failed=%s conflicts=%s review=%s",
        event_id,
        result.total,
        result.reconciled,
        result.failed,
        result.conflicts,
        result.requires_review,
    )
    return result


def _record(
    result: BatchResult,
    email: str,
    run: Callable[[], ReconciliationSummary],
) -> None:
    try:
        summary = run()
    except Exception:
        _fail(result, email)
        return

    result.reconciled += 1
    if summary.conflict_count:
        result.conflicts += 1
    if summary.requires_manual_review:
        result.requires_review += 1


def _fail(result: BatchResult, email: str) -> None:
    log.exception("Failed to reconcile %s @ %s", email, result.event_id)
    result.failed += 1
    result.failures.append(email)
