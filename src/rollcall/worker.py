"""Bounded background dispatcher for reconciliation passes.

Source mutations call ``Dispatcher.submit`` and return immediately. The dispatcher
keeps at most ``max_pending`` pairs queued or running, coalesces submissions for a
pair that is still waiting, and never runs two passes for the same pair at once.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from logging import getLogger
from threading import BoundedSemaphore, Lock
from typing import TYPE_CHECKING, Self

from rollcall.domain.model import normalize_email

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future
    from types import TracebackType

    from rollcall.domain.reconciliation import ReconciliationSummary

log = getLogger(__name__)

type PairKey = tuple[str, str]

DEFAULT_WORKERS = 4
DEFAULT_MAX_PENDING = 256


class DispatcherError(RuntimeError):
    """Base class for dispatcher failures."""


class DispatcherSaturatedError(DispatcherError):
    """Every pending slot is taken; the caller should retry later."""


class DispatcherClosedError(DispatcherError):
    """The dispatcher was shut down."""


@dataclass(frozen=True, slots=True)
class DispatcherStats:
    submitted: int = 0
    coalesced: int = 0
    completed: int = 0
    failed: int = 0
    rejected: int = 0
    pending: int = 0
    locked_pairs: int = 0


@dataclass(slots=True)
class _PairLock:
    lock: Lock = field(default_factory=Lock)
    users: int = 0


class Dispatcher:
    def __init__(
        self,
        reconcile: Callable[[str, str], ReconciliationSummary],
        *,
        workers: int = DEFAULT_WORKERS,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        if workers < 1 or max_pending < 1:
            raise ValueError("workers and max_pending must be positive")
        self._reconcile = reconcile
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rollcall")
        self._slots = BoundedSemaphore(max_pending)
        self._lock = Lock()
        self._queued: dict[PairKey, Future[ReconciliationSummary]] = {}
        # entries live only while a pass for the pair is running or waiting on the lock
        self._pair_locks: dict[PairKey, _PairLock] = {}
        self._closed = False
        self._submitted = 0
        self._coalesced = 0
        self._completed = 0
        self._failed = 0
        self._rejected = 0
        self._pending = 0

    def submit(
        self,
        email: str,
        event_id: str,
        *,
        block: bool = False,
    ) -> Future[ReconciliationSummary]:
        """Schedule a pass for the pair.

        Raises ``DispatcherSaturatedError`` when no slot is free and ``block`` is
        false. A pair that is already waiting shares the queued future.
        """

        key = (normalize_email(email), event_id)
        with self._lock:
            self._ensure_open()
            queued = self._queued.get(key)
            if queued is not None:
                self._coalesced += 1
                return queued

        if not self._slots.acquire(blocking=block):
            with self._lock:
                self._rejected += 1
            raise DispatcherSaturatedError(
                f"Dispatcher saturated; rejected {key[0]} @ {key[1]}"
            )

        with self._lock:
            try:
                self._ensure_open()
            except DispatcherClosedError:
                self._slots.release()
                raise
            queued = self._queued.get(key)
            if queued is not None:
                # another submitter won the race while we waited for a slot
                self._slots.release()
                self._coalesced += 1
                return queued
            future = self._executor.submit(self._run, key)
            self._queued[key] = future
            self._submitted += 1
            self._pending += 1
        return future

    def _run(self, key: PairKey) -> ReconciliationSummary:
        with self._lock:
            # later submissions must schedule a fresh pass
            self._queued.pop(key, None)
            pair_lock = self._pair_locks.get(key)
            if pair_lock is None:
                pair_lock = self._pair_locks[key] = _PairLock()
            pair_lock.users += 1
        try:
            with pair_lock.lock:
                summary = self._reconcile(*key)
        except Exception:
            with self._lock:
                self._failed += 1
            log.warning("Background reconciliation failed for %s @ %s", *key)
            raise
        else:
            with self._lock:
                self._completed += 1
            return summary
        finally:
            with self._lock:
                self._pending -= 1
                pair_lock.users -= 1
                if not pair_lock.users:
                    del self._pair_locks[key]
            self._slots.release()

    def _ensure_open(self) -> None:
        if self._closed:
            raise DispatcherClosedError("Dispatcher has been shut down")

    def stats(self) -> DispatcherStats:
        with self._lock:
            return DispatcherStats(
                submitted=self._submitted,
                coalesced=self._coalesced,
                completed=self._completed,
                failed=self._failed,
                rejected=self._rejected,
                pending=self._pending,
                locked_pairs=len(self._pair_locks),
            )

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self, *, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.shutdown(wait=True)
