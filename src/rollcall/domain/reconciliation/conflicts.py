"""Conflict detection over the active signal set.

Every rule is evaluated on its own, so several conflicts may fire for one set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rollcall.domain.model import Conflict, ConflictType, SignalType, active_signals

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rollcall.domain.model import Signal

    from .policy import TrustPolicy

DESCRIPTIONS: dict[ConflictType, str] = {
    ConflictType.CERTIFICATE_WITHOUT_ATTENDANCE: (
        "Certificate issued but no attendance record found"
    ),
    ConflictType.ATTENDANCE_CONTRADICTION: (
        "Conflicting attendance signals (both present and absent)"
    ),
    ConflictType.REVOKED_WITH_ATTENDANCE: "Certificate revoked but attendance record exists",
    ConflictType.HIGH_TRUST_DISAGREEMENT: (
        "Multiple high-trust sources provide conflicting information"
    ),
}

OPPOSING_PAIRS: tuple[frozenset[SignalType], ...] = (
    frozenset({SignalType.PRESENT, SignalType.ABSENT}),
    frozenset({SignalType.CERTIFICATE_ISSUED, SignalType.CERTIFICATE_REVOKED}),
)


def detect_conflicts(
    signals: Sequence[Signal],
    *,
    policy: TrustPolicy,
    detected_at: datetime,
) -> tuple[Conflict, ...]:
    active = active_signals(list(signals))
    types = {signal.signal_type for signal in active}

    found: list[ConflictType] = []
    if SignalType.CERTIFICATE_ISSUED in types and SignalType.PRESENT not in types:
        found.append(ConflictType.CERTIFICATE_WITHOUT_ATTENDANCE)
    if SignalType.PRESENT in types and SignalType.ABSENT in types:
        found.append(ConflictType.ATTENDANCE_CONTRADICTION)
    if SignalType.CERTIFICATE_REVOKED in types and SignalType.PRESENT in types:
        found.append(ConflictType.REVOKED_WITH_ATTENDANCE)
    if _high_trust_disagreement(active, policy=policy):
        found.append(ConflictType.HIGH_TRUST_DISAGREEMENT)

    return tuple(
        Conflict(
            conflict_type=conflict_type,
            description=DESCRIPTIONS[conflict_type],
            detected_at=detected_at,
        )
        for conflict_type in found
    )


def _high_trust_disagreement(active: Sequence[Signal], *, policy: TrustPolicy) -> bool:
    high_trust = [s for s in active if s.trust_score >= policy.high_trust_threshold]
    if len(high_trust) < 2:
        return False
    types = {signal.signal_type for signal in high_trust}
    return any(pair <= types for pair in OPPOSING_PAIRS)
