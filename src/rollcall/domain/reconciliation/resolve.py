"""Canonical status resolution.

Deterministic, total function over the active signal set:

1. any active INVALIDATED signal wins outright
2. per category, the highest-trust signal decides (ties: latest timestamp)
3. decision table, first match wins:
   - certificate and present         -> CERTIFIED
   - certificate without attendance  -> INVALIDATED
   - present without certificate     -> ATTENDED_NO_CERTIFICATE
   - registered, or no evidence      -> REGISTERED_ONLY

A certificate without attendance invalidates rather than merely flagging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rollcall.domain.model import CanonicalStatus, SignalType, active_signals

from .contracts import Resolution

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from rollcall.domain.model import Signal

REGISTRATION_TYPES = frozenset({SignalType.REGISTERED})
ATTENDANCE_TYPES = frozenset({SignalType.PRESENT, SignalType.ABSENT})
CERTIFICATE_TYPES = frozenset({SignalType.CERTIFICATE_ISSUED, SignalType.CERTIFICATE_REVOKED})


def highest_trust_signal(
    signals: Sequence[Signal],
    signal_types: Collection[SignalType],
) -> Signal | None:
    candidates = [signal for signal in signals if signal.signal_type in signal_types]
    if not candidates:
        return None
    return max(candidates, key=lambda signal: (signal.trust_score, signal.timestamp))


def resolve_canonical_status(signals: Sequence[Signal]) -> Resolution:
    active = active_signals(list(signals))

    registration = highest_trust_signal(active, REGISTRATION_TYPES)
    attendance = highest_trust_signal(active, ATTENDANCE_TYPES)
    certificate = highest_trust_signal(active, CERTIFICATE_TYPES)

    is_registered = registration is not None
    is_present = attendance is not None and attendance.signal_type is SignalType.PRESENT
    has_certificate = (
        certificate is not None and certificate.signal_type is SignalType.CERTIFICATE_ISSUED
    )

    if any(signal.signal_type is SignalType.INVALIDATED for signal in active):
        status = CanonicalStatus.INVALIDATED
    elif has_certificate and is_present:
        status = CanonicalStatus.CERTIFIED
    elif has_certificate:
        status = CanonicalStatus.INVALIDATED
    elif is_present:
        status = CanonicalStatus.ATTENDED_NO_CERTIFICATE
    else:
        status = CanonicalStatus.REGISTERED_ONLY

    return Resolution(
        status=status,
        is_registered=is_registered,
        is_present=is_present,
        has_certificate=has_certificate,
    )
