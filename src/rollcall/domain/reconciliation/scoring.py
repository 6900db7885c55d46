"""Confidence scoring, flag evaluation and the combined assessment of a signal set."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rollcall.domain.model import (
    CanonicalStatus,
    Flags,
    SignalType,
    StatusBreakdown,
    active_signals,
)

from .conflicts import detect_conflicts
from .contracts import Assessment
from .resolve import resolve_canonical_status

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rollcall.domain.model import Conflict, Signal

    from .policy import TrustPolicy


def score_confidence(
    signals: Sequence[Signal],
    conflicts: Sequence[Conflict],
    status: CanonicalStatus,
    *,
    policy: TrustPolicy,
) -> int:
    active = active_signals(list(signals))
    if not active:
        return 0

    score = sum(signal.trust_score for signal in active) / len(active)
    if not conflicts:
        score += policy.consistency_bonus
    score -= policy.conflict_penalty * len(conflicts)
    if status is CanonicalStatus.INVALIDATED:
        score -= policy.suspicious_penalty

    # half rounds up
    return max(0, min(100, math.floor(score + 0.5)))


def evaluate_flags(
    signals: Sequence[Signal],
    conflicts: Sequence[Conflict],
    confidence_score: int,
    *,
    policy: TrustPolicy,
) -> Flags:
    active = active_signals(list(signals))
    types = {signal.signal_type for signal in active}
    has_conflicts = bool(conflicts)
    return Flags(
        has_conflicts=has_conflicts,
        requires_manual_review=has_conflicts or confidence_score < policy.review_threshold,
        is_suspicious=(
            (SignalType.CERTIFICATE_ISSUED in types and SignalType.PRESENT not in types)
            or len(conflicts) >= 2
        ),
        is_verified=(
            confidence_score >= policy.verified_threshold
            and not has_conflicts
            and len(active) >= policy.verified_min_signals
        ),
    )


def status_breakdown(signals: Sequence[Signal]) -> StatusBreakdown:
    types = {signal.signal_type for signal in active_signals(list(signals))}
    return StatusBreakdown(
        is_registered=SignalType.REGISTERED in types,
        has_attendance=SignalType.PRESENT in types,
        has_certificate=SignalType.CERTIFICATE_ISSUED in types,
        is_revoked=bool(types & {SignalType.CERTIFICATE_REVOKED, SignalType.INVALIDATED}),
    )


def assess(
    signals: Sequence[Signal],
    *,
    policy: TrustPolicy,
    now: datetime,
) -> Assessment:
    """Run conflict detection, resolution, scoring and flagging over one signal set."""

    conflicts = detect_conflicts(signals, policy=policy, detected_at=now)
    resolution = resolve_canonical_status(signals)
    confidence = score_confidence(signals, conflicts, resolution.status, policy=policy)
    return Assessment(
        signals=tuple(signals),
        conflicts=conflicts,
        resolution=resolution,
        confidence_score=confidence,
        flags=evaluate_flags(signals, conflicts, confidence, policy=policy),
        status_breakdown=status_breakdown(signals),
    )
