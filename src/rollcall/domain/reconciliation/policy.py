"""Trust and scoring policy for reconciliation.

The policy is a single immutable value handed to the engine, so alternate trust
tables can be substituted (tests, per-deployment tuning) without touching module
state. Defaults reproduce the production weights.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from rollcall.domain.model import ActorRole, SignalSource

DEFAULT_TRUST_SCORES: Mapping[SignalSource, int] = MappingProxyType(
    {
        SignalSource.ATTENDANCE_SCANNER: 95,  # automated QR scan
        SignalSource.CERTIFICATE: 90,
        SignalSource.ORGANIZER_OVERRIDE: 85,
        SignalSource.SYSTEM: 80,
        SignalSource.ATTENDANCE_MANUAL: 70,
        SignalSource.REGISTRATION: 50,
    }
)

DEFAULT_OVERRIDE_ROLES = frozenset({ActorRole.ADMIN, ActorRole.TEAM_LEAD})


def _default_trust_scores() -> Mapping[SignalSource, int]:
    return DEFAULT_TRUST_SCORES


@dataclass(frozen=True, slots=True, kw_only=True)
class TrustPolicy:
    trust_scores: Mapping[SignalSource, int] = field(default_factory=_default_trust_scores)
    high_trust_threshold: int = 80
    consistency_bonus: int = 10
    conflict_penalty: int = 15
    suspicious_penalty: int = 20
    review_threshold: int = 50
    verified_threshold: int = 80
    verified_min_signals: int = 2
    override_roles: frozenset[ActorRole] = DEFAULT_OVERRIDE_ROLES
    respect_manual_override: bool = True

    def __post_init__(self) -> None:
        missing = [source for source in SignalSource if source not in self.trust_scores]
        if missing:
            names = ", ".join(sorted(missing))
            raise ValueError(f"Trust policy is missing scores for: {names}")
        for source, score in self.trust_scores.items():
            if not 0 <= score <= 100:
                raise ValueError(f"Trust score for {source} out of range: {score}")
        object.__setattr__(self, "trust_scores", MappingProxyType(dict(self.trust_scores)))

    def trust_for(self, source: SignalSource) -> int:
        return self.trust_scores[source]

    def can_override(self, role: ActorRole) -> bool:
        return role in self.override_roles
