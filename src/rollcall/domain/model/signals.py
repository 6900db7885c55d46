"""Signal and conflict value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .enums import ConflictType, SignalSource, SignalType, SourceModel


def _empty_metadata() -> Mapping[str, object]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class SourceRef:
    """Pointer back to the record a signal was derived from."""

    model: SourceModel | None = None
    id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Signal:
    """One normalized claim about participation."""

    source: SignalSource
    signal_type: SignalType
    trust_score: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    recorded_by: str | None = None
    source_ref: SourceRef = field(default_factory=SourceRef)
    metadata: Mapping[str, object] = field(default_factory=_empty_metadata)
    is_active: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.trust_score <= 100:
            raise ValueError(f"Trust score out of range: {self.trust_score}")


@dataclass(frozen=True, slots=True, kw_only=True)
class Conflict:
    """A logical inconsistency detected between active signals."""

    conflict_type: ConflictType
    description: str
    detected_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


def active_signals(signals: tuple[Signal, ...] | list[Signal]) -> tuple[Signal, ...]:
    return tuple(signal for signal in signals if signal.is_active)
