"""Domain enums (pure, dependency-light).

Values are persisted verbatim and read by public verification consumers, so the
upper-case spellings are part of the storage contract.
"""

from __future__ import annotations

from enum import StrEnum


class SignalSource(StrEnum):
    REGISTRATION = "REGISTRATION"
    ATTENDANCE_SCANNER = "ATTENDANCE_SCANNER"
    ATTENDANCE_MANUAL = "ATTENDANCE_MANUAL"
    CERTIFICATE = "CERTIFICATE"
    ORGANIZER_OVERRIDE = "ORGANIZER_OVERRIDE"
    SYSTEM = "SYSTEM"


class SignalType(StrEnum):
    REGISTERED = "REGISTERED"
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    CERTIFICATE_ISSUED = "CERTIFICATE_ISSUED"
    CERTIFICATE_REVOKED = "CERTIFICATE_REVOKED"
    INVALIDATED = "INVALIDATED"


class CanonicalStatus(StrEnum):
    """Single authoritative participation outcome for a (subject, event) pair."""

    REGISTERED_ONLY = "REGISTERED_ONLY"
    ATTENDED_NO_CERTIFICATE = "ATTENDED_NO_CERTIFICATE"
    CERTIFIED = "CERTIFIED"
    INVALIDATED = "INVALIDATED"


class ConflictType(StrEnum):
    CERTIFICATE_WITHOUT_ATTENDANCE = "CERTIFICATE_WITHOUT_ATTENDANCE"
    ATTENDANCE_CONTRADICTION = "ATTENDANCE_CONTRADICTION"
    REVOKED_WITH_ATTENDANCE = "REVOKED_WITH_ATTENDANCE"
    HIGH_TRUST_DISAGREEMENT = "HIGH_TRUST_DISAGREEMENT"


class ResolutionStrategy(StrEnum):
    TRUST_SCORE = "TRUST_SCORE"
    TIMESTAMP = "TIMESTAMP"
    MANUAL_OVERRIDE = "MANUAL_OVERRIDE"
    SYSTEM_DEFAULT = "SYSTEM_DEFAULT"


class SourceModel(StrEnum):
    """Discriminator for the originating record behind a signal."""

    PARTICIPANT = "Participant"
    ATTENDANCE = "Attendance"
    CERTIFICATE = "Certificate"
    EVENT_ROLE = "EventRole"


class ActorRole(StrEnum):
    ADMIN = "ADMIN"
    TEAM_LEAD = "TEAM_LEAD"
    ORGANIZER = "ORGANIZER"
    PARTICIPANT = "PARTICIPANT"
    SPEAKER = "SPEAKER"
