"""Authorization and validation of manual status overrides."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rollcall.domain.model import CanonicalStatus

from .errors import OverrideValidationError, PermissionDeniedError

if TYPE_CHECKING:
    from rollcall.domain.model import Actor

    from .policy import TrustPolicy


def authorize_override(actor: Actor, *, policy: TrustPolicy) -> None:
    if not policy.can_override(actor.role):
        raise PermissionDeniedError(
            f"Role {actor.role} may not override participation status "
            f"(actor {actor.actor_id})"
        )


def parse_override(new_status: CanonicalStatus | str, reason: str) -> tuple[CanonicalStatus, str]:
    """Return the validated target status and the trimmed reason."""

    try:
        status = CanonicalStatus(new_status)
    except ValueError:
        valid = ", ".join(CanonicalStatus)
        raise OverrideValidationError(
            f"Invalid status {new_status!r}; expected one of: {valid}"
        ) from None

    reason = (reason or "").strip()
    if not reason:
        raise OverrideValidationError("Override reason is required")
    return status, reason
