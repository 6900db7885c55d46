"""Actors performing authorized operations against the engine."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import ActorRole


@dataclass(frozen=True, slots=True)
class Actor:
    actor_id: str
    role: ActorRole

    def __post_init__(self) -> None:
        if not self.actor_id.strip():
            raise ValueError("Actor id must not be blank")
        object.__setattr__(self, "role", ActorRole(self.role))
