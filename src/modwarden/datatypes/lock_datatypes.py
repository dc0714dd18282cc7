"""
Tagged result of a duplicate-action lock attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from modwarden.moderation.errors import LockHeld


class LockStatus(Enum):
    """Outcome of ``ActionLock.try_acquire``."""

    ACQUIRED = "acquired"
    HELD = "held"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class LockResult:
    """Result of a lock attempt.

    Attributes:
        status: ACQUIRED if this caller now owns the key, HELD otherwise.
        lock_name: Lock kind, e.g. ``"ticket_open"``.
        guild_id: Guild the lock is scoped to.
        actor_id: Actor (user) the lock is keyed by.
        expires_at: Unix time the acquired lock stops being live, None when HELD.
        timed_out: True when HELD was assumed because the store round trip timed out.
    """
    status: LockStatus
    lock_name: str
    guild_id: int
    actor_id: int
    expires_at: float | None = None
    timed_out: bool = False

    @property
    def acquired(self) -> bool:
        return self.status is LockStatus.ACQUIRED

    def raise_if_held(self) -> "LockResult":
        """Return self when acquired, raise :class:`LockHeld` otherwise."""
        if self.status is LockStatus.HELD:
            raise LockHeld(self.lock_name, self.guild_id, self.actor_id)
        return self
