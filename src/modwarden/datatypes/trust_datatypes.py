"""
Trust tiers, infraction kinds and the stored trust record.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TrustTier(Enum):
    """Classification of a trust value against the configured thresholds.

    ``NOT_APPLICABLE`` is returned when the trust feature is disabled; callers
    must then use base limits unmodified.
    """

    HIGH_RISK = "high_risk"
    NEUTRAL = "neutral"
    LOW_RISK = "low_risk"
    NOT_APPLICABLE = "not_applicable"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]

    def __str__(self) -> str:
        return self.value


_TIER_LABELS = {
    TrustTier.HIGH_RISK: "High risk",
    TrustTier.NEUTRAL: "Medium risk",
    TrustTier.LOW_RISK: "Low risk",
    TrustTier.NOT_APPLICABLE: "N/A",
}


class InfractionKind(Enum):
    """Moderation events that cost trust."""

    WARN = "warn"
    MUTE = "mute"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class TrustRecord:
    """A single row from the ``trust_records`` table.

    Timestamps are unix seconds (UTC). ``trust`` is stored as given; keeping it
    inside ``[min, max]`` is done by :class:`TrustPolicy` before writes.
    """
    guild_id: int
    user_id: int
    trust: float
    warnings: int = 0
    last_infraction_at: int | None = None
    last_trust_update_at: int | None = None
    created_at: int | None = None


@dataclass(frozen=True, slots=True)
class RegenResult:
    """Outcome of applying time-based regeneration to a trust value."""
    trust: float
    regenerated: bool
