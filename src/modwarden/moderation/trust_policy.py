"""
Trust policy resolver.

Turns a raw trust value and a :class:`TrustConfig` into enforcement numbers:
how many warnings a user gets before a mute, how many messages the spam
filter tolerates, and how long a mute lasts. Users at or below
``low_threshold`` are high-risk and treated more strictly; users at or above
``high_threshold`` are low-risk and treated more leniently.

Everything here is pure arithmetic. There is no I/O and no hidden state, so
the same inputs always give the same outputs. A missing or non-finite trust
value is read as ``base``.

Quick usage example::

    policy = TrustPolicy(app_config.trust)
    max_warnings = policy.effective_max_warnings(3, record.trust)
    mute_ms = policy.effective_mute_duration(600_000, record.trust)
"""

from __future__ import annotations

import math
from typing import Any

from modwarden.configuration.trust_settings import TrustConfig
from modwarden.datatypes.trust_datatypes import InfractionKind, RegenResult, TrustTier

DAY_SECONDS = 24 * 60 * 60
DAY_MS = DAY_SECONDS * 1000

MIN_MUTE_MS = 30 * 1000
MAX_MUTE_MS = 28 * DAY_MS


def _is_finite_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def clamp_mute_duration(duration_ms: Any) -> int:
    """Clamp a mute length to [30 seconds, 28 days]; non-finite input gives the minimum."""
    if not _is_finite_number(duration_ms):
        return MIN_MUTE_MS
    return int(min(MAX_MUTE_MS, max(MIN_MUTE_MS, duration_ms)))


class TrustPolicy:
    """Pure trust arithmetic bound to one :class:`TrustConfig`."""

    def __init__(self, config: TrustConfig | None = None) -> None:
        self.config = config or TrustConfig()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def normalize(self, trust: Any) -> float:
        """Return ``trust`` if it is a finite number, otherwise the configured base."""
        return trust if _is_finite_number(trust) else self.config.base

    def classify(self, trust: Any) -> TrustTier:
        """Classify a trust value; NOT_APPLICABLE when the feature is disabled."""
        if not self.config.enabled:
            return TrustTier.NOT_APPLICABLE

        value = self.normalize(trust)
        if value <= self.config.low_threshold:
            return TrustTier.HIGH_RISK
        if value >= self.config.high_threshold:
            return TrustTier.LOW_RISK
        return TrustTier.NEUTRAL

    def trust_label(self, trust: Any) -> str:
        return self.classify(trust).label

    # ------------------------------------------------------------------
    # Effective limits
    # ------------------------------------------------------------------

    def effective_max_warnings(self, base_max: int, trust: Any) -> int | float:
        """Warnings tolerated before a mute; high-risk users lose
        ``low_trust_warnings_penalty`` of them, never going below 1.

        A fractional penalty gives a fractional limit.
        """
        if self.classify(trust) is TrustTier.HIGH_RISK:
            return self._apply_floor_penalty(base_max, self.config.low_trust_warnings_penalty)
        return base_max

    def effective_max_messages(self, base_max: int, trust: Any) -> int | float:
        """Message burst tolerated by the spam filter.

        High-risk users lose ``low_trust_messages_penalty`` (floored at 1);
        low-risk users gain ``high_trust_messages_bonus`` when it is positive.
        Fractional penalties and bonuses are kept as-is.
        """
        tier = self.classify(trust)
        if tier is TrustTier.HIGH_RISK:
            return self._apply_floor_penalty(base_max, self.config.low_trust_messages_penalty)
        if tier is TrustTier.LOW_RISK:
            bonus = self.config.high_trust_messages_bonus
            if _is_finite_number(bonus) and bonus > 0:
                return base_max + bonus
        return base_max

    def effective_mute_duration(self, base_ms: Any, trust: Any) -> int:
        """Mute length in milliseconds, scaled by tier and always clamped.

        The [30 s, 28 d] clamp applies even when the feature is disabled, so a
        bad base duration never produces a zero-length or endless mute.
        """
        if not _is_finite_number(base_ms):
            return MIN_MUTE_MS

        tier = self.classify(trust)
        duration = base_ms
        if tier is TrustTier.HIGH_RISK:
            duration = base_ms * self.config.low_trust_mute_multiplier
        elif tier is TrustTier.LOW_RISK:
            duration = base_ms * self.config.high_trust_mute_multiplier

        # A huge multiplier overflows to inf
        if not math.isfinite(duration):
            return MIN_MUTE_MS
        return clamp_mute_duration(_round_half_up(duration))

    @staticmethod
    def _apply_floor_penalty(base_max: int, penalty: Any) -> int | float:
        if _is_finite_number(penalty) and penalty > 0:
            return max(1, base_max - penalty)
        return base_max

    # ------------------------------------------------------------------
    # Trust mutation arithmetic
    # ------------------------------------------------------------------

    def clamp(self, value: Any) -> float:
        """Clamp a trust value into [min, max]; non-finite input becomes base."""
        value = self.normalize(value)
        return max(self.config.min, min(self.config.max, value))

    def apply_penalty(self, trust: Any, kind: InfractionKind) -> float:
        """Trust after an infraction of ``kind``. Unchanged when disabled."""
        value = self.normalize(trust)
        if not self.config.enabled:
            return value

        penalty = self.config.warn_penalty if kind is InfractionKind.WARN else self.config.mute_penalty
        if penalty > 0:
            return self.clamp(value - penalty)
        return value

    def regenerate(self, trust: Any, last_event_at: float | None, now: float) -> RegenResult:
        """Add ``regen_per_day`` for each full day since ``last_event_at``.

        At most ``regen_max_days`` days count. ``regenerated`` is False when
        nothing changed, so the caller knows not to move the regen timestamp.
        """
        value = self.normalize(trust)
        if not self.config.enabled or last_event_at is None:
            return RegenResult(trust=value, regenerated=False)

        elapsed = now - last_event_at
        if elapsed < DAY_SECONDS:
            return RegenResult(trust=value, regenerated=False)

        days = min(int(elapsed // DAY_SECONDS), self.config.regen_max_days)
        bonus = days * self.config.regen_per_day
        if bonus <= 0:
            return RegenResult(trust=value, regenerated=False)

        return RegenResult(trust=self.clamp(value + bonus), regenerated=True)
