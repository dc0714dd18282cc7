"""
Decisions produced by the moderation orchestrator.

These carry numbers only. Delivering the punishment (DM, member timeout,
thread creation message) is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

from modwarden.datatypes.trust_datatypes import TrustTier


@dataclass(frozen=True, slots=True)
class WarningDecision:
    """Result of recording one warning against a user.

    Attributes:
        case_id: Case number allocated for the warning.
        warnings: Warning count after this warning.
        max_warnings: Trust-adjusted number of warnings tolerated before a mute.
        trust: Trust value the limits were computed from (before the penalty).
        trust_after: Trust value after the warn penalty.
        tier: Tier of ``trust``.
        mute_required: True when ``warnings`` reached ``max_warnings``.
        mute_duration_ms: Trust-adjusted mute length, 0 when no mute is required.
    """
    case_id: int
    warnings: int
    max_warnings: int
    trust: float
    trust_after: float
    tier: TrustTier
    mute_required: bool
    mute_duration_ms: int = 0


@dataclass(frozen=True, slots=True)
class MuteDecision:
    """Result of recording a mute.

    Attributes:
        case_id: Case number allocated for the mute.
        duration_ms: Clamped mute length the member should be timed out for.
        trust_after: Trust value after the mute penalty.
    """
    case_id: int
    duration_ms: int
    trust_after: float


@dataclass(frozen=True, slots=True)
class TicketOpenResult:
    """Result of a ticket-open attempt.

    ``duplicate`` is True when another open for the same user was already in
    flight; no number was allocated and no thread was created in that case.
    """
    duplicate: bool
    ticket_number: int | None = None
    thread_name: str | None = None
    thread: object | None = None
