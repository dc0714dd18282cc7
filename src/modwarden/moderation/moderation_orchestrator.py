"""
Moderation action orchestrator.

Thin layer that turns a moderation event into numbers: the case id, the
trust-adjusted warning limit, whether a mute is due and for how long, the
message burst a member may send before the spam filter mutes them, and the
ticket number for a new support thread. It never delivers anything to Discord
itself except through the ``create_thread`` callback the caller passes to
:meth:`ModerationOrchestrator.open_ticket`.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from modwarden.configuration.moderation_settings import ModerationSettings
from modwarden.datatypes.moderation_datatypes import MuteDecision, TicketOpenResult, WarningDecision
from modwarden.moderation.action_lock import ActionLock
from modwarden.moderation.sequence_allocator import CASE_SEQUENCE, TICKET_SEQUENCE, SequenceAllocator
from modwarden.moderation.trust_policy import clamp_mute_duration
from modwarden.moderation.trust_service import TrustService
from modwarden.util.logger import get_logger

logger = get_logger("moderation_orchestrator")


def format_ticket_name(ticket_number: int) -> str:
    """Thread name for a ticket, zero-padded to three digits (``ticket-007``)."""
    return f"ticket-{ticket_number:03d}"


class ModerationOrchestrator:
    """Combines trust, numbering and locking for the bot's moderation flows."""

    def __init__(
        self,
        trust_service: TrustService,
        allocator: SequenceAllocator,
        ticket_lock: ActionLock,
        settings: ModerationSettings | None = None,
    ) -> None:
        self.trust_service = trust_service
        self.allocator = allocator
        self.ticket_lock = ticket_lock
        self.settings = settings or ModerationSettings()

    @property
    def policy(self):
        return self.trust_service.policy

    async def record_warning(self, guild_id: int, user_id: int) -> WarningDecision:
        """Record one warning and decide whether it triggers a mute.

        Limits are computed from the trust the user had before this warning,
        so the warning that drops a user into high-risk does not shorten its
        own limit.

        Raises:
            StoreUnavailable: The trust update or the case allocation failed.
        """
        before = await self.trust_service.get_or_create(guild_id, user_id)
        record = await self.trust_service.add_warning(guild_id, user_id)
        case_id = await self.allocator.allocate(guild_id, CASE_SEQUENCE)

        max_warnings = self.policy.effective_max_warnings(self.settings.max_warnings, before.trust)
        mute_required = record.warnings >= max_warnings
        mute_duration_ms = (
            self.policy.effective_mute_duration(self.settings.mute_duration_ms, before.trust)
            if mute_required
            else 0
        )

        return WarningDecision(
            case_id=case_id,
            warnings=record.warnings,
            max_warnings=max_warnings,
            trust=before.trust,
            trust_after=record.trust,
            tier=self.policy.classify(before.trust),
            mute_required=mute_required,
            mute_duration_ms=mute_duration_ms,
        )

    async def record_mute(
        self,
        guild_id: int,
        user_id: int,
        base_ms: int | None = None,
        *,
        duration_ms: int | None = None,
    ) -> MuteDecision:
        """Record a mute: allocate its case, apply the mute penalty and reset warnings.

        The length is ``duration_ms`` when given (a warning decision already
        fixed it), otherwise ``base_ms`` (default: the configured mute
        duration) scaled by the trust the user had before this mute. Either
        way it is clamped to [30 s, 28 d].

        Raises:
            StoreUnavailable: The case allocation or the trust update failed.
        """
        if duration_ms is None:
            before = await self.trust_service.get_or_create(guild_id, user_id)
            base = self.settings.mute_duration_ms if base_ms is None else base_ms
            duration_ms = self.policy.effective_mute_duration(base, before.trust)
        else:
            duration_ms = clamp_mute_duration(duration_ms)

        case_id = await self.allocator.allocate(guild_id, CASE_SEQUENCE)
        await self.trust_service.apply_mute_penalty(guild_id, user_id)
        record = await self.trust_service.reset_warnings(guild_id, user_id)
        return MuteDecision(case_id=case_id, duration_ms=duration_ms, trust_after=record.trust)

    async def effective_max_messages(self, guild_id: int, user_id: int) -> int | float:
        """Trust-adjusted message burst limit for the spam filter."""
        record = await self.trust_service.get_or_create(guild_id, user_id)
        return self.policy.effective_max_messages(self.settings.max_messages, record.trust)

    async def open_ticket(
        self,
        guild_id: int,
        user_id: int,
        message_id: int,
        create_thread: Callable[[str], Awaitable[Any]],
    ) -> TicketOpenResult:
        """Open a support ticket unless another open for this user is in flight.

        The lock is not released afterwards: it lapses after its TTL, which
        also covers a ``create_thread`` that fails halfway.

        Raises:
            StoreUnavailable: The lock attempt or the ticket number allocation failed.
        """
        lock = await self.ticket_lock.try_acquire(guild_id, user_id, metadata=str(message_id))
        if not lock.acquired:
            logger.info("[TICKETS] Ignoring duplicate ticket open by user %s in guild %s", user_id, guild_id)
            return TicketOpenResult(duplicate=True)

        ticket_number = await self.allocator.allocate(guild_id, TICKET_SEQUENCE)
        thread_name = format_ticket_name(ticket_number)
        thread = await create_thread(thread_name)

        logger.info("[TICKETS] Opened %s for user %s in guild %s", thread_name, user_id, guild_id)
        return TicketOpenResult(
            duplicate=False,
            ticket_number=ticket_number,
            thread_name=thread_name,
            thread=thread,
        )
