"""Spam listener Cog for Modwarden.

Counts each member's messages over a sliding window and mutes members who
send more than their trust-adjusted burst limit. Counting happens in memory;
the mute goes through the orchestrator, so its case number, trust penalty and
warning reset are stored like any other mute.
"""

import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

import discord
from discord.ext import commands

from modwarden.bot.cogs.moderation_cmds import apply_timeout, format_duration_ms
from modwarden.moderation.errors import StoreUnavailable
from modwarden.moderation.moderation_orchestrator import ModerationOrchestrator
from modwarden.util.logger import get_logger

logger = get_logger("spam_listener_cog")

MemberKey = Tuple[int, int]

PRUNE_EVERY_MESSAGES = 500


class MessageRateTracker:
    """Per (guild, member) sliding window of message timestamps."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: Dict[MemberKey, Deque[float]] = {}
        self._last_action: Dict[MemberKey, float] = {}

    def record(self, key: MemberKey, interval_seconds: float) -> int:
        """Add one message for ``key`` and return how many fall inside the window."""
        now = self._clock()
        window = self._windows.setdefault(key, deque())
        window.append(now)
        while now - window[0] > interval_seconds:
            window.popleft()
        return len(window)

    def in_cooldown(self, key: MemberKey, cooldown_seconds: float) -> bool:
        last = self._last_action.get(key)
        return last is not None and self._clock() - last < cooldown_seconds

    def mark_action(self, key: MemberKey) -> None:
        """Start the cooldown for ``key`` and forget the burst that triggered it."""
        self._windows.pop(key, None)
        self._last_action[key] = self._clock()

    def prune(self, idle_seconds: float) -> None:
        """Drop members with no message or action in the last ``idle_seconds``."""
        now = self._clock()
        for key in [k for k, window in self._windows.items() if not window or now - window[-1] > idle_seconds]:
            del self._windows[key]
        for key in [k for k, last in self._last_action.items() if now - last > idle_seconds]:
            del self._last_action[key]

    def __len__(self) -> int:
        return len(self._windows)


class SpamListenerCog(commands.Cog):
    """Cog that mutes members for message bursts."""

    def __init__(
        self,
        discord_bot_instance,
        orchestrator: ModerationOrchestrator,
        tracker: MessageRateTracker | None = None,
    ):
        self.bot = discord_bot_instance
        self.orchestrator = orchestrator
        self.tracker = tracker if tracker is not None else MessageRateTracker()
        self._seen = 0
        logger.info("Spam listener cog loaded")

    @staticmethod
    def is_exempt(member) -> bool:
        """Bots and staff who can moderate are never rate limited."""
        if getattr(member, "bot", False):
            return True
        permissions = getattr(member, "guild_permissions", None)
        return bool(permissions and (permissions.administrator or permissions.moderate_members))

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        if message.guild is None or self.is_exempt(message.author):
            return

        settings = self.orchestrator.settings
        member = message.author
        key = (message.guild.id, member.id)
        cooldown_seconds = settings.spam_cooldown_ms / 1000

        self._maybe_prune(settings)
        count = self.tracker.record(key, settings.spam_interval_ms / 1000)
        if count <= 1 or self.tracker.in_cooldown(key, cooldown_seconds):
            return

        try:
            limit = await self.orchestrator.effective_max_messages(message.guild.id, member.id)
            # Another message may have triggered the mute while the limit was read
            if count <= limit or self.tracker.in_cooldown(key, cooldown_seconds):
                return
            self.tracker.mark_action(key)
            mute = await self.orchestrator.record_mute(message.guild.id, member.id, settings.spam_mute_duration_ms)
        except StoreUnavailable as exc:
            logger.warning("[SPAM] Could not check or mute user %s: %s", member.id, exc)
            return

        logger.info(
            "[SPAM] User %s sent %d messages in %d ms (limit %g); case #%d",
            member.id, count, settings.spam_interval_ms, limit, mute.case_id,
        )
        if not await apply_timeout(member, mute.duration_ms, "Spam: message burst limit exceeded"):
            return

        try:
            await message.channel.send(
                f"{member.mention} was muted for **{format_duration_ms(mute.duration_ms)}** "
                f"for spamming (case **#{mute.case_id}**)."
            )
        except discord.HTTPException as exc:
            logger.debug("[SPAM] Could not announce mute in channel %s: %s", message.channel.id, exc)

    def _maybe_prune(self, settings) -> None:
        self._seen += 1
        if self._seen % PRUNE_EVERY_MESSAGES == 0:
            self.tracker.prune(max(settings.spam_interval_ms, settings.spam_cooldown_ms) / 1000)


def setup(discord_bot_instance, orchestrator: ModerationOrchestrator):
    """Register the SpamListenerCog with the bot."""
    discord_bot_instance.add_cog(SpamListenerCog(discord_bot_instance, orchestrator))
