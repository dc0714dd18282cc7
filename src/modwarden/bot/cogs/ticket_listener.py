"""Ticket listener Cog for Modwarden.

Opens a private support thread when a member reacts with the ticket emoji.
Reaction events can arrive twice and members double-click, so every open
goes through the orchestrator's ticket-open lock; only the first trigger in
the lock window creates a thread.
"""

import discord
from discord.ext import commands

from modwarden.moderation.errors import StoreUnavailable
from modwarden.moderation.moderation_orchestrator import ModerationOrchestrator
from modwarden.util.logger import get_logger

logger = get_logger("ticket_listener_cog")

OPEN_EMOJI = "🎫"
THREAD_ARCHIVE_MINUTES = 1440  # 24h


class TicketListenerCog(commands.Cog):
    """Cog that turns ticket-emoji reactions into support threads."""

    def __init__(self, discord_bot_instance, orchestrator: ModerationOrchestrator):
        self.bot = discord_bot_instance
        self.orchestrator = orchestrator
        logger.info("Ticket listener cog loaded")

    @commands.Cog.listener(name="on_raw_reaction_add")
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        """Open a ticket thread for the reacting member."""
        if payload.guild_id is None or str(payload.emoji) != OPEN_EMOJI:
            return

        member = payload.member
        if member is None or member.bot:
            return

        channel = self.bot.get_channel(payload.channel_id)
        if channel is None or not hasattr(channel, "create_thread"):
            logger.debug("[TICKETS] Channel %s cannot host ticket threads", payload.channel_id)
            return

        async def create_thread(name: str):
            thread = await channel.create_thread(
                name=name,
                type=discord.ChannelType.private_thread,
                auto_archive_duration=THREAD_ARCHIVE_MINUTES,
                reason=f"Ticket opened by {member}",
            )
            await thread.add_user(member)
            return thread

        try:
            result = await self.orchestrator.open_ticket(
                payload.guild_id, member.id, payload.message_id, create_thread
            )
        except StoreUnavailable as exc:
            logger.warning("[TICKETS] Could not open ticket for user %s: %s", member.id, exc)
            return
        except discord.HTTPException as exc:
            logger.error("[TICKETS] Discord rejected ticket thread for user %s: %s", member.id, exc)
            return

        if result.duplicate:
            logger.debug("[TICKETS] Duplicate trigger from user %s collapsed", member.id)


def setup(discord_bot_instance, orchestrator: ModerationOrchestrator):
    """Register the TicketListenerCog with the bot."""
    discord_bot_instance.add_cog(TicketListenerCog(discord_bot_instance, orchestrator))
