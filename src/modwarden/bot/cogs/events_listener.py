"""Event listener Cog for Modwarden.

Sets the bot's presence once the gateway is ready and turns unhandled slash
command errors into an ephemeral reply instead of a silent failure.
"""

import discord
from discord.ext import commands

from modwarden.bot.cogs.moderation_cmds import STORE_UNAVAILABLE_MESSAGE
from modwarden.moderation.errors import StoreUnavailable
from modwarden.util.logger import get_logger

logger = get_logger("events_listener_cog")

GENERIC_ERROR_MESSAGE = "Something went wrong while running this command."


class EventsListenerCog(commands.Cog):
    """Ready and command-error handlers."""

    def __init__(self, discord_bot_instance):
        self.bot = discord_bot_instance
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        if not self.bot.user:
            logger.warning("on_ready fired before the bot user was available")
            return

        guild_count = len(getattr(self.bot, "guilds", []) or [])
        logger.info("Logged in as %s (ID: %s), serving %d guild(s)", self.bot.user, self.bot.user.id, guild_count)
        await self.bot.change_presence(
            status=discord.Status.online,
            activity=discord.Activity(type=discord.ActivityType.watching, name="trust scores"),
        )

    @commands.Cog.listener(name='on_application_command_error')
    async def on_application_command_error(self, application_context: discord.ApplicationContext, error: Exception):
        """Reply to the invoker; store outages get the "try again" text."""
        if isinstance(error, commands.CommandNotFound):
            return

        cause = getattr(error, "original", error)
        command_name = getattr(application_context.command, 'name', '<unknown>')

        if isinstance(cause, StoreUnavailable):
            logger.warning("/%s aborted, store unavailable: %s", command_name, cause)
            reply = STORE_UNAVAILABLE_MESSAGE
        else:
            logger.error("/%s failed: %s", command_name, cause, exc_info=cause)
            reply = GENERIC_ERROR_MESSAGE

        try:
            await application_context.respond(reply, ephemeral=True)
        except discord.InteractionResponded:
            await application_context.followup.send(reply, ephemeral=True)


def setup(discord_bot_instance):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance))
