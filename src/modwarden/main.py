"""
Modwarden Discord Bot
=====================

Community moderation bot with trust-scored warnings and mutes, sequential
case numbers and duplicate-safe support tickets.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. MODWARDEN_HOME environment variable, if set.
    2. If running in a frozen/compiled context, use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("MODWARDEN_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from modwarden.configuration.app_configuration import AppConfig, app_config
from modwarden.database.database import Database
from modwarden.database.db_connection import db_connection
from modwarden.moderation.action_lock import ActionLock
from modwarden.moderation.moderation_orchestrator import ModerationOrchestrator
from modwarden.moderation.sequence_allocator import SequenceAllocator
from modwarden.moderation.trust_policy import TrustPolicy
from modwarden.moderation.trust_service import TrustService
from modwarden.scheduler.maintenance_scheduler import MaintenanceScheduler
from modwarden.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for guild, member, message and reaction events."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.members = True
    intents.reactions = True
    return intents


def build_orchestrator(config: AppConfig) -> ModerationOrchestrator:
    """Wire the trust policy, allocator and ticket lock to the shared store."""
    timeout = config.store_timeout_seconds
    policy = TrustPolicy(config.trust)
    return ModerationOrchestrator(
        trust_service=TrustService(policy, db_connection),
        allocator=SequenceAllocator(db_connection, timeout=timeout),
        ticket_lock=ActionLock(connection=db_connection, timeout=timeout),
        settings=config.moderation,
    )


def load_cogs(discord_bot_instance: discord.Bot, orchestrator: ModerationOrchestrator) -> None:
    """Register all cogs with the provided Discord bot instance."""
    from modwarden.bot.cogs import events_listener, moderation_cmds, spam_listener, ticket_listener

    events_listener.setup(discord_bot_instance)
    moderation_cmds.setup(discord_bot_instance, orchestrator)
    spam_listener.setup(discord_bot_instance, orchestrator)
    ticket_listener.setup(discord_bot_instance, orchestrator)

    logger.info("All cogs loaded successfully.")


def create_bot(orchestrator: ModerationOrchestrator) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, orchestrator)
    return bot


async def run_bot_session(bot: discord.Bot, token: str) -> int:
    """Run the bot until it disconnects, returning an exit code."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    except discord.DiscordException as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        return 1
    finally:
        if not bot.is_closed():
            await bot.close()
        logger.info("Discord bot start routine finished.")
    return 0


async def async_main() -> int:
    """Bootstrap the store, scheduler and bot, returning an exit code."""
    token = load_environment()

    database = Database(app_config.database_path, db_connection)
    if not await database.initialize():
        logger.critical("Failed to initialize database at %s", app_config.database_path)
        return 1

    scheduler = MaintenanceScheduler(database.maintenance, lambda: app_config.lock_sweep_interval)
    try:
        bot = create_bot(build_orchestrator(app_config))
        scheduler.start()
        return await run_bot_session(bot, token)
    finally:
        await scheduler.shutdown()
        await database.shutdown()
        logger.info("Shutdown complete.")


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting Modwarden…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
