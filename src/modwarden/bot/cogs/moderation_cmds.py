"""
Moderation cog: trust, warning and mute commands.

``/trust`` shows a member's trust score and risk tier. ``/warn`` records a
warning and allocates its case number; when the trust-adjusted warning limit
is reached it also records a mute and times the member out. ``/mute`` times a
member out for a trust-scaled length and records the mute.

Permissions
- All commands require the invoker to have ``moderate_members``. If the
  check fails the command replies ephemerally to the invoking user.
- Store failures are reported as a "try again" reply; no case number is ever
  invented.
"""

import datetime

import discord
from discord import Option
from discord.ext import commands

from modwarden.moderation.errors import StoreUnavailable
from modwarden.moderation.moderation_orchestrator import ModerationOrchestrator
from modwarden.util.logger import get_logger

logger = get_logger("moderation_cog")

STORE_UNAVAILABLE_MESSAGE = "The moderation store is unavailable right now. Please try again in a moment."
TIMEOUT_FAILED_MESSAGE = "I could not time out this member; check my role and permissions."


def format_duration_ms(duration_ms: int) -> str:
    """Render a mute length as whole minutes, or seconds below one minute."""
    if duration_ms < 60_000:
        return f"{round(duration_ms / 1000)} seconds"
    return f"{round(duration_ms / 60_000)} minutes"


async def apply_timeout(member: discord.Member, duration_ms: int, reason: str) -> bool:
    """Time ``member`` out for ``duration_ms``; False when Discord refuses."""
    until = discord.utils.utcnow() + datetime.timedelta(milliseconds=duration_ms)
    try:
        await member.timeout(until, reason=reason)
    except discord.HTTPException as exc:
        logger.warning("[MODERATION] Could not time out user %s: %s", member.id, exc)
        return False
    return True


class ModerationCog(commands.Cog):
    """Cog containing trust, warning and mute slash commands."""

    def __init__(self, discord_bot_instance, orchestrator: ModerationOrchestrator):
        """
        Parameters
        ----------
        discord_bot_instance:
            Active :class:`discord.Bot` instance.
        orchestrator:
            Moderation orchestrator shared by all cogs.
        """
        self.discord_bot_instance = discord_bot_instance
        self.orchestrator = orchestrator
        logger.info("Moderation cog loaded")

    @staticmethod
    def can_moderate(application_context: discord.ApplicationContext) -> bool:
        permissions = getattr(application_context.author, "guild_permissions", None)
        return bool(permissions and permissions.moderate_members)

    @commands.slash_command(name="trust", description="Show a member's trust score.")
    async def trust(
        self,
        application_context: discord.ApplicationContext,
        user: Option(discord.Member, "Member to inspect"),  # type: ignore[valid-type]
    ) -> None:
        if not self.can_moderate(application_context):
            await application_context.respond("You do not have permission to use this command.", ephemeral=True)
            return

        policy = self.orchestrator.policy
        if not policy.enabled:
            await application_context.respond("Trust scoring is disabled on this bot.", ephemeral=True)
            return

        try:
            record = await self.orchestrator.trust_service.get_or_create(application_context.guild.id, user.id)
        except StoreUnavailable as exc:
            logger.warning("[TRUST] /trust failed for user %s: %s", user.id, exc)
            await application_context.respond(STORE_UNAVAILABLE_MESSAGE, ephemeral=True)
            return

        await application_context.respond(
            f"**{user.display_name}**\n"
            f"Trust: **{record.trust:g}/{policy.config.max:g}** ({policy.trust_label(record.trust)})\n"
            f"Warnings: **{record.warnings}**",
            ephemeral=True,
        )

    @commands.slash_command(name="warn", description="Warn a member and record a case.")
    async def warn(
        self,
        application_context: discord.ApplicationContext,
        user: Option(discord.Member, "Member to warn"),  # type: ignore[valid-type]
        reason: Option(str, "Reason for the warning", default="No reason provided"),  # type: ignore[valid-type]
    ) -> None:
        if not self.can_moderate(application_context):
            await application_context.respond("You do not have permission to use this command.", ephemeral=True)
            return

        if user.id == application_context.author.id:
            await application_context.respond("You cannot warn yourself.", ephemeral=True)
            return

        await application_context.defer()

        try:
            decision = await self.orchestrator.record_warning(application_context.guild.id, user.id)
        except StoreUnavailable as exc:
            logger.warning("[MODERATION] /warn failed for user %s: %s", user.id, exc)
            await application_context.send_followup(STORE_UNAVAILABLE_MESSAGE)
            return

        lines = [
            f"Case **#{decision.case_id}**: {user.mention} was warned.",
            f"Reason: {reason}",
            f"Warnings: **{decision.warnings}/{decision.max_warnings}**",
        ]
        if self.orchestrator.policy.enabled:
            lines.append(f"Trust: **{decision.trust_after:g}/{self.orchestrator.policy.config.max:g}**")
        if decision.mute_required:
            lines.extend(await self._mute_at_warning_limit(application_context.guild.id, user, decision, reason))

        await application_context.send_followup("\n".join(lines))

    async def _mute_at_warning_limit(self, guild_id: int, user, decision, reason: str) -> list[str]:
        """Record the mute a warning triggered and time the member out."""
        try:
            mute = await self.orchestrator.record_mute(guild_id, user.id, duration_ms=decision.mute_duration_ms)
        except StoreUnavailable as exc:
            logger.warning("[MODERATION] Mute after warning failed for user %s: %s", user.id, exc)
            return ["Warning limit reached, but the mute could not be recorded. Please try again."]

        lines = [
            f"Warning limit reached: muted for **{format_duration_ms(mute.duration_ms)}** "
            f"(case **#{mute.case_id}**)."
        ]
        if not await apply_timeout(user, mute.duration_ms, f"Warning limit reached: {reason}"):
            lines.append(TIMEOUT_FAILED_MESSAGE)
        return lines

    @commands.slash_command(name="mute", description="Time out a member; the length is scaled by their trust.")
    async def mute(
        self,
        application_context: discord.ApplicationContext,
        user: Option(discord.Member, "Member to mute"),  # type: ignore[valid-type]
        minutes: Option(  # type: ignore[valid-type]
            int,
            "Base length in minutes (defaults to the configured mute length)",
            min_value=1,
            max_value=10080,
            required=False,
            default=None,
        ),
        reason: Option(str, "Reason for the mute", default="No reason provided"),  # type: ignore[valid-type]
    ) -> None:
        if not self.can_moderate(application_context):
            await application_context.respond("You do not have permission to use this command.", ephemeral=True)
            return

        if user.id == application_context.author.id:
            await application_context.respond("You cannot mute yourself.", ephemeral=True)
            return

        if user.bot:
            await application_context.respond("You cannot mute bots.", ephemeral=True)
            return

        await application_context.defer()

        base_ms = None if minutes is None else minutes * 60_000
        try:
            mute = await self.orchestrator.record_mute(application_context.guild.id, user.id, base_ms)
        except StoreUnavailable as exc:
            logger.warning("[MODERATION] /mute failed for user %s: %s", user.id, exc)
            await application_context.send_followup(STORE_UNAVAILABLE_MESSAGE)
            return

        lines = [
            f"Case **#{mute.case_id}**: {user.mention} was muted for **{format_duration_ms(mute.duration_ms)}**.",
            f"Reason: {reason}",
        ]
        if self.orchestrator.policy.enabled:
            lines.append(f"Trust: **{mute.trust_after:g}/{self.orchestrator.policy.config.max:g}**")
        if not await apply_timeout(user, mute.duration_ms, reason):
            lines.append(TIMEOUT_FAILED_MESSAGE)

        await application_context.send_followup("\n".join(lines))


def setup(discord_bot_instance, orchestrator: ModerationOrchestrator):
    """Register the ModerationCog with the bot."""
    discord_bot_instance.add_cog(ModerationCog(discord_bot_instance, orchestrator))
