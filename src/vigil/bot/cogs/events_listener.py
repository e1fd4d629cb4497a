"""Event listener Cog for Vigil.

Handles bot lifecycle (on_ready) and member joins. Every joining account is
screened by the verification service; malicious bots get an automatic ban
scheduled from here.
"""

import discord
from discord.ext import commands

from vigil.services.verification_service import VerificationService
from vigil.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and member join handlers."""

    def __init__(self, discord_bot_instance, verification_service: VerificationService):
        """Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        verification_service:
            Service screening joining members.
        """
        self.bot = discord_bot_instance
        self.verification_service = verification_service
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Log the connected identity and set the bot presence."""
        if self.bot.user:
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(type=discord.ActivityType.watching, name="new members"),
            )
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

    @commands.Cog.listener(name="on_member_join")
    async def on_member_join(self, member: discord.Member):
        """Screen a member that just joined a guild."""
        try:
            verdict = await self.verification_service.screen_new_member(member)
        except Exception as exc:
            logger.error("Failed to screen member %s in guild %s: %s", member.id, member.guild.id, exc, exc_info=True)
            return

        if verdict.is_suspicious:
            logger.info(
                "[SCREENING] %s joined guild %s as suspicious: %s",
                member,
                member.guild.id,
                ", ".join(verdict.reasons),
            )


def setup(discord_bot_instance, verification_service: VerificationService):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, verification_service))
