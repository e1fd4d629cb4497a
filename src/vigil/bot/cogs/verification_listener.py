"""Message listener Cog for the ``!verify`` prefix command.

Messages outside guilds, messages from bots, and messages that do not start
with the configured prefix are ignored. Everything else is handed to the
verification service, which replies on its own.
"""

import discord
from discord.ext import commands

from vigil.services.verification_service import VerificationService
from vigil.util.logger import get_logger

logger = get_logger("verification_listener_cog")


class VerificationListenerCog(commands.Cog):
    """Cog routing ``!verify`` messages to the verification service."""

    def __init__(self, discord_bot_instance, verification_service: VerificationService):
        self.bot = discord_bot_instance
        self.verification_service = verification_service
        logger.info("Verification listener cog loaded")

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message):
        if message.guild is None:
            return
        if message.author.bot:
            return
        if not self.verification_service.is_verify_command(message.content or ""):
            return

        logger.debug(
            "[VERIFY] Command from %s in #%s (guild %s)",
            message.author,
            getattr(message.channel, "name", message.channel.id),
            message.guild.id,
        )
        try:
            await self.verification_service.handle_verify_command(message)
        except Exception as exc:
            logger.error("Verification command from %s failed: %s", message.author.id, exc, exc_info=True)


def setup(discord_bot_instance, verification_service: VerificationService):
    """Register the VerificationListenerCog with the bot."""
    discord_bot_instance.add_cog(VerificationListenerCog(discord_bot_instance, verification_service))
