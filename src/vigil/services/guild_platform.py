"""
py-cord implementation of :class:`PlatformActions` for a single guild.
"""

from __future__ import annotations

from typing import Iterable, Union

import discord

from vigil.datatypes.account_datatypes import AccountSnapshot
from vigil.datatypes.discord_datatypes import UserID
from vigil.datatypes.platform_datatypes import DecisionSurface
from vigil.util import discord_utils
from vigil.util.logger import get_logger

logger = get_logger("guild_platform")


class GuildPlatform:
    """Performs bans, DMs and message operations in ``guild``."""

    def __init__(self, guild: discord.Guild) -> None:
        self.guild = guild

    async def ban_account(self, target_id: UserID, reason: str) -> bool:
        return await discord_utils.safe_ban(self.guild, target_id.to_int(), reason)

    async def send_direct_message(self, account_id: UserID, embed: discord.Embed) -> bool:
        member = self.guild.get_member(account_id.to_int())
        if member is None:
            try:
                member = await self.guild.fetch_member(account_id.to_int())
            except discord.HTTPException as exc:
                logger.warning("Could not resolve member %s for a direct message: %s", account_id, exc)
                return False
        return await discord_utils.safe_send_dm(member, embed)

    async def present_decision_surface(
        self,
        origin: discord.Message,
        embed: discord.Embed,
        view: discord.ui.View,
    ) -> DecisionSurface | None:
        try:
            message = await origin.reply(embed=embed, view=view)
        except discord.HTTPException as exc:
            logger.error("Failed to present verification controls in channel %s: %s", origin.channel.id, exc)
            return None
        return DecisionSurface(message=message, view=view)

    async def disable_controls(self, surface: DecisionSurface) -> None:
        view = surface.view
        for child in view.children:
            if isinstance(child, discord.ui.Button):
                child.disabled = True
        await discord_utils.safe_edit_view(surface.message, view)
        view.stop()

    async def reply_to(
        self,
        origin: Union[discord.Message, discord.Interaction],
        content: str,
        *,
        ephemeral: bool = False,
    ) -> bool:
        """Reply to a message, or respond to an interaction (ephemeral when asked)."""
        try:
            if isinstance(origin, discord.Interaction):
                if origin.response.is_done():
                    await origin.followup.send(content, ephemeral=ephemeral)
                else:
                    await origin.response.send_message(content, ephemeral=ephemeral)
            else:
                await origin.reply(content)
            return True
        except discord.HTTPException as exc:
            logger.warning("Failed to reply in guild %s: %s", self.guild.id, exc)
            return False

    def find_capable_actor(self, capability: str, *, exclude_ids: Iterable[UserID] = ()) -> AccountSnapshot | None:
        member = discord_utils.find_member_with_capability(
            self.guild,
            capability,
            exclude_ids=[user_id.to_int() for user_id in exclude_ids],
        )
        return AccountSnapshot.from_user(member) if member is not None else None

    def bot_account(self) -> AccountSnapshot | None:
        return AccountSnapshot.from_user(self.guild.me) if self.guild.me is not None else None
