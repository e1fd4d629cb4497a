"""
discord_utils.py
================

Low-level Discord helpers for Vigil.

Stateless wrappers around permission checks, member/channel lookups and the
platform calls that can fail (ban, DM, message edit). Failures are logged and
reported as ``False`` so callers decide how to surface them.
"""

from typing import Iterable, Union

import discord

from vigil.util.logger import get_logger

logger = get_logger("discord_utils")


def has_capabilities(member: Union[discord.Member, discord.User, None], *capabilities: str) -> bool:
    """
    Check that a guild member holds every named guild permission.

    Args:
        member: Member to inspect; plain users and ``None`` hold no capabilities.
        *capabilities: Permission flag names such as ``"ban_members"``.

    Returns:
        bool: True if all capabilities are present.
    """
    permissions = getattr(member, "guild_permissions", None)
    if permissions is None:
        return False
    return all(getattr(permissions, capability, False) for capability in capabilities)


def missing_capabilities(member: Union[discord.Member, discord.User, None], capabilities: Iterable[str]) -> list[str]:
    """Return the subset of ``capabilities`` the member does not hold."""
    return [capability for capability in capabilities if not has_capabilities(member, capability)]


def find_text_channel(guild: discord.Guild, name: str) -> discord.TextChannel | None:
    """Return the first text channel called ``name``, or None."""
    return discord.utils.get(guild.text_channels, name=name)


def find_member_with_capability(
    guild: discord.Guild,
    capability: str,
    *,
    exclude_ids: Iterable[int] = (),
) -> discord.Member | None:
    """
    Find a human member holding ``capability``.

    Bots and ``exclude_ids`` are skipped. Only the member cache is searched,
    so this requires the members intent.
    """
    excluded = set(exclude_ids)
    for member in guild.members:
        if member.bot or member.id in excluded:
            continue
        if has_capabilities(member, capability):
            return member
    return None


async def safe_ban(guild: discord.Guild, user_id: int, reason: str) -> bool:
    """
    Ban a user by id.

    Returns:
        bool: True if Discord accepted the ban, False otherwise.
    """
    try:
        await guild.ban(discord.Object(id=user_id), reason=reason)
        return True
    except discord.Forbidden:
        logger.warning("Missing permission to ban user %s in guild %s", user_id, guild.id)
    except discord.NotFound:
        logger.warning("Could not ban user %s in guild %s: user not found", user_id, guild.id)
    except discord.HTTPException as exc:
        logger.error("Failed to ban user %s in guild %s: %s", user_id, guild.id, exc)
    return False


async def safe_send_dm(user: Union[discord.Member, discord.User], embed: discord.Embed) -> bool:
    """Send an embed by direct message; returns False when DMs are closed or the call fails."""
    try:
        await user.send(embed=embed)
        return True
    except discord.Forbidden:
        logger.info("Cannot DM user %s: DMs are closed", user.id)
    except discord.HTTPException as exc:
        logger.warning("Failed to DM user %s: %s", user.id, exc)
    return False


async def safe_edit_view(message: discord.Message, view: discord.ui.View) -> bool:
    """Re-render the components of ``message`` from ``view``; returns False on failure."""
    try:
        await message.edit(view=view)
        return True
    except discord.NotFound:
        logger.debug("Message %s vanished before its controls could be updated", message.id)
    except discord.HTTPException as exc:
        logger.warning("Failed to update controls on message %s: %s", message.id, exc)
    return False
