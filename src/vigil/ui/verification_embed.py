"""
Embed builders for verification decisions, audit notifications and
automatic-ban direct messages.
"""

import datetime

import discord

from vigil.datatypes.account_datatypes import AccountSnapshot, SuspicionVerdict
from vigil.datatypes.verification_datatypes import AuditEventType, QuotaStatus

# Title emoji and color of each audit notification
AUDIT_STYLES = {
    AuditEventType.VERIFY: ("✅ Account verified", discord.Color.green()),
    AuditEventType.SUSPECT: ("⚠️ Suspicious account", discord.Color.orange()),
    AuditEventType.BAN: ("❌ Member banned", discord.Color.red()),
}


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def format_remaining(status: QuotaStatus, limit: int) -> str:
    """``∞`` for exempt moderators, ``remaining/limit`` otherwise."""
    if status.is_unlimited:
        return "∞"
    return f"{int(status.remaining)}/{limit}"


def build_verification_embed(
    target: AccountSnapshot,
    verdict: SuspicionVerdict,
    quota: QuotaStatus,
    limit: int,
) -> discord.Embed:
    """
    Build the decision surface shown under a ``!verify`` command.

    Args:
        target: Account being verified.
        verdict: Suspicion verdict of the target.
        quota: Quota status of the requesting moderator after this verification.
        limit: Configured verifications per window, for the ``r/limit`` display.

    Returns:
        discord.Embed: Red embed listing the reasons when suspicious, green otherwise.
    """
    embed = discord.Embed(
        title=f"Verification of {target.tag}",
        description="⚠️ Suspicious account detected" if verdict.is_suspicious else "✅ Account verified",
        color=discord.Color.red() if verdict.is_suspicious else discord.Color.green(),
        timestamp=_now(),
    )
    embed.add_field(name="Member", value=f"{target.tag} ({target.user_id})", inline=True)
    embed.add_field(
        name="Account created",
        value=f"<t:{int(target.created_at.timestamp())}:R>",
        inline=True,
    )
    embed.add_field(name="Verifications left", value=format_remaining(quota, limit), inline=True)

    if verdict.is_suspicious:
        embed.add_field(name="Reasons", value="\n".join(verdict.reasons), inline=False)

    if target.avatar_url:
        embed.set_thumbnail(url=target.avatar_url)
    return embed


def build_audit_embed(
    event_type: AuditEventType,
    target: AccountSnapshot,
    actor: AccountSnapshot,
    reasons: tuple[str, ...] = (),
) -> discord.Embed:
    """Build the modlog notification for one audit event."""
    title, color = AUDIT_STYLES[event_type]
    if event_type is AuditEventType.VERIFY:
        description = f"{target.tag} was verified by {actor.tag}"
    elif event_type is AuditEventType.SUSPECT:
        description = f"{target.tag} was flagged as suspicious"
    else:
        description = f"{target.tag} was banned by {actor.tag}"

    embed = discord.Embed(title=title, description=description, color=color, timestamp=_now())
    embed.add_field(name="Member", value=f"{target.tag} ({target.user_id})", inline=True)
    embed.add_field(name="Moderator", value=actor.tag, inline=True)
    if reasons:
        embed.add_field(name="Reasons", value="\n".join(reasons), inline=False)
    if target.avatar_url:
        embed.set_thumbnail(url=target.avatar_url)
    return embed


def build_auto_ban_embed(target: AccountSnapshot, delay_seconds: float, reason: str) -> discord.Embed:
    """Build the direct message telling a moderator a bot was banned automatically."""
    embed = discord.Embed(
        title="⚠️ Malicious bot banned",
        description=(
            f"The bot {target.tag} was automatically banned "
            f"after a delay of {delay_seconds:g} seconds."
        ),
        color=discord.Color.red(),
        timestamp=_now(),
    )
    embed.add_field(name="ID", value=str(target.user_id), inline=True)
    embed.add_field(name="Reason", value=reason, inline=True)
    return embed
