"""
Audit trail for moderation events.

Every event is first written to the SQLite audit table; only then is a
best-effort notification posted to the guild's moderation-log channel. A
missing or unreachable channel never prevents persistence.
"""

from __future__ import annotations

from typing import Iterable

import discord

from vigil.configuration.verification_settings import DEFAULT_MODLOG_CHANNEL
from vigil.database.db_connection import ConnectionManager
from vigil.datatypes.account_datatypes import AccountSnapshot
from vigil.datatypes.verification_datatypes import AuditEvent, AuditEventType
from vigil.repositories.audit_event_repo import AuditEventRepo
from vigil.ui.verification_embed import build_audit_embed
from vigil.util.discord_utils import find_text_channel
from vigil.util.logger import get_logger

logger = get_logger("audit_sink")


class AuditSink:
    """
    Records verify/ban/suspect events and announces them in the modlog channel.

    Attributes:
        connection (ConnectionManager): Open database connection holder.
        modlog_channel (str): Name of the text channel receiving notifications.
    """

    def __init__(self, connection: ConnectionManager, modlog_channel: str = DEFAULT_MODLOG_CHANNEL) -> None:
        self.connection = connection
        self.modlog_channel = modlog_channel

    async def record(
        self,
        event_type: AuditEventType,
        target: AccountSnapshot,
        actor: AccountSnapshot,
        reasons: Iterable[str] = (),
        *,
        guild: discord.Guild | None = None,
    ) -> AuditEvent:
        """
        Persist an audit event, then try to announce it.

        Args:
            event_type: Kind of event.
            target: Account the event is about.
            actor: Moderator (or the bot) responsible for the event.
            reasons: Suspicion reasons to attach, possibly none.
            guild: Guild whose modlog channel should be notified.

        Returns:
            AuditEvent: The event as it was recorded.
        """
        event = AuditEvent(
            event_type=event_type,
            target_id=target.user_id,
            target_tag=target.tag,
            actor_id=actor.user_id,
            actor_tag=actor.tag,
            reasons=tuple(reasons),
            guild_id=guild.id if guild is not None else None,
        )

        await self.persist(event)
        if guild is not None:
            await self.notify(guild, event, target, actor)
        return event

    async def persist(self, event: AuditEvent) -> bool:
        try:
            async with self.connection.transaction() as conn:
                await AuditEventRepo.insert(conn, event)
        except Exception as exc:
            logger.error(
                "[AUDIT] Failed to persist %s event for %s: %s",
                event.event_type.value,
                event.target_id,
                exc,
            )
            return False

        logger.info(
            "[AUDIT] %s: target=%s actor=%s reasons=%s",
            event.event_type.value,
            event.target_tag,
            event.actor_tag,
            list(event.reasons),
        )
        return True

    async def notify(
        self,
        guild: discord.Guild,
        event: AuditEvent,
        target: AccountSnapshot,
        actor: AccountSnapshot,
    ) -> bool:
        channel = find_text_channel(guild, self.modlog_channel)
        if channel is None:
            logger.debug("[AUDIT] No #%s channel in guild %s; skipping notification", self.modlog_channel, guild.id)
            return False

        try:
            await channel.send(embed=build_audit_embed(event.event_type, target, actor, event.reasons))
            return True
        except discord.HTTPException as exc:
            logger.warning("[AUDIT] Could not post %s notification in guild %s: %s", event.event_type.value, guild.id, exc)
            return False

