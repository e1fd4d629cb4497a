"""
Persistent storage for audit events.

Rows are written from :meth:`AuditEvent.to_dict`: reasons are stored as a
JSON array and timestamps as UTC ISO-8601 strings so rows sort
chronologically as text.
"""

from __future__ import annotations

import json

import aiosqlite

from vigil.datatypes.verification_datatypes import AuditEvent


class AuditEventRepo:
    """Low-level writes to the ``audit_events`` table."""

    @staticmethod
    async def insert(conn: aiosqlite.Connection, event: AuditEvent) -> int:
        """Append one event and return its row id."""
        record = event.to_dict()
        cursor = await conn.execute(
            """
            INSERT INTO audit_events
                (event_type, guild_id, target_id, target_tag, actor_id, actor_tag, reasons, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record["type"],
                event.guild_id,
                record["member"]["id"],
                record["member"]["tag"],
                record["moderator"]["id"],
                record["moderator"]["tag"],
                json.dumps(record["reasons"], ensure_ascii=False),
                record["timestamp"],
            ),
        )
        return cursor.lastrowid or 0
