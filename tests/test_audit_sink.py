"""Tests for audit persistence and modlog notifications."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from vigil.database.db_connection import ConnectionManager
from vigil.datatypes.verification_datatypes import AuditEventType
from vigil.moderation.audit_sink import AuditSink


def http_error():
    return discord.HTTPException(SimpleNamespace(status=500, reason="Server Error"), "boom")


async def stored_rows(manager):
    cursor = await manager.connection.execute(
        "SELECT event_type, guild_id, target_id, target_tag, actor_id, actor_tag, reasons, created_at "
        "FROM audit_events ORDER BY id"
    )
    return await cursor.fetchall()


@pytest.fixture
def target(make_account):
    return make_account(user_id=10, username="John123", has_avatar=False)


@pytest.fixture
def actor(make_account):
    return make_account(user_id=20, username="mod")


@pytest.mark.asyncio
async def test_record_persists_event(open_connection, target, actor):
    sink = AuditSink(open_connection)

    await sink.record(AuditEventType.BAN, target, actor, ["generic username pattern"])

    rows = await stored_rows(open_connection)
    assert len(rows) == 1
    stored = rows[0]
    assert stored["event_type"] == "ban"
    assert stored["guild_id"] is None
    assert stored["target_id"] == "10"
    assert stored["actor_tag"] == "mod"
    assert json.loads(stored["reasons"]) == ["generic username pattern"]


@pytest.mark.asyncio
async def test_stored_row_matches_event_record(open_connection, target, actor):
    sink = AuditSink(open_connection)

    event = await sink.record(AuditEventType.SUSPECT, target, actor, ["no custom avatar", "généric"])

    record = event.to_dict()
    stored = (await stored_rows(open_connection))[0]
    assert stored["event_type"] == record["type"]
    assert stored["target_id"] == record["member"]["id"]
    assert stored["target_tag"] == record["member"]["tag"]
    assert stored["actor_id"] == record["moderator"]["id"]
    assert stored["actor_tag"] == record["moderator"]["tag"]
    assert stored["reasons"] == '["no custom avatar", "généric"]'
    assert stored["created_at"] == record["timestamp"]


@pytest.mark.asyncio
async def test_events_are_appended_in_order(open_connection, target, actor):
    sink = AuditSink(open_connection)

    await sink.record(AuditEventType.SUSPECT, target, actor, ["no custom avatar"])
    await sink.record(AuditEventType.VERIFY, target, actor)
    await sink.record(AuditEventType.BAN, target, actor)

    rows = await stored_rows(open_connection)
    assert [row["event_type"] for row in rows] == ["suspect", "verify", "ban"]
    assert json.loads(rows[1]["reasons"]) == []


@pytest.mark.asyncio
async def test_notification_goes_to_modlog_channel(open_connection, target, actor):
    modlog = SimpleNamespace(name="modlog", send=AsyncMock())
    general = SimpleNamespace(name="general", send=AsyncMock())
    guild = SimpleNamespace(id=1, text_channels=[general, modlog])
    sink = AuditSink(open_connection, "modlog")

    event = await sink.record(AuditEventType.BAN, target, actor, ["no custom avatar"], guild=guild)

    assert event.guild_id == 1
    assert (await stored_rows(open_connection))[0]["guild_id"] == 1
    general.send.assert_not_awaited()
    modlog.send.assert_awaited_once()
    embed = modlog.send.await_args.kwargs["embed"]
    assert embed.description == "John123 was banned by mod"


@pytest.mark.asyncio
async def test_missing_modlog_channel_still_persists(open_connection, target, actor):
    guild = SimpleNamespace(id=1, text_channels=[])
    sink = AuditSink(open_connection)

    await sink.record(AuditEventType.SUSPECT, target, actor, guild=guild)

    assert len(await stored_rows(open_connection)) == 1


@pytest.mark.asyncio
async def test_notify_failure_is_reported(open_connection, target, actor):
    modlog = SimpleNamespace(name="modlog", send=AsyncMock(side_effect=http_error()))
    guild = SimpleNamespace(id=1, text_channels=[modlog])
    sink = AuditSink(open_connection)

    event = await sink.record(AuditEventType.VERIFY, target, actor, guild=guild)

    assert await sink.notify(guild, event, target, actor) is False
    assert len(await stored_rows(open_connection)) == 1


@pytest.mark.asyncio
async def test_persist_failure_does_not_raise(target, actor):
    sink = AuditSink(ConnectionManager())

    event = await sink.record(AuditEventType.VERIFY, target, actor)

    assert event.event_type is AuditEventType.VERIFY
    assert await sink.persist(event) is False
