"""Tests for the event and verification listener cogs."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from vigil.bot.cogs import events_listener, verification_listener
from vigil.datatypes.account_datatypes import SuspicionVerdict


class FakeStatus:
    online = "online"


class FakeActivityType:
    watching = "watching"


class FakeActivity:
    def __init__(self, *, type, name):
        self.type = type
        self.name = name


@pytest.fixture(autouse=True)
def patch_discord(monkeypatch):
    monkeypatch.setattr(events_listener.discord, "Status", FakeStatus, raising=False)
    monkeypatch.setattr(events_listener.discord, "ActivityType", FakeActivityType, raising=False)
    monkeypatch.setattr(events_listener.discord, "Activity", FakeActivity, raising=False)
    yield


@pytest.fixture
def fake_bot():
    return SimpleNamespace(
        user=SimpleNamespace(id=999, display_name="Vigil"),
        change_presence=AsyncMock(),
        add_cog=MagicMock(),
    )


@pytest.fixture
def service():
    return SimpleNamespace(
        screen_new_member=AsyncMock(return_value=SuspicionVerdict()),
        handle_verify_command=AsyncMock(),
        is_verify_command=lambda content: content.startswith("!verify"),
    )


def make_message(*, guild=True, bot=False, content="!verify <@1>"):
    return SimpleNamespace(
        guild=SimpleNamespace(id=1) if guild else None,
        author=SimpleNamespace(id=5, bot=bot),
        channel=SimpleNamespace(id=2, name="general"),
        content=content,
    )


@pytest.mark.asyncio
async def test_on_ready_sets_watching_presence(fake_bot, service):
    cog = events_listener.EventsListenerCog(fake_bot, service)

    await cog.on_ready()

    fake_bot.change_presence.assert_awaited_once()
    kwargs = fake_bot.change_presence.await_args.kwargs
    assert kwargs["status"] == FakeStatus.online
    assert kwargs["activity"].type == FakeActivityType.watching
    assert kwargs["activity"].name == "new members"


@pytest.mark.asyncio
async def test_on_ready_without_user_skips_presence(fake_bot, service):
    fake_bot.user = None
    cog = events_listener.EventsListenerCog(fake_bot, service)

    await cog.on_ready()

    fake_bot.change_presence.assert_not_awaited()


@pytest.mark.asyncio
async def test_member_join_is_screened(fake_bot, service):
    cog = events_listener.EventsListenerCog(fake_bot, service)
    member = SimpleNamespace(id=7, guild=SimpleNamespace(id=1))
    service.screen_new_member.return_value = SuspicionVerdict(("no custom avatar",))

    await cog.on_member_join(member)

    service.screen_new_member.assert_awaited_once_with(member)


@pytest.mark.asyncio
async def test_member_join_errors_are_contained(fake_bot, service):
    cog = events_listener.EventsListenerCog(fake_bot, service)
    service.screen_new_member.side_effect = RuntimeError("boom")

    await cog.on_member_join(SimpleNamespace(id=7, guild=SimpleNamespace(id=1)))


@pytest.mark.asyncio
async def test_verify_message_is_routed(fake_bot, service):
    cog = verification_listener.VerificationListenerCog(fake_bot, service)
    message = make_message()

    await cog.on_message(message)

    service.handle_verify_command.assert_awaited_once_with(message)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "message",
    [
        make_message(guild=False),
        make_message(bot=True),
        make_message(content="hello there"),
        make_message(content=""),
    ],
)
async def test_other_messages_are_ignored(fake_bot, service, message):
    cog = verification_listener.VerificationListenerCog(fake_bot, service)

    await cog.on_message(message)

    service.handle_verify_command.assert_not_awaited()


@pytest.mark.asyncio
async def test_verify_errors_are_contained(fake_bot, service):
    service.handle_verify_command.side_effect = RuntimeError("boom")
    cog = verification_listener.VerificationListenerCog(fake_bot, service)

    await cog.on_message(make_message())


def test_setup_registers_cogs(fake_bot, service):
    events_listener.setup(fake_bot, service)
    verification_listener.setup(fake_bot, service)

    registered = [call.args[0] for call in fake_bot.add_cog.call_args_list]
    assert isinstance(registered[0], events_listener.EventsListenerCog)
    assert isinstance(registered[1], verification_listener.VerificationListenerCog)
    assert all(cog.verification_service is service for cog in registered)
