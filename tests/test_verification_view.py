from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from vigil.datatypes.account_datatypes import SuspicionVerdict
from vigil.datatypes.verification_datatypes import ControlAction, ControlOutcome, SessionState
from vigil.moderation.authorization import CONTROL_DENIED_MESSAGE, AuthorizationGate
from vigil.moderation.verification_session import VerificationSession
from vigil.ui.verification_view import VerificationView


class FakeResponse:
    def __init__(self):
        self.sent = []
        self.deferred = False

    async def send_message(self, content, *, ephemeral=False):
        self.sent.append((content, ephemeral))

    async def defer(self, *, ephemeral=False):
        self.deferred = True


def make_interaction(user):
    return SimpleNamespace(user=user, response=FakeResponse(), followup=SimpleNamespace(send=AsyncMock()))


@pytest.fixture
def session(make_account, fake_platform, audit_sink_mock):
    return VerificationSession(
        target=make_account(user_id=500, username="newcomer"),
        requester=make_account(user_id=600, username="mod"),
        verdict=SuspicionVerdict(("no custom avatar",)),
        platform=fake_platform,
        audit_sink=audit_sink_mock,
    )


@pytest.mark.asyncio
async def test_view_has_ban_and_pardon_buttons(session):
    view = VerificationView(session, AuthorizationGate())

    assert view.timeout is None
    assert [child.custom_id for child in view.children] == ["ban_500", "pardon_500"]
    assert [child.label for child in view.children] == ["Ban", "Pardon"]


@pytest.mark.asyncio
async def test_member_without_ban_permission_is_refused(session, fake_user, fake_platform):
    view = VerificationView(session, AuthorizationGate())
    interaction = make_interaction(fake_user(user_id=601, permissions={"kick_members": True}))

    await view.handle_control(interaction, "ban_500")

    assert interaction.response.sent == [(CONTROL_DENIED_MESSAGE, True)]
    assert fake_platform.bans == []
    assert session.state is SessionState.AWAITING_DECISION


@pytest.mark.asyncio
async def test_authorized_click_reaches_session(session, fake_user, fake_platform):
    view = VerificationView(session, AuthorizationGate())
    interaction = make_interaction(fake_user(user_id=602, name="boss", permissions={"ban_members": True}))

    await view.handle_control(interaction, "ban_500")

    assert interaction.response.deferred is True
    assert session.state is SessionState.BANNED
    interaction.followup.send.assert_awaited_once_with("newcomer has been banned.", ephemeral=True)


@pytest.mark.asyncio
async def test_unknown_control_id_is_reported(session, fake_user):
    view = VerificationView(session, AuthorizationGate())
    interaction = make_interaction(fake_user(permissions={"ban_members": True}))

    await view.handle_control(interaction, "kick_500")

    assert interaction.response.sent == [("Unknown action.", True)]


@pytest.mark.asyncio
async def test_button_callback_forwards_its_custom_id(session, fake_user):
    view = VerificationView(session, AuthorizationGate())
    view.handle_control = AsyncMock()
    pardon = view.children[1]
    interaction = make_interaction(fake_user(permissions={"ban_members": True}))

    await pardon.callback(interaction)

    view.handle_control.assert_awaited_once_with(interaction, "pardon_500")


@pytest.mark.asyncio
async def test_outcome_message_is_sent_ephemerally(session, fake_user, monkeypatch):
    activate = AsyncMock(return_value=ControlOutcome(False, "This verification is already closed.", SessionState.EXPIRED))
    monkeypatch.setattr(session, "activate", activate)
    view = VerificationView(session, AuthorizationGate())
    interaction = make_interaction(fake_user(permissions={"ban_members": True}))

    await view.handle_control(interaction, "pardon_500")

    assert activate.await_args.args[0] is ControlAction.PARDON
    interaction.followup.send.assert_awaited_once_with("This verification is already closed.", ephemeral=True)
