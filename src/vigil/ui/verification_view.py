"""
Ban/pardon controls attached to a verification decision.

The view itself never times out: expiry is owned by the
:class:`~vigil.moderation.verification_session.VerificationSession`, which
disables and stops the view when it closes.
"""

from __future__ import annotations

import discord

from vigil.datatypes.account_datatypes import AccountSnapshot
from vigil.datatypes.verification_datatypes import ControlAction, build_control_id, parse_control_id
from vigil.moderation.authorization import CONTROL_DENIED_MESSAGE, AuthorizationGate
from vigil.moderation.verification_session import VerificationSession
from vigil.util.logger import get_logger

logger = get_logger("verification_view")

CONTROL_STYLES = {
    ControlAction.BAN: ("Ban", discord.ButtonStyle.danger),
    ControlAction.PARDON: ("Pardon", discord.ButtonStyle.success),
}


class DecisionButton(discord.ui.Button):
    """A ban or pardon button whose custom id encodes the target."""

    def __init__(self, action: ControlAction, session: VerificationSession):
        label, style = CONTROL_STYLES[action]
        super().__init__(
            label=label,
            style=style,
            custom_id=build_control_id(action, session.target.user_id),
        )
        self.action = action

    async def callback(self, interaction: discord.Interaction):
        await self.view.handle_control(interaction, self.custom_id)


class VerificationView(discord.ui.View):
    """Decision surface controls for one verification session."""

    def __init__(self, session: VerificationSession, gate: AuthorizationGate):
        super().__init__(timeout=None)
        self.session = session
        self.gate = gate
        for action in (ControlAction.BAN, ControlAction.PARDON):
            self.add_item(DecisionButton(action, session))

    async def handle_control(self, interaction: discord.Interaction, control_id: str | None) -> None:
        """
        Authorize the clicking member and forward the click to the session.

        Every reply is ephemeral, so only the clicking member sees it.
        """
        actor = interaction.user
        if actor is None or not self.gate.can_activate_controls(actor):
            logger.info(
                "[VERIFY] Rejected control %s from %s: missing ban permission",
                control_id,
                getattr(actor, "id", None),
            )
            await interaction.response.send_message(CONTROL_DENIED_MESSAGE, ephemeral=True)
            return

        parsed = parse_control_id(control_id or "")
        if parsed is None:
            logger.warning("[VERIFY] Unknown control id %r on session %s", control_id, self.session.session_id)
            await interaction.response.send_message("Unknown action.", ephemeral=True)
            return

        action, target_id = parsed
        # Interactions must be acknowledged within 3 seconds
        await interaction.response.defer(ephemeral=True)
        outcome = await self.session.activate(action, AccountSnapshot.from_user(actor), target_id=target_id)
        await interaction.followup.send(outcome.message, ephemeral=True)
