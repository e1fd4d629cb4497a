"""
Capability checks guarding the verification workflow.

Three checks exist, run in this order for a verify command:

1. the bot itself must be able to see the channel, talk, and ban;
2. the invoking human must at least be able to kick members;
3. anyone pressing a ban/pardon control must be able to ban members.

A failed check returns a :class:`Rejection` carrying the reply to show; no
state anywhere is touched.
"""

from __future__ import annotations

from typing import Union

import discord

from vigil.datatypes.verification_datatypes import Rejection, RejectionKind
from vigil.util.discord_utils import has_capabilities, missing_capabilities
from vigil.util.logger import get_logger

logger = get_logger("authorization")

BOT_CAPABILITIES: tuple[str, ...] = ("view_channel", "send_messages", "ban_members")
INVOKER_CAPABILITIES: tuple[str, ...] = ("kick_members",)
CONTROL_CAPABILITIES: tuple[str, ...] = ("ban_members",)

BOT_CAPABILITY_MESSAGE = (
    "The bot does not have the required permissions. "
    "Please check its permissions in the server settings."
)
INVOKER_DENIED_MESSAGE = "You do not have permission to use this command."
CONTROL_DENIED_MESSAGE = "You do not have permission to use these buttons."


class AuthorizationGate:
    """Stateless capability checks for bots, invokers and control clickers."""

    def check_bot(self, bot_member: Union[discord.Member, None]) -> Rejection | None:
        missing = missing_capabilities(bot_member, BOT_CAPABILITIES)
        if missing:
            logger.warning("[AUTHORIZATION] Bot is missing capabilities: %s", ", ".join(missing))
            return Rejection(RejectionKind.CAPABILITY_DEFICIENCY, BOT_CAPABILITY_MESSAGE)
        return None

    def check_invoker(self, invoker: Union[discord.Member, discord.User, None]) -> Rejection | None:
        if not has_capabilities(invoker, *INVOKER_CAPABILITIES):
            logger.info("[AUTHORIZATION] %s lacks permission to run verifications", getattr(invoker, "id", None))
            return Rejection(RejectionKind.AUTHORIZATION_DENIED, INVOKER_DENIED_MESSAGE)
        return None

    def can_activate_controls(self, actor: Union[discord.Member, discord.User, None]) -> bool:
        return has_capabilities(actor, *CONTROL_CAPABILITIES)
