"""
Verification session: the ban/pardon decision opened by one ``!verify``.

State machine::

    AWAITING_DECISION --ban (succeeded)--> BANNED
    AWAITING_DECISION --pardon-----------> PARDONED
    AWAITING_DECISION --timeout----------> EXPIRED

The transition and the disabling of the controls run under the session's own
lock, so two near-simultaneous clicks produce at most one ban. A failed ban
keeps the session open for another attempt. The timeout always fires; when
the session is already terminal it only re-disables the controls, which is a
no-op.
"""

from __future__ import annotations

import asyncio
import datetime
import uuid

import discord

from vigil.configuration.verification_settings import DEFAULT_SESSION_TIMEOUT_SECONDS
from vigil.datatypes.account_datatypes import AccountSnapshot, SuspicionVerdict
from vigil.datatypes.discord_datatypes import UserID
from vigil.datatypes.platform_datatypes import DecisionSurface, PlatformActions
from vigil.datatypes.verification_datatypes import (
    AuditEventType,
    ControlAction,
    ControlOutcome,
    SessionState,
)
from vigil.moderation.audit_sink import AuditSink
from vigil.util.logger import get_logger

logger = get_logger("verification_session")

SESSION_BAN_REASON = "Suspicious account"
BAN_FAILED_MESSAGE = "Error while banning."
SESSION_CLOSED_MESSAGE = "This verification is already closed."
WRONG_TARGET_MESSAGE = "These buttons do not belong to this verification."


class VerificationSession:
    """
    One ban/pardon decision about a single target.

    Attributes:
        session_id (str): Random identifier used in logs.
        target (AccountSnapshot): Account under verification.
        requester (AccountSnapshot): Moderator who ran the command.
        verdict (SuspicionVerdict): Verdict computed when the session opened.
        state (SessionState): Current state; terminal states never change.
        surface (DecisionSurface | None): Presented controls, once attached.
    """

    def __init__(
        self,
        *,
        target: AccountSnapshot,
        requester: AccountSnapshot,
        verdict: SuspicionVerdict,
        platform: PlatformActions,
        audit_sink: AuditSink,
        guild: discord.Guild | None = None,
        timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
    ) -> None:
        self.session_id = uuid.uuid4().hex[:12]
        self.target = target
        self.requester = requester
        self.verdict = verdict
        self.platform = platform
        self.audit_sink = audit_sink
        self.guild = guild
        self.timeout_seconds = timeout_seconds
        self.created_at = datetime.datetime.now(datetime.timezone.utc)
        self.state = SessionState.AWAITING_DECISION
        self.surface: DecisionSurface | None = None
        self.timeout_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()
        self._controls_disabled = False

    @property
    def reasons(self) -> tuple[str, ...]:
        return self.verdict.reasons

    def start(self, surface: DecisionSurface) -> asyncio.Task[None]:
        """Attach the presented controls and start the expiry timer."""
        self.surface = surface
        if self.timeout_task is None:
            self.timeout_task = asyncio.get_running_loop().create_task(
                self._expire_after_timeout(),
                name=f"vigil-verification-timeout-{self.session_id}",
            )
        logger.info(
            "[VERIFY] Session %s opened by %s for %s (%d reason(s))",
            self.session_id,
            self.requester.tag,
            self.target.tag,
            len(self.reasons),
        )
        return self.timeout_task

    async def activate(
        self,
        action: ControlAction,
        actor: AccountSnapshot,
        target_id: UserID | None = None,
    ) -> ControlOutcome:
        """
        Apply a ban or pardon click from an already authorized actor.

        Args:
            action: Control that was pressed.
            actor: Member who pressed it.
            target_id: Target encoded in the control id, checked against the session.

        Returns:
            ControlOutcome: Whether the click changed the session and the
            message to show the actor.
        """
        if target_id is not None and target_id != self.target.user_id:
            return ControlOutcome(accepted=False, message=WRONG_TARGET_MESSAGE, state=self.state)

        async with self._lock:
            if self.state.is_terminal:
                logger.debug(
                    "[VERIFY] Ignoring %s on closed session %s (%s)",
                    action.value,
                    self.session_id,
                    self.state.value,
                )
                return ControlOutcome(accepted=False, message=SESSION_CLOSED_MESSAGE, state=self.state)

            if action is ControlAction.BAN:
                if not await self.platform.ban_account(self.target.user_id, SESSION_BAN_REASON):
                    logger.warning("[VERIFY] Ban of %s failed in session %s; session stays open", self.target.tag, self.session_id)
                    return ControlOutcome(accepted=False, message=BAN_FAILED_MESSAGE, state=self.state)
                self.state = SessionState.BANNED
                await self.audit_sink.record(AuditEventType.BAN, self.target, actor, self.reasons, guild=self.guild)
                message = f"{self.target.tag} has been banned."
            else:
                self.state = SessionState.PARDONED
                await self.audit_sink.record(AuditEventType.VERIFY, self.target, actor, guild=self.guild)
                message = f"{self.target.tag} has been pardoned."

            logger.info("[VERIFY] Session %s closed as %s by %s", self.session_id, self.state.value, actor.tag)
            await self._disable_controls()
            return ControlOutcome(accepted=True, message=message, state=self.state)

    async def expire(self) -> bool:
        """
        Close the session without a decision.

        Returns:
            bool: True if this call moved the session to EXPIRED.
        """
        async with self._lock:
            expired = False
            if self.state is SessionState.AWAITING_DECISION:
                self.state = SessionState.EXPIRED
                expired = True
                logger.info("[VERIFY] Session %s for %s expired without a decision", self.session_id, self.target.tag)
            await self._disable_controls()
            return expired

    async def _expire_after_timeout(self) -> None:
        await asyncio.sleep(self.timeout_seconds)
        await self.expire()

    async def _disable_controls(self) -> None:
        if self._controls_disabled or self.surface is None:
            return
        self._controls_disabled = True
        try:
            await self.platform.disable_controls(self.surface)
        except Exception as exc:
            logger.warning("[VERIFY] Could not disable controls of session %s: %s", self.session_id, exc)
