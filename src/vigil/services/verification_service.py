"""
Entry points of the verification workflow.

``handle_verify_command`` runs, in order: bot capability check, invoker
capability check, quota consumption, target resolution, evaluation, and
finally opens a :class:`VerificationSession`. Every step that fails replies
to the invoker and stops there.

``screen_new_member`` evaluates an account that just joined, records it as
suspect when needed, and schedules an automatic ban for malicious bots.

Note: quota is consumed before the mention is resolved, so a ``!verify``
without a mention still counts against the moderator.
"""

from __future__ import annotations

import time
from typing import Callable

import discord

from vigil.configuration.verification_settings import VerificationSettings
from vigil.datatypes.account_datatypes import AccountSnapshot, SuspicionVerdict
from vigil.datatypes.verification_datatypes import AuditEventType, QuotaStatus, Rejection, RejectionKind
from vigil.moderation.audit_sink import AuditSink
from vigil.moderation.authorization import AuthorizationGate
from vigil.moderation.heuristics import REASON_MALICIOUS_BOT, HeuristicEvaluator
from vigil.moderation.rate_limiter import VerificationRateLimiter
from vigil.moderation.verification_session import VerificationSession
from vigil.scheduler.auto_ban_scheduler import AutoBanScheduler
from vigil.services.guild_platform import GuildPlatform
from vigil.ui.verification_embed import build_verification_embed
from vigil.ui.verification_view import VerificationView
from vigil.util.logger import get_logger

logger = get_logger("verification_service")

TARGET_MISSING_MESSAGE = "Please mention a user to verify."


def format_window(window_seconds: float) -> str:
    """Short label of a quota window, e.g. ``hour`` or ``30 minutes``."""
    if window_seconds == 3600:
        return "hour"
    if window_seconds % 3600 == 0:
        return f"{int(window_seconds // 3600)} hours"
    return f"{max(1, round(window_seconds / 60))} minutes"


class VerificationService:
    """
    Wires the gate, rate limiter, evaluator, audit sink and auto-ban scheduler
    together for the cogs.
    """

    def __init__(
        self,
        settings: VerificationSettings,
        *,
        audit_sink: AuditSink,
        auto_ban_scheduler: AutoBanScheduler,
        gate: AuthorizationGate | None = None,
        rate_limiter: VerificationRateLimiter | None = None,
        evaluator: HeuristicEvaluator | None = None,
        platform_factory: Callable[[discord.Guild], GuildPlatform] = GuildPlatform,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.audit_sink = audit_sink
        self.auto_ban_scheduler = auto_ban_scheduler
        self.gate = gate or AuthorizationGate()
        self.rate_limiter = rate_limiter or VerificationRateLimiter(
            settings.verification_limit,
            settings.verification_window_seconds,
            admin_identities=settings.admin_identities,
            clock=clock,
        )
        self.evaluator = evaluator or HeuristicEvaluator(settings.authorized_bots)
        self.platform_factory = platform_factory
        self.clock = clock

    def is_verify_command(self, content: str) -> bool:
        return content.startswith(self.settings.command_prefix)

    def quota_rejection(self, status: QuotaStatus) -> Rejection:
        minutes = status.minutes_until_reset(self.clock())
        return Rejection(
            RejectionKind.QUOTA_EXCEEDED,
            f"You have reached the verification limit "
            f"({self.settings.verification_limit}/{format_window(self.settings.verification_window_seconds)}). "
            f"Try again in {minutes} minutes.",
        )

    def check_target(self, message: discord.Message) -> Rejection | None:
        """Reject a command that mentions nobody; only the first mention is verified."""
        if not message.mentions:
            return Rejection(RejectionKind.TARGET_MISSING, TARGET_MISSING_MESSAGE)
        return None

    async def handle_verify_command(self, message: discord.Message) -> VerificationSession | None:
        """
        Run a ``!verify @member`` command end to end.

        Args:
            message: Guild message whose content starts with the command prefix.

        Returns:
            VerificationSession | None: The opened session, or None when the
            command was rejected or the decision could not be presented.
        """
        guild = message.guild
        if guild is None:
            return None
        platform = self.platform_factory(guild)

        rejection = self.gate.check_bot(guild.me) or self.gate.check_invoker(message.author)
        if rejection is not None:
            await platform.reply_to(message, rejection.message)
            return None

        requester = AccountSnapshot.from_user(message.author)
        is_admin = self.rate_limiter.is_admin(requester.user_id, requester.tag, requester.canonical_tag)
        quota = await self.rate_limiter.check_and_consume(requester.user_id, is_admin=is_admin)
        if not quota.allowed:
            await platform.reply_to(message, self.quota_rejection(quota).message)
            return None

        rejection = self.check_target(message)
        if rejection is not None:
            logger.info("[VERIFY] %s ran a verification without mentioning anyone", requester.tag)
            await platform.reply_to(message, rejection.message)
            return None

        target = AccountSnapshot.from_user(message.mentions[0])
        verdict = self.evaluator.evaluate(target)

        session = VerificationSession(
            target=target,
            requester=requester,
            verdict=verdict,
            platform=platform,
            audit_sink=self.audit_sink,
            guild=guild,
            timeout_seconds=self.settings.session_timeout_seconds,
        )
        embed = build_verification_embed(target, verdict, quota, self.settings.verification_limit)
        view = VerificationView(session, self.gate)

        surface = await platform.present_decision_surface(message, embed, view)
        if surface is None:
            view.stop()
            return None

        session.start(surface)
        return session

    async def screen_new_member(self, member: discord.Member) -> SuspicionVerdict:
        """
        Evaluate a member that just joined.

        Suspicious accounts are recorded as ``suspect``; malicious bots are
        additionally scheduled for an automatic ban, whether or not any
        moderator is around.
        """
        account = AccountSnapshot.from_user(member)
        verdict = self.evaluator.evaluate(account)
        if not verdict.is_suspicious:
            logger.debug("[SCREENING] %s joined guild %s with a clean verdict", account.tag, member.guild.id)
            return verdict

        platform = self.platform_factory(member.guild)
        bot_account = platform.bot_account()
        if bot_account is not None:
            await self.audit_sink.record(
                AuditEventType.SUSPECT,
                account,
                bot_account,
                verdict.reasons,
                guild=member.guild,
            )

        if verdict.has_reason(REASON_MALICIOUS_BOT):
            await self.auto_ban_scheduler.schedule(account, platform, guild=member.guild)
        return verdict
