"""
Delayed automatic bans for malicious bots detected at join time.

A task is scheduled once per detection and fires exactly once after its
delay; tasks cannot be cancelled. Each firing bans the bot, records the ban,
and direct-messages one member holding the ban permission. Every failure is
logged and ends that task without retry.
"""

import asyncio
import datetime
import heapq
from dataclasses import dataclass, field

import discord

from vigil.configuration.verification_settings import DEFAULT_AUTO_BAN_DELAY_SECONDS
from vigil.datatypes.account_datatypes import AccountSnapshot
from vigil.datatypes.platform_datatypes import PlatformActions
from vigil.datatypes.verification_datatypes import AuditEventType
from vigil.moderation.audit_sink import AuditSink
from vigil.ui.verification_embed import build_auto_ban_embed
from vigil.util.logger import get_logger

logger = get_logger("auto_ban_scheduler")

AUTO_BAN_REASON = "Malicious bot"


@dataclass
class AutoBanTask:
    """
    Everything needed to execute one automatic ban.

    Attributes:
        target (AccountSnapshot): Bot account to ban.
        platform (PlatformActions): Guild the bot joined.
        guild (discord.Guild | None): Guild used for the audit notification.
        delay_seconds (float): Delay between detection and ban.
        scheduled_at (datetime.datetime): Wall-clock time of the detection.
    """
    target: AccountSnapshot
    platform: PlatformActions
    guild: discord.Guild | None = None
    delay_seconds: float = DEFAULT_AUTO_BAN_DELAY_SECONDS
    scheduled_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )


class AutoBanScheduler:
    """
    Min-heap scheduler executing automatic bans when their delay elapses.

    Attributes:
        heap (list): Min-heap of (run_at, job_id, task) tuples.
        counter (int): Monotonically increasing job id.
        executed (int): Number of tasks that have fired.
        runner_task (asyncio.Task | None): Background task processing the heap.
        condition (asyncio.Condition): Wakes the runner when a task is added.
    """

    def __init__(self, audit_sink: AuditSink | None = None, delay_seconds: float = DEFAULT_AUTO_BAN_DELAY_SECONDS) -> None:
        self.audit_sink = audit_sink
        self.delay_seconds = delay_seconds
        self.heap: list[tuple[float, int, AutoBanTask]] = []
        self.counter: int = 0
        self.executed: int = 0
        self.runner_task: asyncio.Task[None] | None = None
        self.condition: asyncio.Condition = asyncio.Condition()

    def ensure_runner(self) -> None:
        """Create the background runner task if it is not already active."""
        loop = asyncio.get_running_loop()
        if self.runner_task is None or self.runner_task.done():
            self.runner_task = loop.create_task(self.run(), name="vigil-auto-ban-scheduler")

    async def schedule(
        self,
        target: AccountSnapshot,
        platform: PlatformActions,
        *,
        guild: discord.Guild | None = None,
    ) -> AutoBanTask:
        """
        Schedule a ban of ``target`` after the configured delay.

        Args:
            target: Bot account flagged as malicious.
            platform: Guild operations used to ban and notify.
            guild: Guild passed to the audit sink for its modlog notification.

        Returns:
            AutoBanTask: The scheduled task.
        """
        task = AutoBanTask(target=target, platform=platform, guild=guild, delay_seconds=self.delay_seconds)
        run_at = asyncio.get_running_loop().time() + task.delay_seconds

        async with self.condition:
            self.ensure_runner()
            self.counter += 1
            heapq.heappush(self.heap, (run_at, self.counter, task))
            self.condition.notify_all()

        logger.info("[AUTOBAN] Scheduled ban of %s in %.0f seconds", target.tag, task.delay_seconds)
        return task

    async def shutdown(self) -> None:
        """Stop the runner and drop pending tasks. Safe to call multiple times."""
        async with self.condition:
            if self.heap:
                logger.warning("[AUTOBAN] Shutting down with %d pending automatic ban(s)", len(self.heap))
            if self.runner_task:
                self.runner_task.cancel()
            self.heap.clear()
            self.condition.notify_all()

        if self.runner_task:
            try:
                await self.runner_task
            except asyncio.CancelledError:
                pass
            finally:
                self.runner_task = None

    async def run(self) -> None:
        """Background loop popping and executing tasks whose delay has elapsed."""
        loop = asyncio.get_running_loop()
        while True:
            async with self.condition:
                if not self.heap:
                    await self.condition.wait()
                    continue

                run_at, _, _ = self.heap[0]
                delay = run_at - loop.time()

                if delay > 0:
                    try:
                        await asyncio.wait_for(self.condition.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass
                    continue

                _, _, task = heapq.heappop(self.heap)

            try:
                await self.execute(task)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error("[AUTOBAN] Unexpected failure banning %s: %s", task.target.tag, exc)

    async def execute(self, task: AutoBanTask) -> bool:
        """
        Ban the target, record the ban and notify one moderator.

        Returns:
            bool: True if the ban itself succeeded (notification is best effort).
        """
        self.executed += 1
        target = task.target

        if not await task.platform.ban_account(target.user_id, AUTO_BAN_REASON):
            logger.error("[AUTOBAN] Automatic ban of %s (%s) failed", target.tag, target.user_id)
            return False
        logger.info("[AUTOBAN] Banned malicious bot %s (%s)", target.tag, target.user_id)

        bot_account = task.platform.bot_account()
        if self.audit_sink is not None and bot_account is not None:
            await self.audit_sink.record(AuditEventType.BAN, target, bot_account, (AUTO_BAN_REASON,), guild=task.guild)

        moderator = task.platform.find_capable_actor("ban_members", exclude_ids=[target.user_id])
        if moderator is None:
            logger.warning("[AUTOBAN] No member with ban permission to notify about %s", target.tag)
            return True

        embed = build_auto_ban_embed(target, task.delay_seconds, AUTO_BAN_REASON)
        if not await task.platform.send_direct_message(moderator.user_id, embed):
            logger.warning("[AUTOBAN] Could not notify %s about the ban of %s", moderator.tag, target.tag)
        return True
