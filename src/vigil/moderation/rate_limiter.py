"""
Per-moderator verification quota with a fixed (not sliding) window.

Quota entries live in process memory only and are never swept: an entry whose
window has elapsed is simply re-initialized the next time its moderator runs a
verification. The check-and-increment for one moderator runs under that
moderator's own ``asyncio.Lock`` so concurrent commands cannot both consume
the same stale count.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable

from vigil.configuration.verification_settings import (
    DEFAULT_VERIFICATION_LIMIT,
    DEFAULT_VERIFICATION_WINDOW_SECONDS,
)
from vigil.datatypes.discord_datatypes import UserID
from vigil.datatypes.verification_datatypes import UNLIMITED, QuotaStatus
from vigil.util.logger import get_logger

logger = get_logger("rate_limiter")


@dataclass(slots=True)
class ModeratorQuota:
    """Verification count of one moderator inside the current window."""
    count: int
    window_reset_at: float


class VerificationRateLimiter:
    """Tracks how many verifications each moderator ran in the current window.

    Attributes:
        limit (int): Verifications allowed per window.
        window_seconds (float): Window length in seconds.
        admin_identities (frozenset[str]): Ids or tags exempt from the quota.
        quotas (Dict[UserID, ModeratorQuota]): Live quota entries per moderator.
    """

    def __init__(
        self,
        limit: int = DEFAULT_VERIFICATION_LIMIT,
        window_seconds: float = DEFAULT_VERIFICATION_WINDOW_SECONDS,
        *,
        admin_identities: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.admin_identities: frozenset[str] = frozenset(admin_identities)
        self.clock = clock
        self.quotas: Dict[UserID, ModeratorQuota] = {}
        self._locks: Dict[UserID, asyncio.Lock] = {}

    def is_admin(self, moderator_id: UserID, *moderator_tags: str) -> bool:
        """Return True when the moderator is listed by id or by any of its tags."""
        if str(moderator_id) in self.admin_identities:
            return True
        return any(tag in self.admin_identities for tag in moderator_tags)

    def _lock_for(self, moderator_id: UserID) -> asyncio.Lock:
        lock = self._locks.get(moderator_id)
        if lock is None:
            lock = self._locks[moderator_id] = asyncio.Lock()
        return lock

    async def check_and_consume(self, moderator_id: UserID, is_admin: bool = False) -> QuotaStatus:
        """
        Consume one verification from the moderator's quota if any is left.

        Args:
            moderator_id (UserID): Moderator running the verification.
            is_admin (bool): Exempt moderators are always allowed and never counted.

        Returns:
            QuotaStatus: Whether the call is allowed, what remains and when the
            window resets. A denied call leaves the quota untouched.
        """
        if is_admin:
            return QuotaStatus(allowed=True, remaining=UNLIMITED, window_reset_at=0)

        async with self._lock_for(moderator_id):
            now = self.clock()
            quota = self.quotas.get(moderator_id)

            if quota is None or now >= quota.window_reset_at:
                quota = ModeratorQuota(count=1, window_reset_at=now + self.window_seconds)
                self.quotas[moderator_id] = quota
                logger.debug("[RATE LIMIT] Opened new window for moderator %s", moderator_id)
                return QuotaStatus(allowed=True, remaining=self.limit - 1, window_reset_at=quota.window_reset_at)

            if quota.count >= self.limit:
                logger.info(
                    "[RATE LIMIT] Moderator %s reached %d verifications; window resets at %.0f",
                    moderator_id,
                    self.limit,
                    quota.window_reset_at,
                )
                return QuotaStatus(allowed=False, remaining=0, window_reset_at=quota.window_reset_at)

            quota.count += 1
            logger.debug("[RATE LIMIT] Moderator %s used %d/%d", moderator_id, quota.count, self.limit)
            return QuotaStatus(
                allowed=True,
                remaining=self.limit - quota.count,
                window_reset_at=quota.window_reset_at,
            )
