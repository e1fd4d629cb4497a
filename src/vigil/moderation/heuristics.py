"""
Rule-based suspicion heuristics for Discord accounts.

Every rule runs independently and appends its reason in a fixed order, so a
verdict always lists reasons as ``[age, username, avatar, malicious bot]``
with absent entries skipped.
"""

from __future__ import annotations

import datetime
import re
from typing import Callable, Iterable

from vigil.datatypes.account_datatypes import AccountSnapshot, SuspicionVerdict

REASON_YOUNG_ACCOUNT = "account younger than 7 days"
REASON_GENERIC_USERNAME = "generic username pattern"
REASON_NO_AVATAR = "no custom avatar"
REASON_MALICIOUS_BOT = "malicious bot detected"

MINIMUM_ACCOUNT_AGE = datetime.timedelta(days=7)

GENERIC_USERNAME_PATTERN = re.compile(r"[a-z]+[0-9]+", re.IGNORECASE | re.ASCII)
"""ASCII letters followed by ASCII digits, e.g. ``User12345``; matched against the whole username."""

MALICIOUS_BOT_KEYWORDS: tuple[str, ...] = ("nitro", "generator", "free", "gift", "discord", "bot")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class HeuristicEvaluator:
    """Computes a :class:`SuspicionVerdict` from an :class:`AccountSnapshot`.

    The evaluator holds no mutable state. The authorized-bot allowlist is
    fixed at construction and the clock is injectable for tests.
    """

    def __init__(
        self,
        authorized_bots: Iterable[str] = (),
        *,
        clock: Callable[[], datetime.datetime] = utc_now,
    ) -> None:
        self.authorized_bots: frozenset[str] = frozenset(authorized_bots)
        self.clock = clock

    def evaluate(self, account: AccountSnapshot) -> SuspicionVerdict:
        reasons: list[str] = []

        if self.is_young_account(account):
            reasons.append(REASON_YOUNG_ACCOUNT)
        if self.has_generic_username(account):
            reasons.append(REASON_GENERIC_USERNAME)
        if not account.has_avatar:
            reasons.append(REASON_NO_AVATAR)
        if account.is_bot and self.is_malicious_bot(account):
            reasons.append(REASON_MALICIOUS_BOT)

        return SuspicionVerdict(reasons=tuple(reasons))

    def is_young_account(self, account: AccountSnapshot) -> bool:
        created_at = account.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=datetime.timezone.utc)
        return self.clock() - created_at < MINIMUM_ACCOUNT_AGE

    @staticmethod
    def has_generic_username(account: AccountSnapshot) -> bool:
        return GENERIC_USERNAME_PATTERN.fullmatch(account.username) is not None

    def is_malicious_bot(self, account: AccountSnapshot) -> bool:
        """Unlisted bot whose username contains a known scam keyword."""
        if account.canonical_tag in self.authorized_bots:
            return False
        username = account.username.lower()
        return any(keyword in username for keyword in MALICIOUS_BOT_KEYWORDS)
