"""
Account snapshot and suspicion verdict data structures.

An :class:`AccountSnapshot` freezes the attributes of a Discord user that the
heuristics look at, so evaluation never touches live platform objects. A
:class:`SuspicionVerdict` is the ordered list of reasons computed from one
snapshot.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Union

import discord

from vigil.datatypes.discord_datatypes import UserID

# Discriminator Discord reports for accounts migrated to unique usernames
MIGRATED_DISCRIMINATOR = "0"


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """Immutable view of a Discord account at evaluation time.

    Attributes:
        user_id: Snowflake of the account.
        username: Raw username (without discriminator).
        discriminator: Four digit discriminator, ``"0"`` for migrated accounts.
        created_at: Timezone-aware account creation time.
        has_avatar: Whether a custom avatar is set.
        is_bot: Whether the account is a bot account.
        avatar_url: Display avatar URL used for embed thumbnails.
    """

    user_id: UserID
    username: str
    discriminator: str
    created_at: datetime.datetime
    has_avatar: bool
    is_bot: bool
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: Union[discord.Member, discord.User, discord.ClientUser]) -> "AccountSnapshot":
        """Capture the heuristic-relevant attributes of a Discord user or member."""
        display_avatar = getattr(user, "display_avatar", None)
        return cls(
            user_id=UserID.from_user(user),
            username=user.name,
            discriminator=str(user.discriminator or MIGRATED_DISCRIMINATOR),
            created_at=user.created_at,
            has_avatar=user.avatar is not None,
            is_bot=bool(user.bot),
            avatar_url=str(display_avatar.url) if display_avatar is not None else None,
        )

    @property
    def canonical_tag(self) -> str:
        """``username#discriminator``, the form used by the authorized-bot allowlist."""
        return f"{self.username}#{self.discriminator}"

    @property
    def tag(self) -> str:
        """Human readable tag; migrated accounts are shown by username only."""
        if self.discriminator in (MIGRATED_DISCRIMINATOR, "0000") and not self.is_bot:
            return self.username
        return self.canonical_tag


@dataclass(frozen=True, slots=True)
class SuspicionVerdict:
    """Ordered suspicion reasons for one account snapshot.

    The verdict is never persisted; it is recomputed whenever an account is
    evaluated.
    """

    reasons: tuple[str, ...] = ()

    @property
    def is_suspicious(self) -> bool:
        return len(self.reasons) > 0

    def has_reason(self, reason: str) -> bool:
        return reason in self.reasons
