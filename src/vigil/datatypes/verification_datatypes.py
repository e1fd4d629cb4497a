"""
Enums and value objects shared by the verification workflow.

This module defines session states, audit event types, decision controls,
rejection kinds and the small result objects passed between the gate, the
rate limiter, the verification session and the cogs.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from vigil.datatypes.discord_datatypes import UserID

UNLIMITED = math.inf
"""Remaining-verification value reported for quota-exempt moderators."""


class SessionState(Enum):
    """Lifecycle states of a verification session."""

    AWAITING_DECISION = "awaiting_decision"
    BANNED = "banned"
    PARDONED = "pardoned"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionState.AWAITING_DECISION

    def __str__(self) -> str:
        return self.value


class AuditEventType(Enum):
    """Kinds of moderation events reported to the audit sink."""

    VERIFY = "verify"
    BAN = "ban"
    SUSPECT = "suspect"

    def __str__(self) -> str:
        return self.value


class ControlAction(Enum):
    """Buttons exposed on a verification decision surface."""

    BAN = "ban"
    PARDON = "pardon"

    def __str__(self) -> str:
        return self.value


def build_control_id(action: ControlAction, target_id: UserID) -> str:
    """Return the custom id of a decision control, e.g. ``ban_1234``."""
    return f"{action.value}_{target_id}"


def parse_control_id(control_id: str) -> Tuple[ControlAction, UserID] | None:
    """Split a control custom id back into its action and target.

    Returns ``None`` for ids that were not produced by :func:`build_control_id`.
    """
    action_name, sep, raw_target = control_id.partition("_")
    if not sep:
        return None
    try:
        return ControlAction(action_name), UserID(raw_target)
    except ValueError:
        return None


class RejectionKind(Enum):
    """Reasons a verify command is refused before a session is created."""

    CAPABILITY_DEFICIENCY = "capability_deficiency"
    AUTHORIZATION_DENIED = "authorization_denied"
    QUOTA_EXCEEDED = "quota_exceeded"
    TARGET_MISSING = "target_missing"


@dataclass(frozen=True, slots=True)
class Rejection:
    """A refused operation and the explanation shown to the invoker."""

    kind: RejectionKind
    message: str


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    """Outcome of a rate limiter check-and-consume.

    Attributes:
        allowed: Whether the verification may proceed.
        remaining: Verifications left in the window, ``UNLIMITED`` for admins.
        window_reset_at: Unix time at which the window resets, 0 for admins.
    """

    allowed: bool
    remaining: float | int
    window_reset_at: float

    @property
    def is_unlimited(self) -> bool:
        return self.remaining == UNLIMITED

    def minutes_until_reset(self, now: float) -> int:
        """Whole minutes (rounded up) until the window resets."""
        if self.is_unlimited:
            return 0
        return max(0, math.ceil((self.window_reset_at - now) / 60))


@dataclass(frozen=True, slots=True)
class ControlOutcome:
    """Result of a control activation, shown ephemerally to the clicker."""

    accepted: bool
    message: str
    state: SessionState


@dataclass(slots=True)
class AuditEvent:
    """A persisted moderation event.

    Attributes:
        event_type: Kind of event.
        target_id / target_tag: Account the event is about.
        actor_id / actor_tag: Moderator (or the bot) that caused it.
        reasons: Suspicion reasons attached to the event, possibly empty.
        guild_id: Guild the event happened in, when known.
        created_at: UTC time the event was recorded.
    """

    event_type: AuditEventType
    target_id: UserID
    target_tag: str
    actor_id: UserID
    actor_tag: str
    reasons: Tuple[str, ...] = ()
    guild_id: int | None = None
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def to_dict(self) -> dict:
        """Serialize to the record shape persisted in ``audit_events``."""
        return {
            "timestamp": self.created_at.isoformat(),
            "type": self.event_type.value,
            "member": {"id": str(self.target_id), "tag": self.target_tag},
            "moderator": {"id": str(self.actor_id), "tag": self.actor_tag},
            "reasons": list(self.reasons),
        }
