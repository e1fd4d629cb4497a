"""Immutable verification settings injected into the moderation core."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable

DEFAULT_AUTHORIZED_BOTS: tuple[str, ...] = ("Webhook#0000",)
DEFAULT_VERIFICATION_LIMIT = 5
DEFAULT_VERIFICATION_WINDOW_SECONDS = 60 * 60.0
DEFAULT_SESSION_TIMEOUT_SECONDS = 60.0
DEFAULT_AUTO_BAN_DELAY_SECONDS = 10.0
DEFAULT_MODLOG_CHANNEL = "modlog"
DEFAULT_COMMAND_PREFIX = "!verify"
DEFAULT_AUDIT_DATABASE = Path("./data/audit.db")


def _as_str_set(values: Any) -> frozenset[str]:
    if values is None:
        return frozenset()
    if isinstance(values, (str, int)):
        values = [values]
    if not isinstance(values, Iterable):
        return frozenset()
    return frozenset(str(value).strip() for value in values if str(value).strip())


def _positive_float(value: Any, default: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True, slots=True)
class VerificationSettings:
    """Read-only values the verification workflow is built from.

    Attributes:
        admin_identities: User ids or tags that bypass the verification quota.
        authorized_bots: Canonical bot tags (``name#discriminator``) that are
            never reported as malicious.
        verification_limit: Verifications a moderator may run per window.
        verification_window_seconds: Length of the fixed quota window.
        session_timeout_seconds: Lifetime of a ban/pardon decision surface.
        auto_ban_delay_seconds: Delay before a malicious bot is banned.
        modlog_channel: Name of the channel receiving audit notifications.
        command_prefix: Message prefix that triggers a verification.
        audit_database_path: SQLite file holding the audit trail.
    """

    admin_identities: frozenset[str] = frozenset()
    authorized_bots: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_AUTHORIZED_BOTS))
    verification_limit: int = DEFAULT_VERIFICATION_LIMIT
    verification_window_seconds: float = DEFAULT_VERIFICATION_WINDOW_SECONDS
    session_timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS
    auto_ban_delay_seconds: float = DEFAULT_AUTO_BAN_DELAY_SECONDS
    modlog_channel: str = DEFAULT_MODLOG_CHANNEL
    command_prefix: str = DEFAULT_COMMAND_PREFIX
    audit_database_path: Path = DEFAULT_AUDIT_DATABASE

    @classmethod
    def from_mapping(cls, data: Dict[str, Any] | None, *, extra_admins: Iterable[str] = ()) -> "VerificationSettings":
        """Build settings from the raw YAML mapping, falling back to defaults per key."""
        data = data if isinstance(data, dict) else {}
        verification = data.get("verification", {})
        if not isinstance(verification, dict):
            verification = {}
        auto_ban = data.get("auto_ban", {})
        if not isinstance(auto_ban, dict):
            auto_ban = {}
        audit = data.get("audit", {})
        if not isinstance(audit, dict):
            audit = {}

        authorized_bots = data.get("authorized_bots")
        prefix = str(verification.get("command_prefix") or DEFAULT_COMMAND_PREFIX).strip()

        return cls(
            admin_identities=_as_str_set(data.get("admins")) | _as_str_set(list(extra_admins)),
            authorized_bots=_as_str_set(authorized_bots) if authorized_bots is not None else frozenset(DEFAULT_AUTHORIZED_BOTS),
            verification_limit=_positive_int(verification.get("limit"), DEFAULT_VERIFICATION_LIMIT),
            verification_window_seconds=_positive_float(
                verification.get("window_seconds"), DEFAULT_VERIFICATION_WINDOW_SECONDS
            ),
            session_timeout_seconds=_positive_float(
                verification.get("session_timeout_seconds"), DEFAULT_SESSION_TIMEOUT_SECONDS
            ),
            auto_ban_delay_seconds=_positive_float(auto_ban.get("delay_seconds"), DEFAULT_AUTO_BAN_DELAY_SECONDS),
            modlog_channel=str(audit.get("modlog_channel") or DEFAULT_MODLOG_CHANNEL),
            command_prefix=prefix or DEFAULT_COMMAND_PREFIX,
            audit_database_path=Path(str(audit.get("database_path") or DEFAULT_AUDIT_DATABASE)),
        )
