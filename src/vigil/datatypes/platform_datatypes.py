"""
Interfaces the verification core uses to reach the chat platform.

The core never calls py-cord directly; it goes through :class:`PlatformActions`
so sessions and schedulers can be driven by fakes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from vigil.datatypes.account_datatypes import AccountSnapshot
from vigil.datatypes.discord_datatypes import UserID


@dataclass(slots=True)
class DecisionSurface:
    """Handle to a presented decision: the message and the view rendering its controls."""
    message: Any
    view: Any


class PlatformActions(Protocol):
    """Outbound operations against one guild."""

    async def ban_account(self, target_id: UserID, reason: str) -> bool:
        ...

    async def send_direct_message(self, account_id: UserID, embed: Any) -> bool:
        ...

    async def present_decision_surface(self, origin: Any, embed: Any, view: Any) -> DecisionSurface | None:
        ...

    async def disable_controls(self, surface: DecisionSurface) -> None:
        ...

    async def reply_to(self, origin: Any, content: str, *, ephemeral: bool = False) -> bool:
        ...

    def find_capable_actor(self, capability: str, *, exclude_ids: Iterable[UserID] = ()) -> AccountSnapshot | None:
        ...

    def bot_account(self) -> AccountSnapshot | None:
        ...
