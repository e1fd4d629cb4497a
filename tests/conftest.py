"""
Pytest configuration and fixtures for Vigil tests.
"""

import datetime
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from vigil.database.db_connection import ConnectionManager  # noqa: E402
from vigil.datatypes.account_datatypes import AccountSnapshot  # noqa: E402
from vigil.datatypes.discord_datatypes import UserID  # noqa: E402
from vigil.datatypes.platform_datatypes import DecisionSurface  # noqa: E402

NOW = datetime.datetime(2024, 6, 1, 12, 0, tzinfo=datetime.timezone.utc)


class FakePlatform:
    """In-memory PlatformActions recording every call."""

    def __init__(self, *, ban_result=True, bot=None, capable_actor=None, dm_result=True):
        self.ban_result = ban_result
        self.dm_result = dm_result
        self.bot = bot
        self.capable_actor = capable_actor
        self.bans = []
        self.direct_messages = []
        self.disabled = []
        self.replies = []
        self.presented = []
        self.capability_queries = []
        self.surface_result = "default"

    async def ban_account(self, target_id, reason):
        self.bans.append((target_id, reason))
        return self.ban_result

    async def send_direct_message(self, account_id, embed):
        self.direct_messages.append((account_id, embed))
        return self.dm_result

    async def present_decision_surface(self, origin, embed, view):
        self.presented.append((origin, embed, view))
        if self.surface_result == "default":
            return DecisionSurface(message=SimpleNamespace(id=1), view=view)
        return self.surface_result

    async def disable_controls(self, surface):
        self.disabled.append(surface)

    async def reply_to(self, origin, content, *, ephemeral=False):
        self.replies.append(content)
        return True

    def find_capable_actor(self, capability, *, exclude_ids=()):
        self.capability_queries.append((capability, list(exclude_ids)))
        return self.capable_actor

    def bot_account(self):
        return self.bot


@pytest.fixture
def make_account():
    """Factory building AccountSnapshot values with benign defaults."""

    def _make(
        user_id=1000,
        username="alice",
        discriminator="0",
        created_at=NOW - datetime.timedelta(days=365),
        has_avatar=True,
        is_bot=False,
        avatar_url=None,
    ):
        return AccountSnapshot(
            user_id=UserID(user_id),
            username=username,
            discriminator=discriminator,
            created_at=created_at,
            has_avatar=has_avatar,
            is_bot=is_bot,
            avatar_url=avatar_url,
        )

    return _make


@pytest.fixture
def bot_snapshot(make_account):
    return make_account(user_id=1, username="Vigil", discriminator="4242", is_bot=True)


@pytest.fixture
def fake_platform(bot_snapshot):
    return FakePlatform(bot=bot_snapshot)


@pytest.fixture
def platform_factory():
    """Build FakePlatform instances with custom behavior."""
    return FakePlatform


@pytest.fixture
def audit_sink_mock():
    sink = SimpleNamespace(record=AsyncMock())
    return sink


@pytest.fixture
def fake_user():
    """Factory for py-cord-like user/member objects."""

    def _make(
        user_id=2000,
        name="bob",
        discriminator="0",
        created_at=NOW - datetime.timedelta(days=365),
        avatar="hash",
        bot=False,
        permissions=None,
        **extra,
    ):
        return SimpleNamespace(
            id=user_id,
            name=name,
            discriminator=discriminator,
            created_at=created_at,
            avatar=avatar,
            bot=bot,
            display_avatar=SimpleNamespace(url=f"https://cdn.example/{user_id}.png"),
            guild_permissions=SimpleNamespace(**(permissions or {})),
            **extra,
        )

    return _make


@pytest_asyncio.fixture
async def open_connection(tmp_path):
    """ConnectionManager opened on a temporary SQLite file."""
    manager = ConnectionManager()
    await manager.open(tmp_path / "audit.db")
    try:
        yield manager
    finally:
        await manager.close()
