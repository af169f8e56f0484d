"""
Pytest configuration and fixtures for Auditcord tests.
"""

import os
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Run from the project root so ./config/app_config.yml resolves like at runtime
ROOT_DIR = Path(__file__).parent.parent
os.chdir(ROOT_DIR)

# Add src directory to path so imports work
src_path = ROOT_DIR / "src"
sys.path.insert(0, str(src_path))


class FakeChannel:
    """Text channel stand-in recording everything sent to it."""

    def __init__(self, name: str, *, channel_id: int = 0, guild=None, fail: bool = False):
        self.name = name
        self.id = channel_id
        self.guild = guild
        self.fail = fail
        self.sent: list = []

    async def send(self, content=None, **kwargs):
        if self.fail:
            raise RuntimeError("send failed")
        self.sent.append(content)


class FakeGuild:
    """Guild stand-in with a channel cache and a scripted audit log."""

    def __init__(self, channels=(), entries=(), *, guild_id: int = 1, name: str = "Test Guild", audit_error=None):
        self.id = guild_id
        self.name = name
        self.text_channels = list(channels)
        self.entries = list(entries)
        self.audit_error = audit_error
        self.audit_calls: list = []

    def audit_logs(self, *, limit=None, action=None):
        self.audit_calls.append({"limit": limit, "action": action})
        return self._iterate(limit)

    async def _iterate(self, limit):
        if self.audit_error is not None:
            raise self.audit_error
        for entry in self.entries[:limit]:
            yield entry


def make_entry(user="mod#0001", reason="cleanup", action=None, guild=None):
    return SimpleNamespace(user=user, reason=reason, action=action, guild=guild, created_at=None)


@pytest.fixture
def fake_channel_cls():
    return FakeChannel


@pytest.fixture
def fake_guild_cls():
    return FakeGuild


@pytest.fixture
def entry_factory():
    return make_entry
