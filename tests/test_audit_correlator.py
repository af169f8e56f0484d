import datetime
from types import SimpleNamespace

import discord
import pytest

from auditcord.audit.audit_correlator import correlate
from auditcord.datatypes.audit_datatypes import AuditEvent


@pytest.mark.asyncio
async def test_correlate_extracts_executor_and_reason(fake_guild_cls, entry_factory):
    guild = fake_guild_cls(entries=[entry_factory(user="alice#0001", reason="spam cleanup")], guild_id=42)

    event = await correlate(guild, discord.AuditLogAction.role_delete)

    assert event is not None
    assert event.executor_tag == "alice#0001"
    assert event.reason == "spam cleanup"
    assert event.guild_id == 42
    assert event.action_type is discord.AuditLogAction.role_delete


@pytest.mark.asyncio
async def test_correlate_queries_only_most_recent_entry(fake_guild_cls, entry_factory):
    guild = fake_guild_cls(entries=[entry_factory(user="newest"), entry_factory(user="older")])

    event = await correlate(guild, discord.AuditLogAction.ban)

    assert guild.audit_calls == [{"limit": 1, "action": discord.AuditLogAction.ban}]
    assert event.executor_tag == "newest"


@pytest.mark.asyncio
async def test_correlate_keeps_entry_timestamp(fake_guild_cls):
    created = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)
    entry = SimpleNamespace(user="bob", reason=None, created_at=created)
    guild = fake_guild_cls(entries=[entry])

    event = await correlate(guild, discord.AuditLogAction.channel_create)

    assert event.timestamp == created
    assert event.reason == "No reason"


@pytest.mark.asyncio
async def test_correlate_missing_user_defaults_to_unknown(fake_guild_cls, entry_factory):
    guild = fake_guild_cls(entries=[entry_factory(user=None, reason="")])

    event = await correlate(guild, discord.AuditLogAction.webhook_update)

    assert event.executor_tag == "Unknown"
    assert event.reason == "No reason"


@pytest.mark.asyncio
async def test_correlate_no_entries_returns_none(fake_guild_cls):
    guild = fake_guild_cls(entries=[])

    assert await correlate(guild, discord.AuditLogAction.guild_update) is None


@pytest.mark.asyncio
async def test_correlate_fetch_failure_returns_none(fake_guild_cls):
    guild = fake_guild_cls(audit_error=RuntimeError("network down"))

    assert await correlate(guild, discord.AuditLogAction.role_create) is None


def test_placeholder_defaults():
    event = AuditEvent.placeholder(discord.AuditLogAction.ban, 5)

    assert event.executor_tag == "Unknown"
    assert event.reason == "No reason"
    assert event.guild_id == 5
