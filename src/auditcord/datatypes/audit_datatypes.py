"""
Audit-log notification data structures.

This module defines the gateway event kinds the bot relays, the transient
``AuditEvent`` extracted from the most recent audit-log entry, and the
``NotificationTemplate`` binding each event kind to its audit action and
renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping

import discord

UNKNOWN_EXECUTOR = "Unknown"
NO_REASON = "No reason"


class GatewayEventKind(Enum):
    """Gateway events that produce a notification in the warning channel."""

    ROLE_CREATE = "role_create"
    ROLE_DELETE = "role_delete"
    ROLE_UPDATE = "role_update"
    CHANNEL_CREATE = "channel_create"
    CHANNEL_DELETE = "channel_delete"
    CHANNEL_UPDATE = "channel_update"
    WEBHOOK_UPDATE = "webhook_update"
    MEMBER_BAN = "member_ban"
    GUILD_UPDATE = "guild_update"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Actor and reason extracted from a single audit-log entry.

    Attributes:
        action_type: Audit action the entry was queried for.
        guild_id: ID of the guild the entry belongs to.
        executor_tag: Display tag of the user who performed the action.
        reason: Reason attached to the action.
        timestamp: When the entry was created.
    """
    action_type: discord.AuditLogAction | None
    guild_id: int | None
    executor_tag: str = UNKNOWN_EXECUTOR
    reason: str = NO_REASON
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def placeholder(cls, action_type: discord.AuditLogAction | None = None, guild_id: int | None = None) -> "AuditEvent":
        """Return the event used when no audit entry could be correlated."""
        return cls(action_type=action_type, guild_id=guild_id)


Subject = Mapping[str, Any]


@dataclass(slots=True, frozen=True)
class NotificationTemplate:
    """Static binding from a gateway event kind to its notification.

    Attributes:
        event_kind: The gateway event this template handles.
        audit_action: Audit-log action type to correlate against.
        guild_of: Extracts the owning guild from the listener arguments,
            returning None when the event has no guild and must be skipped.
        subject_of: Extracts the display data (names, mentions) from the
            listener arguments.
        render: Builds the notification line from subject data and the
            correlated audit event.
    """
    event_kind: GatewayEventKind
    audit_action: discord.AuditLogAction
    guild_of: Callable[..., discord.Guild | None]
    subject_of: Callable[..., Subject]
    render: Callable[[Subject, AuditEvent], str]
