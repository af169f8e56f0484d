"""
Static bindings from gateway events to warning-channel notifications.

``NOTIFICATION_TEMPLATES`` is the single table consumed by the event
pipeline. Each entry states how to find the owning guild from the listener
arguments, which audit action to correlate, which display data to pull from
the event, and how to render the final line.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

import discord

from auditcord.datatypes.audit_datatypes import AuditEvent, GatewayEventKind, NotificationTemplate, Subject


# ==========================================
# Guild extraction rules
# ==========================================

def _owning_guild(entity: Any) -> discord.Guild | None:
    """Guild of a role/channel, or None for entities outside any guild."""
    return getattr(entity, "guild", None)


def _owning_guild_of_updated(before: Any, after: Any) -> discord.Guild | None:
    return _owning_guild(after)


def _ban_guild(guild: discord.Guild, user: Any) -> discord.Guild | None:
    return guild


def _updated_guild(before: discord.Guild, after: discord.Guild) -> discord.Guild | None:
    return after


# ==========================================
# Subject extraction
# ==========================================

def _name_of(entity: Any) -> Subject:
    return {"name": getattr(entity, "name", None) or "unknown"}


def _rename_of(before: Any, after: Any) -> Subject:
    return {
        "name": getattr(after, "name", None) or "unknown",
        "old_name": getattr(before, "name", None) or "unknown",
    }


def _banned_user(guild: discord.Guild, user: Any) -> Subject:
    return {"name": str(user), "user_id": getattr(user, "id", None)}


# ==========================================
# Renderers
# ==========================================

def _attribution(event: AuditEvent) -> str:
    return f"\n👤 By: {event.executor_tag}\n📝 Reason: {event.reason}"


def _renamed(subject: Subject, prefix: str = "") -> str:
    name, old_name = subject["name"], subject.get("old_name", subject["name"])
    if old_name != name:
        return f"**{prefix}{old_name}** → **{prefix}{name}**"
    return f"**{prefix}{name}**"


def _render_role_create(subject: Subject, event: AuditEvent) -> str:
    return f"🆕 Role **{subject['name']}** was created." + _attribution(event)


def _render_role_delete(subject: Subject, event: AuditEvent) -> str:
    return f"⚠️ Role **{subject['name']}** was deleted." + _attribution(event)


def _render_role_update(subject: Subject, event: AuditEvent) -> str:
    return f"✏️ Role {_renamed(subject)} was updated." + _attribution(event)


def _render_channel_create(subject: Subject, event: AuditEvent) -> str:
    return f"📁 Channel **#{subject['name']}** was created." + _attribution(event)


def _render_channel_delete(subject: Subject, event: AuditEvent) -> str:
    return f"⚠️ Channel **#{subject['name']}** was deleted." + _attribution(event)


def _render_channel_update(subject: Subject, event: AuditEvent) -> str:
    return f"✏️ Channel {_renamed(subject, prefix='#')} was updated." + _attribution(event)


def _render_webhook_update(subject: Subject, event: AuditEvent) -> str:
    return f"🪝 Webhooks in **#{subject['name']}** were updated." + _attribution(event)


def _render_member_ban(subject: Subject, event: AuditEvent) -> str:
    return f"🔨 **{subject['name']}** was banned." + _attribution(event)


def _render_guild_update(subject: Subject, event: AuditEvent) -> str:
    return f"⚙️ Server {_renamed(subject)} settings were updated." + _attribution(event)


def _template(kind, action, guild_of, subject_of, render) -> NotificationTemplate:
    return NotificationTemplate(
        event_kind=kind,
        audit_action=action,
        guild_of=guild_of,
        subject_of=subject_of,
        render=render,
    )


NOTIFICATION_TEMPLATES: Mapping[GatewayEventKind, NotificationTemplate] = MappingProxyType({
    template.event_kind: template
    for template in (
        _template(GatewayEventKind.ROLE_CREATE, discord.AuditLogAction.role_create, _owning_guild, _name_of, _render_role_create),
        _template(GatewayEventKind.ROLE_DELETE, discord.AuditLogAction.role_delete, _owning_guild, _name_of, _render_role_delete),
        _template(GatewayEventKind.ROLE_UPDATE, discord.AuditLogAction.role_update, _owning_guild_of_updated, _rename_of, _render_role_update),
        _template(GatewayEventKind.CHANNEL_CREATE, discord.AuditLogAction.channel_create, _owning_guild, _name_of, _render_channel_create),
        _template(GatewayEventKind.CHANNEL_DELETE, discord.AuditLogAction.channel_delete, _owning_guild, _name_of, _render_channel_delete),
        _template(GatewayEventKind.CHANNEL_UPDATE, discord.AuditLogAction.channel_update, _owning_guild_of_updated, _rename_of, _render_channel_update),
        _template(GatewayEventKind.WEBHOOK_UPDATE, discord.AuditLogAction.webhook_update, _owning_guild, _name_of, _render_webhook_update),
        _template(GatewayEventKind.MEMBER_BAN, discord.AuditLogAction.ban, _ban_guild, _banned_user, _render_member_ban),
        _template(GatewayEventKind.GUILD_UPDATE, discord.AuditLogAction.guild_update, _updated_guild, _rename_of, _render_guild_update),
    )
})
