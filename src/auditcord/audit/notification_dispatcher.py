"""
Warning-channel notifications for audit-relevant gateway events.

``notify`` is called straight from gateway listeners, so it never raises:
every failure is logged and the notification is dropped. A failed audit
lookup only makes the message less informative.
"""

from __future__ import annotations

import discord

from auditcord.audit.audit_correlator import correlate
from auditcord.audit.notification_templates import NOTIFICATION_TEMPLATES
from auditcord.configuration.app_configuration import app_config
from auditcord.datatypes.audit_datatypes import AuditEvent, GatewayEventKind, Subject
from auditcord.util import discord_utils
from auditcord.util.logger import get_logger

logger = get_logger("notification_dispatcher")


async def notify(
    guild: discord.Guild,
    event_kind: GatewayEventKind,
    subject: Subject,
    channel_name: str | None = None,
) -> bool:
    """Render and send the notification for ``event_kind`` in ``guild``.

    Parameters
    ----------
    guild:
        Guild the event happened in.
    event_kind:
        Kind of gateway event; selects the template and audit action.
    subject:
        Display data extracted from the event (entity names).
    channel_name:
        Target channel; defaults to the configured warning channel.

    Returns
    -------
    bool
        True if a message was sent. Callers are free to ignore it.
    """
    try:
        template = NOTIFICATION_TEMPLATES[event_kind]
        event = await correlate(guild, template.audit_action)
        if event is None:
            event = AuditEvent.placeholder(template.audit_action, getattr(guild, "id", None))

        content = template.render(subject, event)
        target = channel_name or app_config.warning_channel_name
        sent = await discord_utils.send_to_named_channel(guild, target, content)
        if sent:
            logger.info("[AUDIT] Sent %s notification to #%s in guild %s", event_kind, target, getattr(guild, "id", "?"))
        return sent
    except Exception:
        logger.exception("[AUDIT] Failed to deliver %s notification in guild %s", event_kind, getattr(guild, "id", "?"))
        return False
