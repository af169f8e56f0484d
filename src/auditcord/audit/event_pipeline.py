"""Generic gateway-event → notification dispatch driven by the template table."""

from __future__ import annotations

from typing import Any

from auditcord.audit import notification_dispatcher
from auditcord.audit.notification_templates import NOTIFICATION_TEMPLATES
from auditcord.datatypes.audit_datatypes import GatewayEventKind
from auditcord.util.logger import get_logger

logger = get_logger("event_pipeline")


async def dispatch_gateway_event(event_kind: GatewayEventKind, *event_args: Any) -> bool:
    """Route one gateway event through its template.

    ``event_args`` are the listener's arguments exactly as the gateway
    delivered them. Events with no owning guild are skipped. Never raises.

    Returns
    -------
    bool
        True if a notification was sent.
    """
    try:
        template = NOTIFICATION_TEMPLATES[event_kind]
        guild = template.guild_of(*event_args)
        if guild is None:
            logger.debug("[AUDIT] Skipping %s: entity has no owning guild", event_kind)
            return False
        subject = template.subject_of(*event_args)
    except Exception:
        logger.exception("[AUDIT] Could not extract %s event data", event_kind)
        return False

    return await notification_dispatcher.notify(guild, event_kind, subject)
