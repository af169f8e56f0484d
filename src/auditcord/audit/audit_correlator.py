"""
Audit-log correlation.

Each gateway event triggers at most one audit-log query: the single most
recent entry of the expected action type. Rapid identical actions by
different moderators can therefore be attributed to the wrong executor; that
approximation is accepted. Failures degrade to "no entry" and are never
retried.
"""

from __future__ import annotations

from datetime import datetime, timezone

import discord

from auditcord.datatypes.audit_datatypes import AuditEvent, NO_REASON, UNKNOWN_EXECUTOR
from auditcord.util.logger import get_logger

logger = get_logger("audit_correlator")


def _executor_tag(entry) -> str:
    user = getattr(entry, "user", None)
    if user is None:
        return UNKNOWN_EXECUTOR
    return str(user)


async def correlate(guild: discord.Guild, action_type: discord.AuditLogAction) -> AuditEvent | None:
    """Fetch the latest ``action_type`` audit entry of ``guild``.

    Args:
        guild: Guild whose audit log is queried.
        action_type: Audit action used as the server-side filter.

    Returns:
        AuditEvent | None: The extracted actor and reason, or None when the
        log has no matching entry or could not be read.
    """
    try:
        async for entry in guild.audit_logs(limit=1, action=action_type):
            event = AuditEvent(
                action_type=action_type,
                guild_id=getattr(guild, "id", None),
                executor_tag=_executor_tag(entry),
                reason=getattr(entry, "reason", None) or NO_REASON,
                timestamp=getattr(entry, "created_at", None) or datetime.now(timezone.utc),
            )
            logger.debug("[AUDIT] Correlated %s in guild %s to %s", action_type, event.guild_id, event.executor_tag)
            return event
    except discord.Forbidden:
        logger.warning("[AUDIT] Missing View Audit Log permission in guild %s", getattr(guild, "id", "?"))
        return None
    except Exception as exc:
        logger.warning("[AUDIT] Audit log fetch for %s failed in guild %s: %s", action_type, getattr(guild, "id", "?"), exc)
        return None

    logger.debug("[AUDIT] No %s entry found in guild %s", action_type, getattr(guild, "id", "?"))
    return None
