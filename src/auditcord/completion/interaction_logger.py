"""
Structured completion logs posted to the guild's logs channel.

Records are write-only JSON blobs. Logging is best-effort: by the time a
record is written the user already has their reply, so a failure here is
logged locally and otherwise ignored.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict

import discord

from auditcord.configuration.app_configuration import app_config
from auditcord.datatypes.chat_datatypes import (
    ChatRequest,
    ChatResponse,
    ClientError,
    LogRecord,
    RateLimited,
    Success,
    TransientError,
)
from auditcord.util import discord_utils
from auditcord.util.logger import get_logger

logger = get_logger("interaction_logger")

CODE_FENCE_OVERHEAD = len("```json\n\n```")
# Zero-width space between backticks so logged text cannot close the fence
FENCE_BREAK = "`\u200b`\u200b`"


def build_log_record(request: ChatRequest, response: ChatResponse, attempts: int) -> LogRecord:
    """Describe a terminal completion outcome as a ``LogRecord``."""
    payload: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "model": request.model_id,
        "prompt": request.prompt_text,
        "attempts": attempts,
    }

    match response:
        case Success():
            payload["response"] = response.reply_text
            usage = response.raw_payload.get("usage") if isinstance(response.raw_payload, dict) else None
            if usage:
                payload["usage"] = usage
            return LogRecord(kind="request", payload=payload)
        case RateLimited():
            payload["error"] = "rate_limited"
            payload["hints"] = {k: v for k, v in asdict(response).items() if v is not None}
        case ClientError():
            payload["error"] = "client_error"
            payload["status"] = response.status
            payload["detail"] = response.detail
        case TransientError():
            payload["error"] = "transient_error"
            payload["status"] = response.status
            payload["detail"] = response.detail
    return LogRecord(kind="error", payload=payload)


def format_log_record(record: LogRecord) -> str:
    """Render ``record`` as a fenced JSON block that fits one message."""
    body = json.dumps({"kind": record.kind, **record.payload}, indent=2, ensure_ascii=False, default=str)
    body = body.replace("```", FENCE_BREAK)
    body = discord_utils.truncate(body, discord_utils.MESSAGE_CHAR_LIMIT - CODE_FENCE_OVERHEAD)
    return f"```json\n{body}\n```"


class InteractionLogger:
    """Sends completion records to the logs channel of the originating guild."""

    def __init__(self, bot: discord.Client | None = None, channel_name: str | None = None) -> None:
        self.bot = bot
        self.channel_name = channel_name

    async def log(self, guild: discord.Guild | None, record: LogRecord) -> bool:
        """Send ``record`` to the logs channel of ``guild``. Never raises."""
        if guild is None:
            logger.debug("No guild for %s record; not posting it.", record.kind)
            return False
        try:
            target = self.channel_name or app_config.logs_channel_name
            return await discord_utils.send_to_named_channel(guild, target, format_log_record(record))
        except Exception:
            logger.exception("Failed to post %s record to guild %s", record.kind, getattr(guild, "id", "?"))
            return False

    async def record_outcome(self, request: ChatRequest, response: ChatResponse, attempts: int) -> bool:
        """Reporter hook for ``RetryController``."""
        record = build_log_record(request, response, attempts)
        guild = None
        if self.bot is not None and request.guild_id is not None:
            guild = self.bot.get_guild(request.guild_id)
        return await self.log(guild, record)
