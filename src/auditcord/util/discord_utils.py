"""
discord_utils.py
================

Low-level Discord helpers for Auditcord.

Channel lookups here read the guild's own channel cache on every call and
keep no state, so a channel renamed or deleted between two events is simply
seen (or not seen) on the next lookup.
"""

from typing import Any, List, Union

import discord

from auditcord.util.logger import get_logger

logger = get_logger("discord_utils")

# Discord rejects message content longer than this
MESSAGE_CHAR_LIMIT = 2000


def resolve_text_channel(guild: discord.Guild, name: str) -> discord.TextChannel | None:
    """
    Find a text channel in ``guild`` whose name is exactly ``name``.

    When several channels share the name the first one in the guild cache's
    enumeration order wins; that order is not guaranteed to be stable.

    Args:
        guild (discord.Guild): Guild whose cached channels are scanned.
        name (str): Literal channel name, e.g. ``"bot-warning"``.

    Returns:
        discord.TextChannel | None: The matching channel, or None if absent.
    """
    for channel in getattr(guild, "text_channels", []):
        if getattr(channel, "name", None) == name:
            return channel
    return None


async def send_to_named_channel(guild: discord.Guild, name: str, content: str | None = None, **kwargs: Any) -> bool:
    """
    Resolve ``name`` in ``guild`` and send a message there, best-effort.

    A missing channel is logged as a warning and skipped; a failed send is
    logged as an error. Nothing is raised.

    Returns:
        bool: True if the message was sent.
    """
    channel = resolve_text_channel(guild, name)
    if channel is None:
        logger.warning("Channel #%s not found in guild %s; skipping send.", name, getattr(guild, "id", "?"))
        return False

    try:
        await channel.send(content, **kwargs)
    except discord.Forbidden:
        logger.error("Missing permission to send in #%s (guild %s).", name, getattr(guild, "id", "?"))
        return False
    except Exception as exc:
        logger.error("Failed to send to #%s (guild %s): %s", name, getattr(guild, "id", "?"), exc)
        return False
    return True


def is_ignored_author(author: Union[discord.User, discord.Member]) -> bool:
    """Return True for authors the bot never responds to (bots, including itself)."""
    return bool(getattr(author, "bot", False))


def split_message(text: str, limit: int = MESSAGE_CHAR_LIMIT) -> List[str]:
    """
    Split ``text`` into chunks no longer than ``limit`` characters.

    Splits prefer the last newline inside the window, then the last space,
    and fall back to a hard cut.
    """
    if not text:
        return []

    chunks: List[str] = []
    remaining = text
    while len(remaining) > limit:
        window = remaining[:limit]
        cut = window.rfind("\n")
        if cut <= 0:
            cut = window.rfind(" ")
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n ")
    if remaining:
        chunks.append(remaining)
    return chunks


def truncate(text: str, limit: int = MESSAGE_CHAR_LIMIT, suffix: str = "…") -> str:
    """Cut ``text`` to at most ``limit`` characters, marking the cut with ``suffix``."""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(suffix))] + suffix
