from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_CHAT_CHANNEL_NAME = "bot-chat"


@dataclass(frozen=True, slots=True)
class EnvSettings:
    """Credentials and per-deployment values read from the process environment.

    Attributes:
        discord_token: Bot token used to connect to the gateway.
        api_key: Bearer credential for the completion provider.
        chat_channel_name: Channel in which shortcut prompts are answered.
        referer: Optional ``HTTP-Referer`` sent for provider ranking.
        title: Optional ``X-Title`` sent for provider ranking.
    """
    discord_token: str | None
    api_key: str | None
    chat_channel_name: str = DEFAULT_CHAT_CHANNEL_NAME
    referer: str | None = None
    title: str | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "EnvSettings":
        """Build settings from ``environ`` (``os.environ`` when omitted).

        Blank values are treated as unset.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> str | None:
            value = (env.get(name) or "").strip()
            return value or None

        return cls(
            discord_token=read("DISCORD_BOT_TOKEN"),
            api_key=read("OPENROUTER_API_KEY"),
            chat_channel_name=read("CHAT_CHANNEL_NAME") or DEFAULT_CHAT_CHANNEL_NAME,
            referer=read("OPENROUTER_REFERER"),
            title=read("OPENROUTER_TITLE"),
        )
