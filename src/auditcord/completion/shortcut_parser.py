from __future__ import annotations

from typing import List, Mapping

from auditcord.datatypes.chat_datatypes import ChatRequest


class ShortcutError(ValueError):
    """User typed an unknown shortcut, no shortcut, or an empty prompt."""

    def __init__(self, message: str, valid_shortcuts: List[str]) -> None:
        super().__init__(message)
        self.valid_shortcuts = valid_shortcuts


def parse_chat_request(text: str, shortcuts: Mapping[str, str], guild_id: int | None = None) -> ChatRequest:
    """Turn ``"<shortcut>: <prompt>"`` into a ``ChatRequest``.

    The shortcut is matched case-insensitively against ``shortcuts``.

    Raises
    ------
    ShortcutError
        If the text has no ``:``, the shortcut is unknown, or the prompt is
        empty.
    """
    valid = sorted(shortcuts)
    token, separator, prompt = text.partition(":")
    token = token.strip().lower()
    prompt = prompt.strip()

    if not separator or not token:
        raise ShortcutError("Messages must start with a model shortcut, e.g. `g: hello`.", valid)
    if token not in shortcuts:
        raise ShortcutError(f"Unknown shortcut `{token}`.", valid)
    if not prompt:
        raise ShortcutError(f"Nothing to send after `{token}:`.", valid)

    return ChatRequest(model_id=shortcuts[token], prompt_text=prompt, guild_id=guild_id)


def format_shortcut_help(shortcuts: Mapping[str, str]) -> str:
    if not shortcuts:
        return "No model shortcuts are configured."
    lines = ["Valid shortcuts:"]
    lines.extend(f"• `{token}:` → {shortcuts[token]}" for token in sorted(shortcuts))
    return "\n".join(lines)
