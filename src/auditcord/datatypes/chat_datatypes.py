"""
Completion request and response data structures.

``ChatResponse`` is a closed union of four outcomes produced by the
completion client. Only ``RateLimited`` is recoverable by waiting; the retry
controller treats every other variant as terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Union


@dataclass(slots=True, frozen=True)
class ChatRequest:
    """A single prompt bound for the completion endpoint.

    Attributes:
        model_id: Full model identifier resolved from the user's shortcut.
        prompt_text: Prompt with the shortcut prefix stripped.
        guild_id: Guild the message was sent in, used to route log records.
    """
    model_id: str
    prompt_text: str
    guild_id: int | None = None


@dataclass(slots=True, frozen=True)
class Success:
    reply_text: str
    raw_payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class RateLimited:
    """HTTP 429. Header hints are kept as sent by the provider, if at all."""
    retry_after: str | None = None
    remaining: str | None = None
    reset: str | None = None


@dataclass(slots=True, frozen=True)
class ClientError:
    """HTTP 400: the request itself is wrong and will not succeed on retry."""
    detail: str
    status: int = 400


@dataclass(slots=True, frozen=True)
class TransientError:
    """Any other non-2xx status, a transport fault, or an unparseable payload."""
    detail: str
    status: int | None = None


ChatResponse = Union[Success, RateLimited, ClientError, TransientError]


LogKind = Literal["request", "error"]


@dataclass(slots=True, frozen=True)
class LogRecord:
    kind: LogKind
    payload: Dict[str, Any]


@dataclass(slots=True, frozen=True)
class KeyStatus:
    """Quota information returned by the provider's key-status endpoint."""
    label: str | None = None
    usage: float | None = None
    limit: float | None = None
    limit_remaining: float | None = None
    is_free_tier: bool | None = None
    rate_limit_requests: int | None = None
    rate_limit_interval: str | None = None
    limit_reset: str | None = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "KeyStatus":
        """Build a KeyStatus from the ``{"data": {...}}`` envelope."""
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            data = {}
        rate_limit = data.get("rate_limit")
        if not isinstance(rate_limit, dict):
            rate_limit = {}
        try:
            requests = int(rate_limit["requests"])
        except (KeyError, TypeError, ValueError):
            requests = None
        return cls(
            label=data.get("label"),
            usage=data.get("usage"),
            limit=data.get("limit"),
            limit_remaining=data.get("limit_remaining"),
            is_free_tier=data.get("is_free_tier"),
            rate_limit_requests=requests,
            rate_limit_interval=rate_limit.get("interval"),
            limit_reset=data.get("limit_reset"),
        )
