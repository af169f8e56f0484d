"""
HTTP client for the language-model completion provider.

``complete`` never raises: every outcome, including transport faults, is
classified into one ``ChatResponse`` variant. Only HTTP 429 maps to
``RateLimited``; that is the one outcome the retry controller waits on.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, Mapping

import aiohttp

from auditcord.configuration.app_configuration import AppConfig
from auditcord.configuration.env_settings import EnvSettings
from auditcord.datatypes.chat_datatypes import (
    ChatResponse,
    ClientError,
    KeyStatus,
    RateLimited,
    Success,
    TransientError,
)
from auditcord.util.logger import get_logger

logger = get_logger("completion_client")

# Longest slice of a provider error body carried into results and logs
MAX_DETAIL_CHARS = 500


class CompletionServiceError(Exception):
    """Raised when the key-status endpoint cannot be queried."""


def _error_detail(body: str, payload: Any = None) -> str:
    """Prefer the provider's ``error.message``; fall back to the raw body."""
    if isinstance(payload, dict):
        error_info = payload.get("error")
        if isinstance(error_info, dict) and error_info.get("message"):
            return str(error_info["message"])[:MAX_DETAIL_CHARS]
        if isinstance(error_info, str) and error_info:
            return error_info[:MAX_DETAIL_CHARS]
    return (body or "no response body")[:MAX_DETAIL_CHARS]


def _try_json(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return None


def classify_response(status: int, headers: Mapping[str, str], body: str) -> ChatResponse:
    """Map a raw HTTP outcome onto the ``ChatResponse`` union.

    Args:
        status: HTTP status code.
        headers: Response headers (case-insensitive mapping from aiohttp).
        body: Response body as text.

    Returns:
        ChatResponse: Success, RateLimited, ClientError or TransientError.
    """
    if status == 200:
        try:
            payload = json.loads(body)
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            return TransientError(detail=f"Malformed completion payload: {exc!r}", status=status)
        if not isinstance(content, str) or not content.strip():
            return TransientError(detail="Completion payload has no message content.", status=status)
        return Success(reply_text=content.strip(), raw_payload=payload)

    if status == 429:
        return RateLimited(
            retry_after=headers.get("Retry-After"),
            remaining=headers.get("X-RateLimit-Remaining"),
            reset=headers.get("X-RateLimit-Reset"),
        )

    detail = _error_detail(body, _try_json(body))
    if status == 400:
        return ClientError(detail=detail, status=status)
    return TransientError(detail=f"HTTP {status}: {detail}", status=status)


class CompletionClient:
    """Issues completion and key-status requests with a bearer credential.

    A fresh ``aiohttp.ClientSession`` is opened per request; no connection
    state is shared between requests.
    """

    def __init__(
        self,
        api_key: str | None,
        endpoint: str,
        key_status_endpoint: str,
        *,
        referer: str | None = None,
        title: str | None = None,
        timeout_seconds: float = 120.0,
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.key_status_endpoint = key_status_endpoint
        self.referer = referer
        self.title = title
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session_factory = session_factory

    @classmethod
    def from_settings(cls, env: EnvSettings, config: AppConfig) -> "CompletionClient":
        completion = config.completion
        return cls(
            env.api_key,
            completion.endpoint,
            completion.key_status_endpoint,
            referer=env.referer,
            title=env.title,
            timeout_seconds=completion.request_timeout_seconds,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key or ''}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.title:
            headers["X-Title"] = self.title
        return headers

    async def complete(self, model_id: str, prompt_text: str) -> ChatResponse:
        """Send one completion request and classify the outcome."""
        payload = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt_text}],
        }
        try:
            async with self._session_factory(timeout=self.timeout) as session:
                async with session.post(self.endpoint, headers=self._headers(), json=payload) as response:
                    body = await response.text()
                    result = classify_response(response.status, response.headers, body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("[COMPLETION] Transport failure calling %s: %r", model_id, exc)
            return TransientError(detail=f"Transport failure: {exc!r}")
        except Exception as exc:
            logger.exception("[COMPLETION] Unexpected failure calling %s", model_id)
            return TransientError(detail=f"Unexpected failure: {exc!r}")

        logger.debug("[COMPLETION] %s -> %s", model_id, type(result).__name__)
        return result

    async def fetch_key_status(self) -> KeyStatus:
        """Query the provider for the current key's quota.

        Raises:
            CompletionServiceError: On a non-200 status, transport failure,
                or an unparseable body.
        """
        try:
            async with self._session_factory(timeout=self.timeout) as session:
                async with session.get(self.key_status_endpoint, headers=self._headers()) as response:
                    body = await response.text()
                    status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise CompletionServiceError(f"Transport failure: {exc!r}") from exc

        payload = _try_json(body)
        if status != 200:
            raise CompletionServiceError(f"HTTP {status}: {_error_detail(body, payload)}")
        if not isinstance(payload, dict):
            raise CompletionServiceError("Key status response is not a JSON object.")
        return KeyStatus.from_payload(payload)
