"""
Bounded exponential-backoff retries around the completion client.

The controller is a two-state machine over the attempt counter ``a``:

=================================  ===========================================
outcome of attempt ``a``           transition
=================================  ===========================================
RateLimited, ``a < max - 1``       RETRY: sleep ``2 ** a`` seconds, ``a += 1``
RateLimited, ``a == max - 1``      TERMINAL: return RateLimited
Success / ClientError /            TERMINAL: return as-is
TransientError
=================================  ===========================================

Every terminal outcome is handed to the reporter (the interaction logger)
before ``send`` returns.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Protocol

from auditcord.datatypes.chat_datatypes import ChatRequest, ChatResponse, RateLimited
from auditcord.util.logger import get_logger

logger = get_logger("retry_controller")

DEFAULT_MAX_ATTEMPTS = 3

Reporter = Callable[[ChatRequest, ChatResponse, int], Awaitable[object]]


class CompletionBackend(Protocol):
    async def complete(self, model_id: str, prompt_text: str) -> ChatResponse: ...


class Transition(Enum):
    RETRY = "retry"
    TERMINAL = "terminal"


def next_transition(response: ChatResponse, attempt: int, max_attempts: int) -> Transition:
    """Decide what follows attempt number ``attempt`` (0-based)."""
    if isinstance(response, RateLimited) and attempt < max_attempts - 1:
        return Transition.RETRY
    return Transition.TERMINAL


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after rate-limited attempt ``attempt``: 1, 2, 4, ..."""
    return float(2 ** attempt)


class RetryController:
    """Drives a ``CompletionBackend`` until a terminal outcome.

    Parameters
    ----------
    client:
        Anything with an async ``complete(model_id, prompt_text)``.
    reporter:
        Awaited once with ``(request, response, attempts)`` for every
        terminal outcome. Its failures are logged and never replace the
        outcome.
    max_attempts:
        Default attempt budget for ``send``.
    sleep:
        Awaitable sleep; only the calling task is suspended.
    """

    def __init__(
        self,
        client: CompletionBackend,
        reporter: Reporter | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.reporter = reporter
        self.max_attempts = max(1, max_attempts)
        self._sleep = sleep

    async def send(self, request: ChatRequest, max_attempts: int | None = None) -> ChatResponse:
        """Run ``request`` to a terminal outcome and return it."""
        budget = max(1, max_attempts if max_attempts is not None else self.max_attempts)
        attempt = 0

        while True:
            response = await self.client.complete(request.model_id, request.prompt_text)

            match next_transition(response, attempt, budget):
                case Transition.RETRY:
                    delay = backoff_delay(attempt)
                    logger.info(
                        "[RETRY] %s rate-limited (attempt %s/%s); retrying in %.0fs",
                        request.model_id, attempt + 1, budget, delay,
                    )
                    await self._sleep(delay)
                    attempt += 1
                case Transition.TERMINAL:
                    if isinstance(response, RateLimited):
                        logger.warning("[RETRY] %s still rate-limited after %s attempts", request.model_id, budget)
                    await self._report(request, response, attempt + 1)
                    return response

    async def _report(self, request: ChatRequest, response: ChatResponse, attempts: int) -> None:
        if self.reporter is None:
            return
        try:
            await self.reporter(request, response, attempts)
        except Exception:
            logger.exception("[RETRY] Reporting the outcome for %s failed", request.model_id)
