import json
from types import SimpleNamespace

import pytest

from auditcord.completion.interaction_logger import InteractionLogger, build_log_record, format_log_record
from auditcord.datatypes.chat_datatypes import (
    ChatRequest,
    ClientError,
    LogRecord,
    RateLimited,
    Success,
    TransientError,
)

REQUEST = ChatRequest(model_id="model-x", prompt_text="hello", guild_id=1)


def _decode(message: str) -> dict:
    assert message.startswith("```json\n") and message.endswith("\n```")
    return json.loads(message[len("```json\n"):-len("\n```")])


def test_success_builds_request_record():
    record = build_log_record(REQUEST, Success("hi!", {"usage": {"total_tokens": 9}}), attempts=1)

    assert record.kind == "request"
    assert record.payload["model"] == "model-x"
    assert record.payload["prompt"] == "hello"
    assert record.payload["response"] == "hi!"
    assert record.payload["usage"] == {"total_tokens": 9}
    assert record.payload["attempts"] == 1


@pytest.mark.parametrize(
    "response, error",
    [
        (RateLimited(retry_after="5"), "rate_limited"),
        (ClientError("bad model"), "client_error"),
        (TransientError("HTTP 502: bad gateway", status=502), "transient_error"),
    ],
)
def test_failures_build_error_records(response, error):
    record = build_log_record(REQUEST, response, attempts=3)

    assert record.kind == "error"
    assert record.payload["error"] == error
    assert record.payload["attempts"] == 3


def test_rate_limited_record_keeps_only_present_hints():
    record = build_log_record(REQUEST, RateLimited(retry_after="5"), attempts=3)

    assert record.payload["hints"] == {"retry_after": "5"}


def test_format_log_record_is_json_code_block():
    record = LogRecord(kind="request", payload={"model": "m", "prompt": "p"})

    decoded = _decode(format_log_record(record))

    assert decoded == {"kind": "request", "model": "m", "prompt": "p"}


def test_format_log_record_fits_one_message():
    record = LogRecord(kind="request", payload={"response": "x" * 5000})

    assert len(format_log_record(record)) <= 2000


@pytest.mark.asyncio
async def test_log_sends_to_logs_channel(fake_guild_cls, fake_channel_cls):
    logs = fake_channel_cls("bot-logs")
    guild = fake_guild_cls([fake_channel_cls("bot-warning"), logs])

    sent = await InteractionLogger().log(guild, LogRecord(kind="error", payload={"error": "x"}))

    assert sent is True
    assert _decode(logs.sent[0])["kind"] == "error"


@pytest.mark.asyncio
async def test_log_without_channel_is_silent(fake_guild_cls):
    assert await InteractionLogger().log(fake_guild_cls([]), LogRecord(kind="error", payload={})) is False


@pytest.mark.asyncio
async def test_log_without_guild_is_silent():
    assert await InteractionLogger().log(None, LogRecord(kind="request", payload={})) is False


@pytest.mark.asyncio
async def test_record_outcome_resolves_guild_through_bot(fake_guild_cls, fake_channel_cls):
    logs = fake_channel_cls("bot-logs")
    guild = fake_guild_cls([logs], guild_id=1)
    bot = SimpleNamespace(get_guild=lambda guild_id: guild if guild_id == 1 else None)

    sent = await InteractionLogger(bot).record_outcome(REQUEST, Success("hi"), 1)

    assert sent is True
    assert _decode(logs.sent[0])["response"] == "hi"


def test_format_log_record_keeps_fence_closed():
    record = build_log_record(REQUEST, Success("```python\nprint('hi')\n```"), attempts=1)

    message = format_log_record(record)

    assert message.count("```") == 2
    assert message.startswith("```json\n") and message.endswith("\n```")
