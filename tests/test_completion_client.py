import asyncio
import json

import aiohttp
import pytest

from auditcord.completion.completion_client import (
    CompletionClient,
    CompletionServiceError,
    classify_response,
)
from auditcord.configuration.app_configuration import AppConfig
from auditcord.configuration.env_settings import EnvSettings
from auditcord.datatypes.chat_datatypes import ClientError, KeyStatus, RateLimited, Success, TransientError


class FakeResponse:
    def __init__(self, status: int, body: str, headers=None):
        self.status = status
        self.body = body
        self.headers = headers or {}

    async def text(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list = []
        self.session_kwargs: dict = {}

    def __call__(self, **kwargs):
        self.session_kwargs = kwargs
        return self

    def _request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


def _client(session: FakeSession, **kwargs) -> CompletionClient:
    return CompletionClient(
        "sk-test",
        "https://example.invalid/chat/completions",
        "https://example.invalid/key",
        session_factory=session,
        **kwargs,
    )


def _completion_body(content="Hello there") -> str:
    return json.dumps({"choices": [{"message": {"role": "assistant", "content": content}}], "usage": {"total_tokens": 5}})


# ---- classification ----

def test_classify_success():
    result = classify_response(200, {}, _completion_body("  hi  "))

    assert isinstance(result, Success)
    assert result.reply_text == "hi"
    assert result.raw_payload["usage"] == {"total_tokens": 5}


def test_classify_rate_limited_extracts_hints():
    headers = {"Retry-After": "3", "X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000000"}

    result = classify_response(429, headers, "{}")

    assert result == RateLimited(retry_after="3", remaining="0", reset="1700000000000")


def test_classify_rate_limited_without_hints():
    assert classify_response(429, {}, "") == RateLimited()


def test_classify_bad_request_is_client_error():
    body = json.dumps({"error": {"message": "model not found", "code": 400}})

    result = classify_response(400, {}, body)

    assert result == ClientError(detail="model not found", status=400)


@pytest.mark.parametrize("status", [401, 402, 404, 500, 502, 503])
def test_classify_other_statuses_are_transient(status):
    result = classify_response(status, {}, "upstream exploded")

    assert isinstance(result, TransientError)
    assert result.status == status
    assert "upstream exploded" in result.detail


@pytest.mark.parametrize("body", ["not json", "{}", json.dumps({"choices": []}), json.dumps({"choices": [{"message": {"content": ""}}]})])
def test_classify_malformed_success_is_transient(body):
    assert isinstance(classify_response(200, {}, body), TransientError)


# ---- requests ----

@pytest.mark.asyncio
async def test_complete_posts_expected_request():
    session = FakeSession(FakeResponse(200, _completion_body()))
    client = _client(session, referer="https://example.org", title="Auditcord")

    result = await client.complete("openai/gpt-4o-mini", "hello")

    assert result.reply_text == "Hello there"
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://example.invalid/chat/completions"
    assert call["json"] == {"model": "openai/gpt-4o-mini", "messages": [{"role": "user", "content": "hello"}]}
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["headers"]["HTTP-Referer"] == "https://example.org"
    assert call["headers"]["X-Title"] == "Auditcord"
    assert isinstance(session.session_kwargs["timeout"], aiohttp.ClientTimeout)


@pytest.mark.asyncio
async def test_complete_omits_optional_ranking_headers():
    session = FakeSession(FakeResponse(200, _completion_body()))

    await _client(session).complete("m", "p")

    headers = session.calls[0]["headers"]
    assert "HTTP-Referer" not in headers
    assert "X-Title" not in headers


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()])
async def test_complete_transport_failure_is_transient(error):
    session = FakeSession(error=error)

    result = await _client(session).complete("m", "p")

    assert isinstance(result, TransientError)
    assert result.status is None


@pytest.mark.asyncio
async def test_fetch_key_status_parses_payload():
    payload = {
        "data": {
            "label": "sk-or-v1-abc",
            "usage": 1.25,
            "limit": 10,
            "limit_remaining": 8.75,
            "is_free_tier": False,
            "rate_limit": {"requests": 20, "interval": "10s"},
        }
    }
    session = FakeSession(FakeResponse(200, json.dumps(payload)))

    status = await _client(session).fetch_key_status()

    assert status == KeyStatus(
        label="sk-or-v1-abc",
        usage=1.25,
        limit=10,
        limit_remaining=8.75,
        is_free_tier=False,
        rate_limit_requests=20,
        rate_limit_interval="10s",
    )
    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"] == "https://example.invalid/key"


@pytest.mark.asyncio
async def test_fetch_key_status_http_error_raises():
    session = FakeSession(FakeResponse(401, json.dumps({"error": {"message": "No auth credentials found"}})))

    with pytest.raises(CompletionServiceError, match="No auth credentials found"):
        await _client(session).fetch_key_status()


@pytest.mark.asyncio
async def test_fetch_key_status_transport_error_raises():
    session = FakeSession(error=aiohttp.ClientConnectionError("dns"))

    with pytest.raises(CompletionServiceError):
        await _client(session).fetch_key_status()


def test_from_settings_uses_config_and_env(tmp_path):
    config_path = tmp_path / "app_config.yml"
    config_path.write_text(
        "completion:\n"
        "  endpoint: https://llm.invalid/v1/chat/completions\n"
        "  key_status_endpoint: https://llm.invalid/v1/key\n"
        "  request_timeout_seconds: 15\n",
        encoding="utf-8",
    )
    env = EnvSettings(discord_token="t", api_key="k", referer="r", title="x")

    client = CompletionClient.from_settings(env, AppConfig(config_path))

    assert client.endpoint == "https://llm.invalid/v1/chat/completions"
    assert client.key_status_endpoint == "https://llm.invalid/v1/key"
    assert client.timeout.total == 15
    assert (client.api_key, client.referer, client.title) == ("k", "r", "x")


@pytest.mark.asyncio
async def test_fetch_key_status_reads_reset_and_tolerates_odd_rate_limit():
    payload = {"data": {"limit_reset": "monthly", "rate_limit": {"requests": "unlimited", "interval": "1m"}}}
    session = FakeSession(FakeResponse(200, json.dumps(payload)))

    status = await _client(session).fetch_key_status()

    assert status.limit_reset == "monthly"
    assert status.rate_limit_requests is None
    assert status.rate_limit_interval == "1m"


@pytest.mark.parametrize("requests", [None, "unlimited", [20]])
def test_key_status_non_numeric_request_limit(requests):
    status = KeyStatus.from_payload({"data": {"rate_limit": {"requests": requests}}})

    assert status.rate_limit_requests is None


def test_key_status_numeric_string_request_limit():
    assert KeyStatus.from_payload({"data": {"rate_limit": {"requests": "20"}}}).rate_limit_requests == 20
