"""Tests for the Anthropic Messages API client (mock transport)."""

import json

import httpx
import pytest

from tradepulse.core.config import CoachConfig
from tradepulse.journal.coach import ANALYSIS_FALLBACK, TradeCoach
from tradepulse.llm import AnthropicTextClient, LLMConfigError, LLMResponseError

from .journal.conftest import make_trade


def _client(handler, **cfg) -> AnthropicTextClient:
    config = CoachConfig(api_key_env="TEST_COACH_KEY", model="test-model", **cfg)
    http = httpx.Client(
        base_url=config.base_url, transport=httpx.MockTransport(handler)
    )
    return AnthropicTextClient(config, http=http)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("TEST_COACH_KEY", "sk-test")


class TestGenerate:
    def test_request_shape(self, api_key):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"content": [{"type": "text", "text": "ok"}]})

        client = _client(handler, max_tokens=256)
        assert client.generate("hello", "be brief") == "ok"
        assert seen["path"] == "/v1/messages"
        assert seen["headers"]["x-api-key"] == "sk-test"
        assert seen["headers"]["anthropic-version"] == "2023-06-01"
        assert seen["body"]["model"] == "test-model"
        assert seen["body"]["max_tokens"] == 256
        assert seen["body"]["system"] == "be brief"
        assert seen["body"]["messages"] == [{"role": "user", "content": "hello"}]

    def test_no_system_when_absent(self, api_key):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"content": [{"type": "text", "text": "x"}]})

        _client(handler).generate("hello")
        assert "system" not in bodies[0]

    def test_joins_text_blocks(self, api_key):
        def handler(request):
            return httpx.Response(200, json={"content": [
                {"type": "text", "text": "a"},
                {"type": "tool_use", "id": "t1"},
                {"type": "text", "text": "b"},
            ]})

        assert _client(handler).generate("p") == "ab"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("TEST_COACH_KEY", raising=False)
        client = _client(lambda r: httpx.Response(200, json={}))
        with pytest.raises(LLMConfigError, match="TEST_COACH_KEY"):
            client.generate("p")

    def test_http_error(self, api_key):
        client = _client(lambda r: httpx.Response(529, json={"error": "overloaded"}))
        with pytest.raises(LLMResponseError):
            client.generate("p")

    def test_non_json_body(self, api_key):
        client = _client(lambda r: httpx.Response(200, text="<html>gateway</html>"))
        with pytest.raises(LLMResponseError, match="invalid JSON"):
            client.generate("p")

    def test_non_object_body(self, api_key):
        client = _client(lambda r: httpx.Response(200, json=["not", "an", "object"]))
        with pytest.raises(LLMResponseError):
            client.generate("p")

    def test_no_text_blocks(self, api_key):
        client = _client(lambda r: httpx.Response(200, json={"content": []}))
        with pytest.raises(LLMResponseError, match="no text"):
            client.generate("p")


def test_coach_falls_back_on_client_error(api_key):
    client = _client(lambda r: httpx.Response(500))
    coach = TradeCoach(client)
    assert coach.analyze([make_trade(1)]) == ANALYSIS_FALLBACK
    client.close()
