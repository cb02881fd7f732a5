import json

import httpx
import pytest

from gemini_client import GeminiClient, GeminiError


def _client(handler):
    return GeminiClient(
        "test-key", base_url="https://gemini.test", transport=httpx.MockTransport(handler)
    )


def _ok(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError):
        GeminiClient()


def test_generate_json_mode_payload():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return _ok('{"a": 1}')

    c = _client(handler)
    out = c.generate("gemini-2.5-flash", "hello", json_mode=True, temperature=0.9, max_output_tokens=512)
    c.close()

    assert out == '{"a": 1}'
    assert "/v1beta/models/gemini-2.5-flash:generateContent" in seen["url"]
    assert "key=test-key" in seen["url"]
    cfg = seen["body"]["generationConfig"]
    assert cfg["responseMimeType"] == "application/json"
    assert cfg["maxOutputTokens"] == 512
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "hello"


def test_plain_mode_sends_no_generation_config():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return _ok("hi")

    c = _client(handler)
    assert c.generate("m", "p") == "hi"
    assert "generationConfig" not in seen["body"]


def test_http_error_raises_gemini_error():
    c = _client(lambda request: httpx.Response(429, text="quota"))
    with pytest.raises(GeminiError) as ei:
        c.generate("m", "p")
    assert "429" in str(ei.value)


def test_unexpected_shape_raises_gemini_error():
    c = _client(lambda request: httpx.Response(200, json={"candidates": []}))
    with pytest.raises(GeminiError):
        c.generate("m", "p")


def test_network_error_raises_gemini_error():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(GeminiError):
        _client(handler).generate("m", "p")


def test_list_models():
    c = _client(lambda request: httpx.Response(200, json={"models": [{"name": "models/x"}]}))
    assert c.list_models()["models"][0]["name"] == "models/x"
