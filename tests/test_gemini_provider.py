import httpx
import pytest

from aac.config import GenerationConfig
from aac.exceptions import GenAuthError, GenQuotaError, GenUnavailable
from aac.providers.base import classify_provider_error
from aac.providers.gemini_driver import GeminiDriver


def _config(**overrides):
    values = dict(api_key="g-key", auto_commit_enabled=False, custom_prompt="p")
    values.update(overrides)
    return GenerationConfig(**values)


class _Resp:
    def __init__(self, status_code=200, payload=None, text="", bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("not json")
        return self._payload


def _patch_post(monkeypatch, response=None, error=None):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None, **_kw):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(httpx, "post", fake_post)
    return calls


def test_success_joins_text_parts(monkeypatch):
    payload = {
        "candidates": [
            {"content": {"parts": [{"text": "【fix】バグ修正"}, {"text": "\n\n本文"}]}}
        ]
    }
    calls = _patch_post(monkeypatch, _Resp(payload=payload))

    text = GeminiDriver(_config(request_timeout=12.5)).invoke("PROMPT")

    assert text == "【fix】バグ修正\n\n本文"
    call = calls[0]
    assert call["url"].endswith("/models/gemini-2.0-flash-001:generateContent")
    assert call["headers"]["x-goog-api-key"] == "g-key"
    assert call["json"]["contents"][0]["parts"][0]["text"] == "PROMPT"
    assert call["timeout"] == 12.5


def test_invalid_key_maps_to_auth_error(monkeypatch):
    body = '{"error": {"code": 400, "status": "INVALID_ARGUMENT", "details": [{"reason": "API_KEY_INVALID"}]}}'
    _patch_post(monkeypatch, _Resp(status_code=400, text=body))

    with pytest.raises(GenAuthError):
        GeminiDriver(_config()).invoke("p")


def test_quota_maps_to_quota_error(monkeypatch):
    body = '{"error": {"code": 429, "status": "RESOURCE_EXHAUSTED"}}'
    _patch_post(monkeypatch, _Resp(status_code=429, text=body))

    with pytest.raises(GenQuotaError):
        GeminiDriver(_config()).invoke("p")


@pytest.mark.parametrize(
    "response",
    [
        _Resp(status_code=500, text="internal"),
        _Resp(bad_json=True),
        _Resp(payload={"candidates": []}),
        _Resp(payload={"promptFeedback": {"blockReason": "SAFETY"}}),
        _Resp(payload={"candidates": [{"content": {"parts": [{"text": "  "}]}}]}),
        _Resp(payload=["not", "a", "dict"]),
        _Resp(payload={"candidates": [None]}),
        _Resp(payload={"candidates": [{"content": "oops"}]}),
        _Resp(payload={"candidates": {"content": {}}}),
        _Resp(payload={"candidates": [{"content": {"parts": "text"}}]}),
        _Resp(payload={"candidates": [{"content": {"parts": [{"text": None}]}}]}),
    ],
)
def test_other_failures_map_to_unavailable(monkeypatch, response):
    _patch_post(monkeypatch, response)

    with pytest.raises(GenUnavailable):
        GeminiDriver(_config()).invoke("p")


def test_network_error_maps_to_unavailable(monkeypatch):
    _patch_post(monkeypatch, error=httpx.ConnectTimeout("timed out"))

    with pytest.raises(GenUnavailable):
        GeminiDriver(_config()).invoke("p")


@pytest.mark.parametrize(
    "status,detail,expected",
    [
        (401, "", GenAuthError),
        (403, "", GenAuthError),
        (400, "API_KEY_INVALID", GenAuthError),
        (429, "", GenQuotaError),
        (400, "QUOTA_EXCEEDED", GenQuotaError),
        (503, "overloaded", GenUnavailable),
        (None, "", GenUnavailable),
    ],
)
def test_classify_provider_error(status, detail, expected):
    assert classify_provider_error(status, detail) is expected


def test_non_text_parts_are_skipped(monkeypatch):
    payload = {
        "candidates": [
            {"content": {"parts": [{"text": None}, {"inlineData": {}}, {"text": "fix: x"}]}}
        ]
    }
    _patch_post(monkeypatch, _Resp(payload=payload))

    assert GeminiDriver(_config()).invoke("p") == "fix: x"
