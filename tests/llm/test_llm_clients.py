# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import json

import pytest
import requests

from guidesphere.conversations import ChatAttachment
from guidesphere.journey.parser import parse_steps
from guidesphere.llm import llm_client
from guidesphere.llm.llm_client import (
    GeminiClient,
    LLMClientError,
    MockClient,
    OllamaClient,
    OpenAIClient,
)


class _Resp:
    def __init__(self, payload) -> None:
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self):
        return self._payload


def _capture(monkeypatch, payload):
    calls: list[dict] = []

    def fake_post(url, headers=None, data=None, timeout=None):
        calls.append({"url": url, "headers": headers or {}, "body": json.loads(data)})
        return _Resp(payload)

    monkeypatch.setattr(llm_client.requests, "post", fake_post)
    return calls


def _refuse(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("refused by http://localhost:11434")

    monkeypatch.setattr(llm_client.requests, "post", fake_post)


def test_gemini_request_and_history_window(monkeypatch):
    calls = _capture(
        monkeypatch,
        {"candidates": [{"content": {"parts": [{"text": " 1. Go "}, {"text": "on"}]}}]},
    )
    client = GeminiClient(model="gemini-x", api_key="secret", base_url="http://g")
    history = [("user" if i % 2 else "model", f"m{i}") for i in range(12)]
    out = client.generate("sys", "question", history)

    assert out == "1. Go on"
    call = calls[0]
    assert call["url"] == "http://g/models/gemini-x:generateContent"
    assert call["headers"]["x-goog-api-key"] == "secret"
    body = call["body"]
    assert body["systemInstruction"]["parts"][0]["text"] == "sys"
    assert len(body["contents"]) == 11
    assert body["contents"][0]["parts"][0]["text"] == "m2"
    assert body["contents"][-1] == {"role": "user", "parts": [{"text": "question"}]}


def test_openai_maps_roles(monkeypatch):
    calls = _capture(
        monkeypatch, {"choices": [{"message": {"content": "  answer  "}}]}
    )
    client = OpenAIClient(model="gpt-x", api_key="k", base_url="http://o")
    out = client.generate("sys", "q", [("user", "a"), ("model", "b")])
    assert out == "answer"
    roles = [m["role"] for m in calls[0]["body"]["messages"]]
    assert roles == ["system", "user", "assistant", "user"]
    assert calls[0]["headers"]["Authorization"] == "Bearer k"


def test_missing_key_raises(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(LLMClientError):
        GeminiClient().generate("s", "u")
    with pytest.raises(LLMClientError):
        OpenAIClient().generate("s", "u")


def test_malformed_payload_raises(monkeypatch):
    _capture(monkeypatch, {"candidates": []})
    with pytest.raises(LLMClientError, match="Gemini error"):
        GeminiClient(api_key="k").generate("s", "u")


def test_ollama_error_no_leak_by_default(monkeypatch):
    monkeypatch.delenv("GUIDESPHERE_LLM_ERROR_HINTS", raising=False)
    _refuse(monkeypatch)
    client = OllamaClient(model="mistral", base_url="http://localhost:11434")
    with pytest.raises(LLMClientError) as info:
        client.generate("sys", "user")
    msg = str(info.value)
    assert "Ollama error: request failed" in msg
    assert "localhost" not in msg and "http://" not in msg


def test_ollama_error_hints_enabled(monkeypatch):
    monkeypatch.setenv("GUIDESPHERE_LLM_ERROR_HINTS", "1")
    _refuse(monkeypatch)
    client = OllamaClient(model="mistral", base_url="http://localhost:11434")
    with pytest.raises(LLMClientError, match="Ensure the server is started"):
        client.generate("sys", "user")


def test_mock_reply_parses_into_steps():
    client = MockClient()
    assert client.name == "mock"
    steps = parse_steps(client.generate("sys", "How do I save money?"))
    assert len(steps) == 4
    assert steps[0].title == "Step 1"


def test_gemini_sends_attachment_inline(monkeypatch):
    calls = _capture(
        monkeypatch, {"candidates": [{"content": {"parts": [{"text": "1. Ok"}]}}]}
    )
    client = GeminiClient(model="gemini-x", api_key="secret", base_url="http://g")
    scan = ChatAttachment(type="pdf", mime_type="application/pdf", data="JVBERi0=")
    client.generate("sys", "summarize this", attachment=scan)

    last = calls[0]["body"]["contents"][-1]
    assert last["role"] == "user"
    assert last["parts"] == [
        {"text": "summarize this"},
        {"inlineData": {"mimeType": "application/pdf", "data": "JVBERi0="}},
    ]


def test_openai_sends_image_as_data_url(monkeypatch):
    calls = _capture(monkeypatch, {"choices": [{"message": {"content": "ok"}}]})
    client = OpenAIClient(model="gpt-x", api_key="k", base_url="http://o")
    photo = ChatAttachment(type="image", mime_type="image/jpeg", data="/9j/")
    client.generate("sys", "what is this?", attachment=photo)

    content = calls[0]["body"]["messages"][-1]["content"]
    assert content[0] == {"type": "text", "text": "what is this?"}
    assert content[1]["image_url"]["url"] == "data:image/jpeg;base64,/9j/"


def test_ollama_skips_audio_attachment(monkeypatch):
    calls = _capture(monkeypatch, {"message": {"content": "ok"}})
    client = OllamaClient(model="llama", base_url="http://ol")
    clip = ChatAttachment(type="audio", mime_type="audio/mpeg", data="SUQz")
    client.generate("sys", "listen", attachment=clip)
    assert "images" not in calls[0]["body"]["messages"][-1]
