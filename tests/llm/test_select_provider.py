# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import pytest

import guidesphere.llm as llm


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in (
        "GUIDESPHERE_LLM_PROVIDER",
        "GUIDESPHERE_LLM_MODEL",
        "GEMINI_API_KEY",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)


def test_default_gemini_without_key_falls_back_to_mock():
    client = llm.select_provider()
    assert isinstance(client, llm.MockClient)


def test_openai_from_env_without_key_falls_back(monkeypatch):
    monkeypatch.setenv("GUIDESPHERE_LLM_PROVIDER", "openai")
    assert isinstance(llm.select_provider(), llm.MockClient)


def test_gemini_with_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "k")
    client = llm.select_provider(model="gemini-test")
    assert isinstance(client, llm.GeminiClient)
    assert client.name == "gemini"
    assert client.model == "gemini-test"


def test_explicit_and_unknown_providers():
    assert isinstance(llm.select_provider(provider="mock"), llm.MockClient)
    assert isinstance(llm.select_provider(provider="nope"), llm.MockClient)
    ollama = llm.select_provider(provider="OLLAMA")
    assert isinstance(ollama, llm.OllamaClient)
    assert ollama.model == "mistral"


def test_config_file_is_used(tmp_path):
    (tmp_path / ".guidesphere.yaml").write_text(
        "provider: ollama\nmodel: llama3\n", encoding="utf-8"
    )
    client = llm.select_provider()
    assert isinstance(client, llm.OllamaClient)
    assert client.model == "llama3"


def test_env_beats_config(monkeypatch, tmp_path):
    (tmp_path / ".guidesphere.yaml").write_text("provider: ollama\n", encoding="utf-8")
    monkeypatch.setenv("GUIDESPHERE_LLM_PROVIDER", "mock")
    assert isinstance(llm.select_provider(), llm.MockClient)


def test_broken_config_is_ignored(tmp_path):
    (tmp_path / ".guidesphere.yaml").write_text("provider: [unclosed", encoding="utf-8")
    assert llm._load_config() == {}
