# SPDX-License-Identifier: Apache-2.0
"""AI text-completion clients and provider selection."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from . import llm_client
from .llm_client import (
    GeminiClient,
    LLMClient,
    LLMClientError,
    MockClient,
    OllamaClient,
    OpenAIClient,
)
from .prompts import SYSTEM_PROMPT, build_system_prompt

LOGGER = logging.getLogger(__name__)

CONFIG_PATH = "~/.guidesphere.yaml"


def _load_config() -> dict:
    """Load client config from ``~/.guidesphere.yaml`` if present.

    Keys supported:
    - provider: "gemini" | "openai" | "ollama" | "mock"
    - model: model name string
    """
    path = Path(CONFIG_PATH).expanduser()
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        LOGGER.warning("ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): v for k, v in data.items()}


def select_provider(provider: str | None = None, model: str | None = None) -> LLMClient:
    """Pick a client from arguments, then environment, then the config file.

    Hosted providers without a configured API key fall back to the mock
    client so the journey view still has something to show.
    """

    cfg = _load_config()
    prov = (
        provider
        or os.environ.get("GUIDESPHERE_LLM_PROVIDER")
        or cfg.get("provider")
        or "gemini"
    )
    prov = str(prov).lower()
    model_name = (
        model or os.environ.get("GUIDESPHERE_LLM_MODEL") or cfg.get("model") or None
    )
    if prov == "gemini":
        client: LLMClient = GeminiClient(model=model_name)
    elif prov == "openai":
        client = OpenAIClient(model=model_name)
    elif prov == "ollama":
        return OllamaClient(model=model_name)
    elif prov == "mock":
        return MockClient()
    else:
        LOGGER.warning("unknown LLM provider %r; using mock", prov)
        return MockClient()
    if not getattr(client, "api_key", None):
        LOGGER.warning("no API key for %s; using mock responses", client.name)
        return MockClient()
    return client


__all__ = [
    "llm_client",
    "GeminiClient",
    "LLMClient",
    "LLMClientError",
    "MockClient",
    "OllamaClient",
    "OpenAIClient",
    "SYSTEM_PROMPT",
    "build_system_prompt",
    "select_provider",
]
