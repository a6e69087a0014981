# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Sequence

import requests

from guidesphere.conversations.models import ChatAttachment
from guidesphere.utils.cli_helpers import env_bool

LOGGER = logging.getLogger(__name__)

# (role, text) pairs; role is "user" or "model"
History = Sequence[tuple[str, str]]

HISTORY_WINDOW = 10
REQUEST_TIMEOUT = 60


class LLMClientError(RuntimeError):
    """Raised when a provider call fails; the caller decides on a fallback."""


def _error(provider: str, exc: Exception, hint: str) -> LLMClientError:
    msg = f"{provider} error: request failed"
    if env_bool("LLM_ERROR_HINTS"):
        msg += f" ({exc}). {hint}"
    return LLMClientError(msg)


def _image_only(provider: str, attachment: ChatAttachment | None) -> bool:
    """True when ``attachment`` is an image the provider can take inline."""

    if attachment is None or not attachment.data:
        return False
    if attachment.type != "image":
        LOGGER.warning("%s: %s attachments are not sent", provider, attachment.type)
        return False
    return True


def _openai_content(text: str, attachment: ChatAttachment | None) -> str | list:
    if not _image_only("openai", attachment):
        return text
    url = f"data:{attachment.mime_type};base64,{attachment.data}"
    return [
        {"type": "text", "text": text},
        {"type": "image_url", "image_url": {"url": url}},
    ]


@dataclass
class LLMClient:
    name: str = "base"
    model: str | None = None

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: History = (),
        attachment: ChatAttachment | None = None,
    ) -> str:  # pragma: no cover - thin wrapper
        raise NotImplementedError


class GeminiClient(LLMClient):
    name = "gemini"

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        super().__init__(
            name=self.name,
            model=model
            or os.environ.get("GUIDESPHERE_LLM_MODEL")
            or "gemini-2.0-flash"
        )
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.base_url = base_url or os.environ.get(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: History = (),
        attachment: ChatAttachment | None = None,
    ) -> str:
        if not self.api_key:
            raise LLMClientError("gemini error: GEMINI_API_KEY is not set")
        contents = [
            {"role": "user" if role == "user" else "model", "parts": [{"text": text}]}
            for role, text in list(history)[-HISTORY_WINDOW:]
        ]
        parts: list[dict] = [{"text": user_prompt}]
        if attachment is not None and attachment.data:
            parts.append(
                {
                    "inlineData": {
                        "mimeType": attachment.mime_type,
                        "data": attachment.data,
                    }
                }
            )
        contents.append({"role": "user", "parts": parts})
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": contents,
        }
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            resp = requests.post(
                url,
                headers={
                    "x-goog-api-key": self.api_key,
                    "Content-Type": "application/json",
                },
                data=json.dumps(payload),
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            data = resp.json()
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(str(p.get("text", "")) for p in parts).strip()
        except (requests.RequestException, ValueError, KeyError, IndexError) as exc:
            LOGGER.debug("gemini request failed", exc_info=True)
            raise _error(
                "Gemini", exc, "Check GEMINI_API_KEY and the model name."
            ) from exc


class OpenAIClient(LLMClient):
    name = "openai"

    def __init__(
        self,
        model: str | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> None:
        super().__init__(
            name=self.name,
            model=model or os.environ.get("GUIDESPHERE_LLM_MODEL") or "gpt-4o-mini"
        )
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.base_url = base_url or os.environ.get(
            "OPENAI_BASE_URL", "https://api.openai.com/v1"
        )

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: History = (),
        attachment: ChatAttachment | None = None,
    ) -> str:
        if not self.api_key:
            raise LLMClientError("openai error: OPENAI_API_KEY is not set")
        messages = [{"role": "system", "content": system_prompt}]
        for role, text in list(history)[-HISTORY_WINDOW:]:
            messages.append(
                {"role": "user" if role == "user" else "assistant", "content": text}
            )
        messages.append(
            {"role": "user", "content": _openai_content(user_prompt, attachment)}
        )
        try:
            resp = requests.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                data=json.dumps(
                    {"model": self.model, "messages": messages, "temperature": 0.4}
                ),
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            data = resp.json()
            return str(data["choices"][0]["message"]["content"]).strip()
        except (requests.RequestException, ValueError, KeyError, IndexError) as exc:
            LOGGER.debug("openai request failed", exc_info=True)
            raise _error(
                "OpenAI", exc, "Check OPENAI_API_KEY and OPENAI_BASE_URL."
            ) from exc


class OllamaClient(LLMClient):
    name = "ollama"

    def __init__(
        self, model: str | None = None, *, base_url: str | None = None
    ) -> None:
        super().__init__(
            name=self.name,
            model=model or os.environ.get("GUIDESPHERE_LLM_MODEL") or "mistral"
        )
        self.base_url = base_url or os.environ.get(
            "OLLAMA_BASE_URL", "http://localhost:11434"
        )

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: History = (),
        attachment: ChatAttachment | None = None,
    ) -> str:
        messages = [{"role": "system", "content": system_prompt}]
        for role, text in list(history)[-HISTORY_WINDOW:]:
            messages.append(
                {"role": "user" if role == "user" else "assistant", "content": text}
            )
        user: dict = {"role": "user", "content": user_prompt}
        if _image_only(self.name, attachment):
            user["images"] = [attachment.data]
        messages.append(user)
        try:
            resp = requests.post(
                f"{self.base_url}/api/chat",
                data=json.dumps(
                    {"model": self.model, "messages": messages, "stream": False}
                ),
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            data = resp.json()
            return str(data.get("message", {}).get("content", "")).strip()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.debug("ollama request failed", exc_info=True)
            raise _error(
                "Ollama",
                exc,
                f"Ensure the server is started and reachable at {self.base_url}.",
            ) from exc


class MockClient(LLMClient):
    name = "mock"

    def __init__(self) -> None:
        super().__init__(name=self.name, model=None)

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: History = (),
        attachment: ChatAttachment | None = None,
    ) -> str:
        topic = user_prompt.strip().rstrip("?.!") or "your goal"
        # Very small template that exercises the numbered-step path
        return (
            f"Here is a simple journey for {topic}:\n"
            "1. Write down exactly what success looks like and why it matters.\n"
            "2. Block a fixed thirty minute slot in your calendar every day.\n"
            "3. Start with the smallest task that moves you forward today.\n"
            "4. Review your progress at the end of the week and adjust."
        )
