# SPDX-License-Identifier: Apache-2.0
"""Loading and saving conversations, plus the in-memory library API."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Sequence

from pydantic import ValidationError

from guidesphere.journey.models import JourneyStep

from .models import ChatMessage, ConversationRecord, StepRecord, StoreDocument

LOGGER = logging.getLogger(__name__)


class ConversationNotFoundError(KeyError):
    pass


class ConversationStore(ABC):
    """Persistence port: load and save the whole document at once."""

    @abstractmethod
    def load(self) -> StoreDocument:
        """Return the stored document, or an empty one."""

    @abstractmethod
    def save(self, document: StoreDocument) -> None:
        """Replace the stored document."""


class InMemoryConversationStore(ConversationStore):
    def __init__(self, document: StoreDocument | None = None) -> None:
        self._json = (document or StoreDocument()).model_dump_json(by_alias=True)

    def load(self) -> StoreDocument:
        return StoreDocument.model_validate_json(self._json)

    def save(self, document: StoreDocument) -> None:
        self._json = document.model_dump_json(by_alias=True)


class JsonConversationStore(ConversationStore):
    """Store the document as a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> StoreDocument:
        if not self.path.exists():
            return StoreDocument()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return StoreDocument.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            LOGGER.warning(
                "ignoring unreadable conversation store %s: %s", self.path, exc
            )
            return StoreDocument()

    def save(self, document: StoreDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(
            json.dumps(document.to_json_obj(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        tmp.replace(self.path)


class ConversationLibrary:
    """Ordered conversations (newest first) and the selected one.

    Every mutation is written through to the store when ``autosave`` is on.
    """

    def __init__(self, store: ConversationStore, *, autosave: bool = True) -> None:
        self.store = store
        self.autosave = autosave
        doc = store.load()
        self._conversations: list[ConversationRecord] = list(doc.conversations)
        self._active_id = doc.active_id
        if self._active_id is not None and not self._find(self._active_id):
            self._active_id = None

    @property
    def conversations(self) -> tuple[ConversationRecord, ...]:
        return tuple(self._conversations)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active(self) -> ConversationRecord | None:
        return self._find(self._active_id) if self._active_id else None

    def _find(self, conversation_id: str | None) -> ConversationRecord | None:
        for convo in self._conversations:
            if convo.id == conversation_id:
                return convo
        return None

    def get(self, conversation_id: str) -> ConversationRecord:
        convo = self._find(conversation_id)
        if convo is None:
            raise ConversationNotFoundError(conversation_id)
        return convo

    def create(self, name: str | None = None) -> ConversationRecord:
        convo = ConversationRecord(
            name=(name or "").strip() or f"Journey {len(self._conversations) + 1}"
        )
        self._conversations.insert(0, convo)
        self._active_id = convo.id
        self._changed()
        return convo

    def select(self, conversation_id: str) -> ConversationRecord:
        convo = self.get(conversation_id)
        self._active_id = convo.id
        self._changed()
        return convo

    def rename(self, conversation_id: str, name: str) -> ConversationRecord:
        name = name.strip()
        if not name:
            raise ValueError("conversation name must not be empty")
        convo = self.get(conversation_id)
        convo.name = name
        self._changed()
        return convo

    def delete(self, conversation_id: str) -> None:
        convo = self.get(conversation_id)
        self._conversations.remove(convo)
        if self._active_id == conversation_id:
            self._active_id = (
                self._conversations[0].id if self._conversations else None
            )
        self._changed()

    def search(self, query: str) -> list[ConversationRecord]:
        needle = query.strip().lower()
        return [c for c in self._conversations if needle in c.name.lower()]

    def append_messages(
        self, conversation_id: str, messages: Iterable[ChatMessage]
    ) -> ConversationRecord:
        convo = self.get(conversation_id)
        convo.messages = [*convo.messages, *messages]
        self._changed()
        return convo

    def replace_steps(
        self, conversation_id: str, steps: Sequence[JourneyStep]
    ) -> ConversationRecord:
        convo = self.get(conversation_id)
        convo.journey_steps = [StepRecord.from_step(step) for step in steps]
        self._changed()
        return convo

    def save(self) -> None:
        self.store.save(
            StoreDocument(conversations=self._conversations, active_id=self._active_id)
        )

    def _changed(self) -> None:
        if self.autosave:
            self.save()
