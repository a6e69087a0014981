# SPDX-License-Identifier: Apache-2.0
"""Persisted conversation records (camelCase on the wire)."""

from __future__ import annotations

import time
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guidesphere.journey.models import JourneyStep, Position


def now_ms() -> int:
    return int(time.time() * 1000)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_obj(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ChatAttachment(_Record):
    type: Literal["image", "pdf", "audio"]
    mime_type: str = Field(alias="mimeType")
    data: str = Field(description="Base64 payload")


class ChatMessage(_Record):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "model"]
    text: str = ""
    timestamp: int = Field(default_factory=now_ms)
    attachment: ChatAttachment | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _legacy_role(cls, value: object) -> object:
        # older records used "ai" for assistant turns
        if value == "ai":
            return "model"
        return value


class PositionRecord(_Record):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class StepRecord(_Record):
    id: str
    title: str
    content: str
    position: PositionRecord
    is_active: bool = Field(default=False, alias="isActive")
    is_completed: bool = Field(default=False, alias="isCompleted")

    @classmethod
    def from_step(cls, step: JourneyStep) -> StepRecord:
        return cls(
            id=step.id,
            title=step.title,
            content=step.content,
            position=PositionRecord(lat=step.position.lat, lng=step.position.lng),
            is_active=step.is_active,
            is_completed=step.is_completed,
        )

    def to_step(self) -> JourneyStep:
        return JourneyStep(
            id=self.id,
            title=self.title,
            content=self.content,
            position=Position(lat=self.position.lat, lng=self.position.lng),
            is_active=self.is_active,
            is_completed=self.is_completed,
        )


class ConversationRecord(_Record):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    messages: list[ChatMessage] = Field(default_factory=list)
    journey_steps: list[StepRecord] = Field(default_factory=list, alias="journeySteps")

    def steps(self) -> list[JourneyStep]:
        return [record.to_step() for record in self.journey_steps]


class StoreDocument(_Record):
    conversations: list[ConversationRecord] = Field(default_factory=list)
    active_id: str | None = Field(default=None, alias="activeId")
