# SPDX-License-Identifier: Apache-2.0
from .models import (
    ChatAttachment,
    ChatMessage,
    ConversationRecord,
    StepRecord,
    StoreDocument,
)
from .store import (
    ConversationLibrary,
    ConversationNotFoundError,
    ConversationStore,
    InMemoryConversationStore,
    JsonConversationStore,
)

__all__ = [
    "ChatAttachment",
    "ChatMessage",
    "ConversationRecord",
    "StepRecord",
    "StoreDocument",
    "ConversationLibrary",
    "ConversationNotFoundError",
    "ConversationStore",
    "InMemoryConversationStore",
    "JsonConversationStore",
]
