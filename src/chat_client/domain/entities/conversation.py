from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_client.domain.entities.message import Message
from chat_client.domain.value_objects.enums import ConversationKind


@dataclass(frozen=True, slots=True)
class Conversation:
    id: str
    kind: ConversationKind
    display_name: str
    member_ids: frozenset[str]
    last_message: Message | None
    last_message_at: datetime | None
    created_at: datetime
