from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from chat_client.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class ConversationUpdated:
    tag: ClassVar[str] = "conversation-updated"

    chat_id: str
    last_message: Message | None = None
    last_message_at: datetime | None = None
