from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

DELETED_PLACEHOLDER = "This message was deleted"


@dataclass(frozen=True, slots=True)
class MessageSender:
    id: str
    email: str
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    chat_id: str
    sender_id: str
    content: str
    kind: str
    created_at: datetime
    sender: MessageSender
    edited_at: datetime | None = None
    is_deleted: bool = False

    @property
    def display_content(self) -> str:
        """Content as it should be rendered; storage keeps whatever the server sent."""
        if self.is_deleted:
            return DELETED_PLACEHOLDER
        return self.content

    @property
    def is_edited(self) -> bool:
        return self.edited_at is not None and not self.is_deleted

    def is_own(self, user_id: str | None) -> bool:
        return user_id is not None and self.sender_id == user_id
