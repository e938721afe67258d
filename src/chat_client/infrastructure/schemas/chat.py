from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_validator

from chat_client.domain.value_objects.enums import ConversationKind
from chat_client.infrastructure.schemas.common import Envelope, WireModel
from chat_client.infrastructure.schemas.message import MessageSchema


class ChatSchema(WireModel):
    id: str
    type: ConversationKind
    name: str = ""
    members: list[str] = []
    last_message: MessageSchema | None = None
    last_message_at: datetime | None = None
    created_at: datetime

    @field_validator("members", mode="before")
    @classmethod
    def _member_ids(cls, value: Any) -> Any:
        # Some endpoints embed member objects instead of bare ids.
        if not isinstance(value, list):
            return value
        ids: list[str] = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("id")
            if item:
                ids.append(str(item))
        return ids


class ChatListResponse(Envelope):
    chats: list[ChatSchema] = []


class ChatCreatedResponse(Envelope):
    chat: ChatSchema
    existing: bool = False


class PersonalChatRequest(WireModel):
    other_user_id: str


class GroupChatRequest(WireModel):
    member_ids: list[str]
    name: str
