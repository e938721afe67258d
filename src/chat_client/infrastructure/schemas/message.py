from __future__ import annotations

from datetime import datetime

from chat_client.domain.value_objects.enums import MessageType
from chat_client.infrastructure.schemas.common import Envelope, WireModel


class SenderSchema(WireModel):
    id: str
    email: str = ""
    username: str | None = None


class MessageSchema(WireModel):
    id: str
    chat_id: str
    sender_id: str
    content: str | None = None
    message_type: str = MessageType.TEXT
    edited_at: datetime | None = None
    is_deleted: bool = False
    created_at: datetime
    sender: SenderSchema | None = None


class MessageListResponse(Envelope):
    messages: list[MessageSchema] = []


class MessageResponse(Envelope):
    message: MessageSchema


class EditMessageRequest(WireModel):
    content: str
