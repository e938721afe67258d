"""Realtime channel event names and payload models."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from chat_client.domain.events.conversation_updated import ConversationUpdated
from chat_client.domain.events.message_created import MessageCreated
from chat_client.domain.events.message_deleted import MessageDeleted
from chat_client.domain.events.message_edited import MessageEdited
from chat_client.domain.value_objects.enums import MessageType
from chat_client.infrastructure.mappers import message as message_mapper
from chat_client.infrastructure.schemas.common import WireModel
from chat_client.infrastructure.schemas.message import MessageSchema

InboundDomainEvent = MessageCreated | MessageEdited | MessageDeleted | ConversationUpdated


class OutboundEvent(StrEnum):
    JOIN_CHAT = "join_chat"
    LEAVE_CHAT = "leave_chat"
    SEND_MESSAGE = "send_message"
    EDIT_MESSAGE = "edit_message"
    DELETE_MESSAGE = "delete_message"


class InboundEvent(StrEnum):
    NEW_MESSAGE = "new_message"
    CHAT_UPDATED = "chat_updated"
    MESSAGE_EDITED = "message_edited"
    MESSAGE_DELETED = "message_deleted"


class TransportEvent(StrEnum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    CONNECT_ERROR = "connect_error"
    ERROR = "error"
    # Fired after a disconnect the client will not recover from on its own,
    # including when its reconnection attempts run out.
    DISCONNECT_FINAL = "__disconnect_final"


# Disconnect reasons after which no automatic reconnection happens.
FINAL_DISCONNECT_REASONS = frozenset({
    "server disconnect",
    "client disconnect",
    "io server disconnect",
    "io client disconnect",
})


# Client → Server


class ChatRef(WireModel):
    chat_id: str


class SendMessageIntent(WireModel):
    chat_id: str
    content: str
    message_type: str = MessageType.TEXT


class EditMessageIntent(WireModel):
    message_id: str
    content: str


class DeleteMessageIntent(WireModel):
    message_id: str


# Server → Client


class MessageEnvelope(WireModel):
    message: MessageSchema


class ChatUpdatedPayload(WireModel):
    chat_id: str
    last_message: MessageSchema | None = None
    last_message_at: datetime | None = None


def dump(intent: WireModel) -> dict[str, Any]:
    return intent.model_dump(by_alias=True, mode="json")


_MESSAGE_EVENTS: dict[str, type[MessageCreated | MessageEdited | MessageDeleted]] = {
    InboundEvent.NEW_MESSAGE: MessageCreated,
    InboundEvent.MESSAGE_EDITED: MessageEdited,
    InboundEvent.MESSAGE_DELETED: MessageDeleted,
}


def parse_inbound(event: str, data: Any) -> InboundDomainEvent:
    """Validate a server push and turn it into a domain event.

    Raises ``pydantic.ValidationError`` for malformed payloads and
    ``KeyError`` for event names this client does not handle.
    """
    event_cls = _MESSAGE_EVENTS.get(event)
    if event_cls is not None:
        env = MessageEnvelope.model_validate(data)
        return event_cls(message=message_mapper.schema_to_entity(env.message))

    if event == InboundEvent.CHAT_UPDATED:
        payload = ChatUpdatedPayload.model_validate(data)
        last_message = None
        if payload.last_message is not None:
            last_message = message_mapper.schema_to_entity(payload.last_message)
        return ConversationUpdated(
            chat_id=payload.chat_id,
            last_message=last_message,
            last_message_at=payload.last_message_at,
        )

    raise KeyError(event)
