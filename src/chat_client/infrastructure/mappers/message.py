from __future__ import annotations

from chat_client.domain.entities.message import Message, MessageSender
from chat_client.infrastructure.schemas.message import MessageSchema


def schema_to_entity(schema: MessageSchema) -> Message:
    if schema.sender is not None:
        sender = MessageSender(
            id=schema.sender.id,
            email=schema.sender.email,
            display_name=schema.sender.username,
        )
    else:
        sender = MessageSender(id=schema.sender_id, email="")
    return Message(
        id=schema.id,
        chat_id=schema.chat_id,
        sender_id=schema.sender_id,
        content=schema.content or "",
        kind=schema.message_type,
        created_at=schema.created_at,
        sender=sender,
        edited_at=schema.edited_at,
        is_deleted=schema.is_deleted,
    )
