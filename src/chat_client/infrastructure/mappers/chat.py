from __future__ import annotations

from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.value_objects.enums import ConversationKind
from chat_client.infrastructure.mappers import message as message_mapper
from chat_client.infrastructure.schemas.chat import ChatSchema


def schema_to_entity(schema: ChatSchema) -> Conversation:
    return Conversation(
        id=schema.id,
        kind=ConversationKind(schema.type),
        display_name=schema.name,
        member_ids=frozenset(schema.members),
        last_message=(
            message_mapper.schema_to_entity(schema.last_message)
            if schema.last_message is not None
            else None
        ),
        last_message_at=schema.last_message_at,
        created_at=schema.created_at,
    )
