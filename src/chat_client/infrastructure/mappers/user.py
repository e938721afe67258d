from __future__ import annotations

from chat_client.domain.entities.user import ChatMember, UserSummary
from chat_client.infrastructure.schemas.user import MemberSchema, UserSchema


def schema_to_user(schema: UserSchema) -> UserSummary:
    return UserSummary(id=schema.id, email=schema.email, username=schema.username)


def schema_to_member(schema: MemberSchema) -> ChatMember:
    return ChatMember(
        id=schema.id,
        email=schema.email,
        username=schema.username,
        is_online=schema.is_online,
    )
