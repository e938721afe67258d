from __future__ import annotations

from chat_client.infrastructure.schemas.common import Envelope, WireModel


class UserSchema(WireModel):
    id: str
    email: str = ""
    username: str | None = None


class MemberSchema(UserSchema):
    is_online: bool = False


class UserSearchResponse(Envelope):
    users: list[UserSchema] = []


class MemberListResponse(Envelope):
    members: list[MemberSchema] = []
