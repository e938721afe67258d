"""httpx-backed request/response access to chats, messages and users."""
from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
import pydantic

from chat_client.application.dto.chat import ChatCreationResult
from chat_client.application.exceptions import NetworkError, Unauthenticated, Unauthorized
from chat_client.application.ports.credentials import CredentialProvider
from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.message import Message
from chat_client.domain.entities.user import ChatMember, UserSummary
from chat_client.infrastructure.mappers import chat as chat_mapper
from chat_client.infrastructure.mappers import message as message_mapper
from chat_client.infrastructure.mappers import user as user_mapper
from chat_client.infrastructure.schemas.chat import (
    ChatCreatedResponse,
    ChatListResponse,
    GroupChatRequest,
    PersonalChatRequest,
)
from chat_client.infrastructure.schemas.common import Envelope
from chat_client.infrastructure.schemas.message import (
    EditMessageRequest,
    MessageListResponse,
    MessageResponse,
)
from chat_client.infrastructure.schemas.user import MemberListResponse, UserSearchResponse

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Envelope)


class HttpConversationGateway:
    """Implements application.ports.gateway.ConversationGateway.

    Server-side rejections (400, 409, 422 and the like) surface as
    ``NetworkError`` carrying the status code; ``ValidationError`` is reserved
    for checks made before a request is issued.
    """

    def __init__(self, client: httpx.AsyncClient, credentials: CredentialProvider) -> None:
        self._client = client
        self._credentials = credentials

    async def list_conversations(self) -> list[Conversation]:
        resp = await self._request("GET", "/chats", ChatListResponse)
        return [chat_mapper.schema_to_entity(c) for c in resp.chats]

    async def list_members(self, chat_id: str) -> list[ChatMember]:
        resp = await self._request("GET", f"/chats/{chat_id}/members", MemberListResponse)
        return [user_mapper.schema_to_member(m) for m in resp.members]

    async def list_messages(self, chat_id: str) -> list[Message]:
        resp = await self._request("GET", f"/messages/chat/{chat_id}", MessageListResponse)
        return [message_mapper.schema_to_entity(m) for m in resp.messages]

    async def edit_message(self, message_id: str, content: str) -> Message:
        body = EditMessageRequest(content=content)
        resp = await self._request("PUT", f"/messages/{message_id}", MessageResponse, body=body)
        return message_mapper.schema_to_entity(resp.message)

    async def delete_message(self, message_id: str) -> Message:
        resp = await self._request("DELETE", f"/messages/{message_id}", MessageResponse)
        return message_mapper.schema_to_entity(resp.message)

    async def search_users(self, query: str) -> list[UserSummary]:
        resp = await self._request(
            "GET", "/users/search", UserSearchResponse, params={"query": query},
        )
        return [user_mapper.schema_to_user(u) for u in resp.users]

    async def create_personal_chat(self, other_user_id: str) -> ChatCreationResult:
        body = PersonalChatRequest(other_user_id=other_user_id)
        resp = await self._request("POST", "/chats/personal", ChatCreatedResponse, body=body)
        return ChatCreationResult(chat=chat_mapper.schema_to_entity(resp.chat), existing=resp.existing)

    async def create_group_chat(self, member_ids: list[str], name: str) -> ChatCreationResult:
        body = GroupChatRequest(member_ids=member_ids, name=name)
        resp = await self._request("POST", "/chats/group", ChatCreatedResponse, body=body)
        return ChatCreationResult(chat=chat_mapper.schema_to_entity(resp.chat), existing=resp.existing)

    async def _request(
        self,
        method: str,
        path: str,
        response_model: type[E],
        *,
        body: pydantic.BaseModel | None = None,
        params: dict[str, str] | None = None,
    ) -> E:
        token = self._credentials.get_credential()
        if not token:
            raise Unauthenticated("No credential available")

        try:
            response = await self._client.request(
                method,
                path,
                headers={"Authorization": f"Bearer {token}"},
                json=body.model_dump(by_alias=True) if body is not None else None,
                params=params,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 401:
            logger.info("Credential rejected by %s %s, clearing session", method, path)
            self._credentials.clear()
            raise Unauthorized(_error_detail(response) or "Session expired")

        if response.is_error:
            raise NetworkError(
                _error_detail(response) or f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            result = response_model.model_validate_json(response.content)
        except pydantic.ValidationError as exc:
            raise NetworkError(
                _error_detail(response) or f"Unexpected response from {method} {path}",
                status_code=response.status_code,
            ) from exc

        if not result.success:
            raise NetworkError(
                _error_detail(response) or f"{method} {path} was not successful",
                status_code=response.status_code,
            )
        return result


def _error_detail(response: httpx.Response) -> str:
    try:
        data: Any = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            value = data.get(key)
            if isinstance(value, str):
                return value
    return ""


def create_http_client(base_url: str, timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        headers={"Content-Type": "application/json"},
    )
