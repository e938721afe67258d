"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from chat_client.application.dto.chat import ChatCreationResult
from chat_client.application.exceptions import NetworkError
from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.message import Message, MessageSender
from chat_client.domain.entities.user import ChatMember, UserSummary
from chat_client.domain.value_objects.enums import ConversationKind, MessageType
from chat_client.services.connection_manager import RealtimeConnectionManager
from chat_client.services.store import ConversationStore

SOCKET_URL = "http://chat.test"
_BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_message(
    *,
    message_id: str | None = None,
    chat_id: str = "c1",
    sender_id: str = "u1",
    content: str = "hello",
    offset: int = 0,
    is_deleted: bool = False,
    edited_at: datetime | None = None,
) -> Message:
    return Message(
        id=message_id or uuid.uuid4().hex,
        chat_id=chat_id,
        sender_id=sender_id,
        content=content,
        kind=MessageType.TEXT,
        created_at=_BASE_TIME + timedelta(seconds=offset),
        sender=MessageSender(id=sender_id, email=f"{sender_id}@example.com"),
        edited_at=edited_at,
        is_deleted=is_deleted,
    )


def make_conversation(
    *,
    chat_id: str = "c1",
    kind: ConversationKind = ConversationKind.PRIVATE,
    name: str = "Alice",
    members: tuple[str, ...] = ("u1", "u2"),
    last_message: Message | None = None,
) -> Conversation:
    return Conversation(
        id=chat_id,
        kind=kind,
        display_name=name,
        member_ids=frozenset(members),
        last_message=last_message,
        last_message_at=last_message.created_at if last_message else None,
        created_at=_BASE_TIME,
    )


def message_payload(
    *,
    message_id: str = "m1",
    chat_id: str = "c1",
    content: str | None = "hello",
    is_deleted: bool = False,
    edited_at: str | None = None,
) -> dict[str, Any]:
    """A message exactly as the server serialises it."""
    return {
        "id": message_id,
        "chatId": chat_id,
        "senderId": "u2",
        "content": content,
        "messageType": "text",
        "editedAt": edited_at,
        "isDeleted": is_deleted,
        "createdAt": "2024-05-01T12:00:00.000Z",
        "sender": {"id": "u2", "email": "bob@example.com", "username": "bob"},
    }


def chat_payload(
    *, chat_id: str = "c1", kind: str = "private", name: str = "Bob", members: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "id": chat_id,
        "type": kind,
        "name": name,
        "members": members if members is not None else ["u1", "u2"],
        "lastMessage": None,
        "lastMessageAt": None,
        "createdAt": "2024-05-01T10:00:00.000Z",
    }


@dataclass
class FakeCredentials:
    token: str | None = "token-1"
    cleared: int = 0

    def get_credential(self) -> str | None:
        return self.token

    def clear(self) -> None:
        self.token = None
        self.cleared += 1


@dataclass
class FakeTransport:
    """In-memory realtime transport; ``fire`` plays the server."""

    fire_connect_on_connect: bool = True
    connect_error: str | None = None
    handlers: dict[str, Any] = field(default_factory=dict)
    connects: list[tuple[str, dict[str, str]]] = field(default_factory=list)
    emitted: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    disconnects: int = 0

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, auth: dict[str, str]) -> None:
        self.connects.append((url, auth))
        if self.connect_error is not None:
            raise NetworkError(self.connect_error)
        if self.fire_connect_on_connect:
            await self.fire("connect")

    async def emit(self, event: str, data: dict[str, Any]) -> None:
        self.emitted.append((event, data))

    async def disconnect(self) -> None:
        self.disconnects += 1
        await self.fire("disconnect")

    async def fire(self, event: str, *args: Any) -> None:
        await self.handlers[event](*args)

    def emitted_events(self) -> list[str]:
        return [event for event, _ in self.emitted]


@dataclass
class FakeGateway:
    conversations: list[Conversation] = field(default_factory=list)
    history: dict[str, list[Message]] = field(default_factory=dict)
    members: dict[str, list[ChatMember]] = field(default_factory=dict)
    users: list[UserSummary] = field(default_factory=list)
    created: ChatCreationResult | None = None
    error: Exception | None = None
    history_gate: asyncio.Event | None = None
    list_gates: list[asyncio.Event] = field(default_factory=list)
    calls: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def list_conversations(self) -> list[Conversation]:
        self._record("list_conversations")
        snapshot = list(self.conversations)
        if self.list_gates:
            await self.list_gates.pop(0).wait()
        return snapshot

    async def list_members(self, chat_id: str) -> list[ChatMember]:
        self._record("list_members", chat_id)
        return self.members.get(chat_id, [])

    async def list_messages(self, chat_id: str) -> list[Message]:
        self._record("list_messages", chat_id)
        if self.history_gate is not None:
            await self.history_gate.wait()
        return list(self.history.get(chat_id, []))

    async def edit_message(self, message_id: str, content: str) -> Message:
        self._record("edit_message", message_id, content)
        return make_message(message_id=message_id, content=content, edited_at=_BASE_TIME)

    async def delete_message(self, message_id: str) -> Message:
        self._record("delete_message", message_id)
        return make_message(message_id=message_id, content="", is_deleted=True)

    async def search_users(self, query: str) -> list[UserSummary]:
        self._record("search_users", query)
        return list(self.users)

    async def create_personal_chat(self, other_user_id: str) -> ChatCreationResult:
        self._record("create_personal_chat", other_user_id)
        assert self.created is not None
        return self.created

    async def create_group_chat(self, member_ids: list[str], name: str) -> ChatCreationResult:
        self._record("create_group_chat", member_ids, name)
        assert self.created is not None
        return self.created


async def settle(manager: RealtimeConnectionManager) -> None:
    """Wait for the manager's background refresh/resume tasks."""
    while True:
        pending = [t for t in manager._tasks if not t.done()]
        if not pending:
            return
        await asyncio.gather(*pending)


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(conversations=[make_conversation()])


@pytest.fixture
def manager(transport, store, gateway) -> RealtimeConnectionManager:
    return RealtimeConnectionManager(transport, store, gateway, socket_url=SOCKET_URL)
