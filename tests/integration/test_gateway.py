"""HTTP gateway against an in-process httpx transport."""
from __future__ import annotations

import json

import httpx
import pytest

from chat_client.application.exceptions import (
    NetworkError,
    Unauthenticated,
    Unauthorized,
)
from chat_client.domain.value_objects.enums import ConversationKind
from chat_client.infrastructure.http.gateway import HttpConversationGateway
from tests.conftest import FakeCredentials, chat_payload, message_payload


def _gateway(handler, credentials: FakeCredentials | None = None) -> tuple[HttpConversationGateway, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(
        base_url="http://chat.test/api",
        transport=httpx.MockTransport(_record),
    )
    return HttpConversationGateway(client, credentials or FakeCredentials()), requests


@pytest.mark.asyncio
async def test_list_conversations_sends_bearer_and_maps_chats():
    gateway, requests = _gateway(lambda r: httpx.Response(200, json={
        "success": True,
        "chats": [
            chat_payload(),
            chat_payload(chat_id="g1", kind="group", name="Team", members=[{"id": "u1"}, {"id": "u2"}, {"id": "u3"}]),
        ],
    }))

    chats = await gateway.list_conversations()

    assert requests[0].url.path == "/api/chats"
    assert requests[0].headers["Authorization"] == "Bearer token-1"
    assert [c.id for c in chats] == ["c1", "g1"]
    assert chats[1].member_ids == frozenset({"u1", "u2", "u3"})
    assert chats[0].kind is ConversationKind.PRIVATE
    assert chats[1].kind is ConversationKind.GROUP


@pytest.mark.asyncio
async def test_list_messages_and_members():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/messages/chat/c1":
            return httpx.Response(200, json={"success": True, "messages": [message_payload()]})
        return httpx.Response(200, json={"success": True, "members": [
            {"id": "u2", "email": "bob@example.com", "username": None, "isOnline": True},
        ]})

    gateway, _ = _gateway(handler)

    messages = await gateway.list_messages("c1")
    members = await gateway.list_members("c1")

    assert messages[0].sender.email == "bob@example.com"
    assert members[0].is_online is True


@pytest.mark.asyncio
async def test_edit_and_delete_message():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            body = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "message": message_payload(content=body["content"])})
        return httpx.Response(200, json={"success": True, "message": message_payload(content=None, is_deleted=True)})

    gateway, requests = _gateway(handler)

    edited = await gateway.edit_message("m1", "changed")
    deleted = await gateway.delete_message("m1")

    assert edited.content == "changed"
    assert deleted.is_deleted
    assert [(r.method, r.url.path) for r in requests] == [
        ("PUT", "/api/messages/m1"), ("DELETE", "/api/messages/m1"),
    ]


@pytest.mark.asyncio
async def test_create_chats_report_existing_flag():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if request.url.path == "/api/chats/personal":
            assert body == {"otherUserId": "u2"}
            return httpx.Response(200, json={"success": True, "chat": chat_payload(), "existing": True})
        assert body == {"memberIds": ["u2", "u3"], "name": "Team"}
        return httpx.Response(201, json={"success": True, "chat": chat_payload(chat_id="g1")})

    gateway, _ = _gateway(handler)

    personal = await gateway.create_personal_chat("u2")
    group = await gateway.create_group_chat(["u2", "u3"], "Team")

    assert personal.existing is True
    assert group.existing is False
    assert group.chat.id == "g1"


@pytest.mark.asyncio
async def test_search_users_passes_query():
    gateway, requests = _gateway(lambda r: httpx.Response(200, json={
        "success": True, "users": [{"id": "u2", "email": "bob@example.com", "username": "bob"}],
    }))

    users = await gateway.search_users("bo b")

    assert requests[0].url.params["query"] == "bo b"
    assert users[0].username == "bob"


@pytest.mark.asyncio
async def test_missing_credential_never_hits_network():
    gateway, requests = _gateway(lambda r: httpx.Response(200), FakeCredentials(token=None))

    with pytest.raises(Unauthenticated):
        await gateway.list_conversations()

    assert requests == []


@pytest.mark.asyncio
async def test_401_clears_credential():
    credentials = FakeCredentials()
    gateway, _ = _gateway(lambda r: httpx.Response(401, json={"message": "Token expired"}), credentials)

    with pytest.raises(Unauthorized) as exc_info:
        await gateway.list_messages("c1")

    assert exc_info.value.detail == "Token expired"
    assert credentials.cleared == 1
    assert credentials.get_credential() is None


@pytest.mark.asyncio
async def test_server_rejection_keeps_message_and_status():
    gateway, _ = _gateway(lambda r: httpx.Response(400, json={"success": False, "message": "Need 3 members"}))

    with pytest.raises(NetworkError) as exc_info:
        await gateway.create_group_chat(["u2", "u3"], "Team")

    assert exc_info.value.detail == "Need 3 members"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="oops"),
        httpx.Response(200, json={"success": False, "message": "nope"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"success": True, "chats": [chat_payload(kind="channel")]}),
    ],
)
async def test_failures_map_to_network_error(response):
    gateway, _ = _gateway(lambda r: response)

    with pytest.raises(NetworkError):
        await gateway.list_conversations()


@pytest.mark.asyncio
async def test_transport_error_maps_to_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway, _ = _gateway(handler)

    with pytest.raises(NetworkError):
        await gateway.search_users("bob")
