from __future__ import annotations

import pytest

from chat_client.application.dto.chat import ChatCreationResult
from chat_client.application.exceptions import ValidationError
from chat_client.domain.entities.user import UserSummary
from chat_client.domain.value_objects.enums import ConversationKind
from chat_client.services import conversation_service
from tests.conftest import FakeGateway, make_conversation


@pytest.fixture
def group_gateway() -> FakeGateway:
    group = make_conversation(chat_id="g1", kind=ConversationKind.GROUP, name="Team", members=("me", "u2", "u3"))
    return FakeGateway(created=ChatCreationResult(chat=group))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("member_ids", "name"),
    [
        ([], "Team"),
        (["u2"], "Team"),
        (["u2", "u2"], "Team"),
        (["u2", "u3"], ""),
        (["u2", "u3"], "   "),
    ],
)
async def test_create_group_chat_validates_before_request(group_gateway, member_ids, name):
    with pytest.raises(ValidationError):
        await conversation_service.create_group_chat(group_gateway, member_ids, name)

    assert group_gateway.calls == []


@pytest.mark.asyncio
async def test_create_group_chat_with_two_members_reaches_server(group_gateway):
    result = await conversation_service.create_group_chat(group_gateway, ["u2", "u3"], "  Team ")

    assert result.chat.id == "g1"
    assert group_gateway.calls == [("create_group_chat", (["u2", "u3"], "Team"))]


@pytest.mark.asyncio
async def test_create_personal_chat_requires_user():
    gateway = FakeGateway(created=ChatCreationResult(chat=make_conversation(), existing=True))

    with pytest.raises(ValidationError):
        await conversation_service.create_personal_chat(gateway, " ")
    result = await conversation_service.create_personal_chat(gateway, "u2")

    assert result.existing is True
    assert gateway.count("create_personal_chat") == 1


@pytest.mark.asyncio
async def test_search_users_skips_blank_query_and_excluded_ids():
    gateway = FakeGateway(users=[
        UserSummary(id="u2", email="bob@example.com", username="bob"),
        UserSummary(id="u3", email="carol@example.com"),
    ])

    assert await conversation_service.search_users(gateway, "   ") == []
    assert gateway.calls == []

    found = await conversation_service.search_users(gateway, " bo ", exclude=["u2"])

    assert [u.id for u in found] == ["u3"]
    assert found[0].label == "carol@example.com"
    assert gateway.calls == [("search_users", ("bo",))]


@pytest.mark.asyncio
async def test_refresh_conversations_toggles_loading_flag(store):
    gateway = FakeGateway(conversations=[make_conversation(), make_conversation(chat_id="c2")])
    seen = []
    store.subscribe(lambda new, old: seen.append(new.conversations_loading))

    result = await conversation_service.refresh_conversations(store, gateway)

    assert len(result) == 2
    assert seen[0] is True
    assert store.state.conversations_loading is False
    assert [c.id for c in store.state.conversations] == ["c1", "c2"]
