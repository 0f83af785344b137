"""Integration tests for Messages API."""

from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import MessageModel
from tests.conftest import ClientFactory


def _user(label: str) -> TokenUser:
    user_id = uuid4()
    return TokenUser(id=user_id, email=f"{label}-{user_id.hex[:8]}@example.com")


async def _group(client: AsyncClient) -> str:
    response = await client.post("/api/v1/groups", json={"name": f"chat-{uuid4().hex[:8]}"})
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_send_returns_plaintext(
        self, authenticated_client: AsyncClient, test_user: TokenUser
    ):
        group_id = await _group(authenticated_client)

        response = await authenticated_client.post(
            f"/api/v1/groups/{group_id}/messages", json={"content": "  hello  "}
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["content"] == "hello"
        assert data["sender_id"] == str(test_user.id)
        assert data["group_id"] == group_id

    @pytest.mark.asyncio
    async def test_content_is_encrypted_at_rest(
        self,
        authenticated_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        group_id = await _group(authenticated_client)
        sent = await authenticated_client.post(
            f"/api/v1/groups/{group_id}/messages", json={"content": "top secret plans"}
        )

        async with session_factory() as session:
            result = await session.execute(
                select(MessageModel).where(MessageModel.id == UUID(sent.json()["data"]["id"]))
            )
            row = result.scalar_one()

        assert "secret" not in row.encrypted_content
        assert len(bytes.fromhex(row.iv)) == 12

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, authenticated_client: AsyncClient):
        group_id = await _group(authenticated_client)

        response = await authenticated_client.post(
            f"/api/v1/groups/{group_id}/messages", json={"content": "   "}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_MESSAGE"

    @pytest.mark.asyncio
    async def test_non_member_cannot_post(
        self, authenticated_client: AsyncClient, app_factory: ClientFactory
    ):
        group_id = await _group(authenticated_client)
        outsider = await app_factory(_user("outsider"))

        response = await outsider.post(
            f"/api/v1/groups/{group_id}/messages", json={"content": "hi"}
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_A_GROUP_MEMBER"


class TestListMessages:
    @pytest.mark.asyncio
    async def test_members_read_history_oldest_first(
        self, authenticated_client: AsyncClient, app_factory: ClientFactory
    ):
        group_id = await _group(authenticated_client)
        member = await app_factory(_user("member"))
        await member.post(f"/api/v1/groups/{group_id}/join")
        for text in ("one", "two", "three"):
            await authenticated_client.post(
                f"/api/v1/groups/{group_id}/messages", json={"content": text}
            )

        response = await member.get(f"/api/v1/groups/{group_id}/messages")

        assert response.status_code == 200
        assert [m["content"] for m in response.json()["data"]] == ["one", "two", "three"]
        assert response.json()["meta"]["count"] == 3

    @pytest.mark.asyncio
    async def test_limit_keeps_most_recent(self, authenticated_client: AsyncClient):
        group_id = await _group(authenticated_client)
        for text in ("a", "b", "c"):
            await authenticated_client.post(
                f"/api/v1/groups/{group_id}/messages", json={"content": text}
            )

        response = await authenticated_client.get(
            f"/api/v1/groups/{group_id}/messages", params={"limit": 2}
        )

        assert [m["content"] for m in response.json()["data"]] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_limit_out_of_range(self, authenticated_client: AsyncClient):
        group_id = await _group(authenticated_client)

        response = await authenticated_client.get(
            f"/api/v1/groups/{group_id}/messages", params={"limit": 0}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_former_member_loses_access(
        self, authenticated_client: AsyncClient, app_factory: ClientFactory
    ):
        group_id = await _group(authenticated_client)
        member = await app_factory(_user("member"))
        await member.post(f"/api/v1/groups/{group_id}/join")
        await member.post(f"/api/v1/groups/{group_id}/leave")

        response = await member.get(f"/api/v1/groups/{group_id}/messages")

        assert response.status_code == 403
