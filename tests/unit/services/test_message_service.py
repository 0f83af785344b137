"""Unit tests for MessageService."""

from datetime import datetime, timedelta
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    CryptoError,
    GroupNotFoundError,
    InvalidMessageError,
    NotAGroupMemberError,
)
from domain.entities.group import Group
from domain.entities.message import Message
from domain.services.encryption_service import EncryptionService
from domain.services.message_service import MessageService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork, encryption: EncryptionService) -> MessageService:
    return MessageService(lambda: uow, encryption_service=encryption)


def _stored(group: Group, encryption: EncryptionService, text: str, at: datetime) -> Message:
    payload = encryption.encrypt(text, group.encryption_key)
    return Message(
        group_id=group.id,
        sender_id=group.owner_id,
        encrypted_content=payload.ciphertext,
        iv=payload.iv,
        created_at=at,
    )


class TestSend:
    @pytest.mark.asyncio
    async def test_stores_ciphertext_and_returns_plaintext(
        self,
        service: MessageService,
        uow: FakeUnitOfWork,
        public_group: Group,
        owner_id: UUID,
        encryption: EncryptionService,
    ):
        uow.groups.get.return_value = public_group
        uow.messages.create.side_effect = lambda m: m

        result = await service.send(public_group.id, owner_id, "  hello there ")

        assert result.content == "hello there"
        stored: Message = uow.messages.create.await_args.args[0]
        assert "hello" not in stored.encrypted_content
        assert (
            encryption.decrypt(stored.encrypted_content, public_group.encryption_key, stored.iv)
            == "hello there"
        )
        assert uow.committed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_blank_message_rejected(
        self, service: MessageService, uow: FakeUnitOfWork, owner_id: UUID, content: str
    ):
        with pytest.raises(InvalidMessageError):
            await service.send(uuid4(), owner_id, content)

        uow.groups.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_member_cannot_post(
        self, service: MessageService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = public_group

        with pytest.raises(NotAGroupMemberError):
            await service.send(public_group.id, user_id, "hi")

        uow.messages.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_group(self, service: MessageService, uow: FakeUnitOfWork):
        uow.groups.get.return_value = None

        with pytest.raises(GroupNotFoundError):
            await service.send(uuid4(), uuid4(), "hi")


class TestListMessages:
    @pytest.mark.asyncio
    async def test_returns_oldest_first_decrypted(
        self,
        service: MessageService,
        uow: FakeUnitOfWork,
        public_group: Group,
        owner_id: UUID,
        encryption: EncryptionService,
    ):
        now = datetime.utcnow()
        newer = _stored(public_group, encryption, "second", now)
        older = _stored(public_group, encryption, "first", now - timedelta(seconds=5))
        uow.groups.get.return_value = public_group
        uow.messages.get_recent.return_value = [newer, older]

        result = await service.list_messages(public_group.id, owner_id)

        assert [m.content for m in result] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_passes_limit_and_cursor(
        self, service: MessageService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        cursor, cursor_id = datetime.utcnow(), uuid4()
        uow.groups.get.return_value = public_group
        uow.messages.get_recent.return_value = []

        await service.list_messages(
            public_group.id, owner_id, limit=10, before=cursor, before_id=cursor_id
        )

        uow.messages.get_recent.assert_awaited_once_with(public_group.id, 10, cursor, cursor_id)

    @pytest.mark.asyncio
    async def test_non_member_cannot_read(
        self, service: MessageService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = public_group

        with pytest.raises(NotAGroupMemberError):
            await service.list_messages(public_group.id, user_id)

    @pytest.mark.asyncio
    async def test_rotated_key_surfaces_crypto_error(
        self,
        service: MessageService,
        uow: FakeUnitOfWork,
        public_group: Group,
        owner_id: UUID,
        encryption: EncryptionService,
    ):
        stored = _stored(public_group, encryption, "hi", datetime.utcnow())
        public_group.encryption_key = encryption.generate_key()
        uow.groups.get.return_value = public_group
        uow.messages.get_recent.return_value = [stored]

        with pytest.raises(CryptoError):
            await service.list_messages(public_group.id, owner_id)
