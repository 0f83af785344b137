"""Message service layer: encrypted group messages."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import GroupNotFoundError, InvalidMessageError, NotAGroupMemberError
from domain.entities.group import Group
from domain.entities.message import DecryptedMessage, Message
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access_control import permissions_for
from domain.services.encryption_service import EncryptionService

logger = structlog.get_logger()


class MessageService:
    """Service layer for posting and reading group messages.

    Bodies are stored encrypted with the group's key; only members can post
    or read.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        encryption_service: Optional[EncryptionService] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._encryption = encryption_service or EncryptionService()

    async def send(
        self, group_id: UUID, sender_id: UUID, content: str
    ) -> DecryptedMessage:
        """Encrypt and store a message from a current member."""
        text = content.strip() if content else ""
        if not text:
            raise InvalidMessageError()

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            if not permissions_for(group, sender_id).can_post:
                raise NotAGroupMemberError(str(group_id))

            payload = self._encryption.encrypt(text, group.encryption_key)
            message = await uow.messages.create(
                Message(
                    group_id=group_id,
                    sender_id=sender_id,
                    encrypted_content=payload.ciphertext,
                    iv=payload.iv,
                )
            )
            await uow.commit()

            logger.info(
                "message_sent",
                group_id=str(group_id),
                sender_id=str(sender_id),
                message_id=str(message.id),
            )
            return DecryptedMessage(
                id=message.id,
                group_id=group_id,
                sender_id=sender_id,
                content=text,
                created_at=message.created_at,
            )

    async def list_messages(
        self,
        group_id: UUID,
        user_id: UUID,
        limit: Optional[int] = None,
        before: Optional[datetime] = None,
        before_id: Optional[UUID] = None,
    ) -> list[DecryptedMessage]:
        """Get the newest messages (oldest first), decrypted for a member.

        ``before`` and ``before_id`` are the created_at and id of the oldest
        message already seen.

        Raises:
            CryptoError: If a stored message cannot be decrypted with the
                group's key.
        """
        page_size = limit or settings.message_page_size

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            if not permissions_for(group, user_id).can_post:
                raise NotAGroupMemberError(str(group_id))

            messages = await uow.messages.get_recent(group_id, page_size, before, before_id)

        return [self._decrypt(group, m) for m in reversed(messages)]

    def _decrypt(self, group: Group, message: Message) -> DecryptedMessage:
        return DecryptedMessage(
            id=message.id,
            group_id=message.group_id,
            sender_id=message.sender_id,
            content=self._encryption.decrypt(
                message.encrypted_content, group.encryption_key, message.iv
            ),
            created_at=message.created_at,
        )

    @staticmethod
    async def _get_group(uow: IUnitOfWork, group_id: UUID) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group
