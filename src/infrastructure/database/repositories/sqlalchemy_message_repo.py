"""SQLAlchemy implementation of Message repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.message import Message
from infrastructure.database.models import MessageModel


class SQLAlchemyMessageRepository:
    """SQLAlchemy implementation of IMessageRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        """Store an encrypted message."""
        model = self._to_model(message)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def get_recent(
        self,
        group_id: UUID,
        limit: int,
        before: datetime | None = None,
        before_id: UUID | None = None,
    ) -> list[Message]:
        """Get the newest messages of a group, newest first.

        Pages on ``(created_at, id)`` so messages sharing a timestamp are
        neither skipped nor repeated across pages.
        """
        stmt = select(MessageModel).where(MessageModel.group_id == group_id)
        if before is not None and before_id is not None:
            stmt = stmt.where(
                or_(
                    MessageModel.created_at < before,
                    and_(MessageModel.created_at == before, MessageModel.id < before_id),
                )
            )
        elif before is not None:
            stmt = stmt.where(MessageModel.created_at < before)
        stmt = stmt.order_by(MessageModel.created_at.desc(), MessageModel.id.desc()).limit(limit)

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def delete_for_group(self, group_id: UUID) -> int:
        """Delete every message of a group."""
        stmt = delete(MessageModel).where(MessageModel.group_id == group_id)
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    def _to_entity(self, model: MessageModel) -> Message:
        """Convert ORM model to domain entity."""
        return Message(
            id=model.id,
            group_id=model.group_id,
            sender_id=model.sender_id,
            encrypted_content=model.encrypted_content,
            iv=model.iv,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Message) -> MessageModel:
        """Convert domain entity to ORM model."""
        return MessageModel(
            id=entity.id,
            group_id=entity.group_id,
            sender_id=entity.sender_id,
            encrypted_content=entity.encrypted_content,
            iv=entity.iv,
            created_at=entity.created_at,
        )
