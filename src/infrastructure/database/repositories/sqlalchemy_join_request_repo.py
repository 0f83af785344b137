"""SQLAlchemy implementation of JoinRequest repository."""

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateJoinRequestError
from domain.entities.join_request import JoinRequest, JoinRequestStatus
from infrastructure.database.models import JoinRequestModel


class SQLAlchemyJoinRequestRepository:
    """SQLAlchemy implementation of IJoinRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, request: JoinRequest) -> JoinRequest:
        """Create a new join request.

        The partial unique index on pending rows backs up the service-level
        duplicate check.
        """
        model = self._to_model(request)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise DuplicateJoinRequestError(
                str(request.group_id), str(request.user_id)
            ) from exc
        return self._to_entity(model)

    async def get_pending(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the pending request for a (group, user) pair."""
        stmt = select(JoinRequestModel).where(
            JoinRequestModel.group_id == group_id,
            JoinRequestModel.user_id == user_id,
            JoinRequestModel.status == JoinRequestStatus.PENDING.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_latest(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the most recent request for a (group, user) pair."""
        stmt = (
            select(JoinRequestModel)
            .where(
                JoinRequestModel.group_id == group_id,
                JoinRequestModel.user_id == user_id,
            )
            .order_by(JoinRequestModel.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_pending_for_group(self, group_id: UUID) -> list[JoinRequest]:
        """Get all pending requests for a group, oldest first."""
        stmt = (
            select(JoinRequestModel)
            .where(
                JoinRequestModel.group_id == group_id,
                JoinRequestModel.status == JoinRequestStatus.PENDING.value,
            )
            .order_by(JoinRequestModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def update(self, request: JoinRequest) -> JoinRequest:
        """Persist a status transition."""
        stmt = (
            update(JoinRequestModel)
            .where(JoinRequestModel.id == request.id)
            .values(status=request.status.value, processed_at=request.processed_at)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        return request

    async def delete_for_group(self, group_id: UUID) -> int:
        """Delete every request of a group."""
        stmt = delete(JoinRequestModel).where(JoinRequestModel.group_id == group_id)
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    def _to_entity(self, model: JoinRequestModel) -> JoinRequest:
        """Convert ORM model to domain entity."""
        return JoinRequest(
            id=model.id,
            group_id=model.group_id,
            user_id=model.user_id,
            status=JoinRequestStatus(model.status),
            created_at=model.created_at,
            processed_at=model.processed_at,
        )

    def _to_model(self, entity: JoinRequest) -> JoinRequestModel:
        """Convert domain entity to ORM model."""
        return JoinRequestModel(
            id=entity.id,
            group_id=entity.group_id,
            user_id=entity.user_id,
            status=entity.status.value,
            created_at=entity.created_at,
            processed_at=entity.processed_at,
        )
