"""SQLAlchemy implementation of User repository."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel, UserJoinedGroupModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by user ID."""
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def search(self, query: str, limit: int) -> list[Profile]:
        """Find profiles whose email contains ``query``."""
        stmt = (
            select(ProfileModel)
            .where(ProfileModel.email.icontains(query, autoescape=True))
            .order_by(ProfileModel.email)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_joined_group_ids(self, user_id: UUID) -> set[UUID]:
        """Get the group IDs recorded in the user's index."""
        stmt = select(UserJoinedGroupModel.group_id).where(
            UserJoinedGroupModel.user_id == user_id
        )
        result = await self._session.execute(stmt)
        return set(result.scalars())

    async def add_joined_group(self, user_id: UUID, group_id: UUID) -> None:
        """Record the group in the user's index (no-op if present)."""
        existing = await self._session.get(
            UserJoinedGroupModel, (user_id, group_id), populate_existing=True
        )
        if existing:
            return
        self._session.add(UserJoinedGroupModel(user_id=user_id, group_id=group_id))
        await self._session.flush()

    async def remove_joined_group(self, user_id: UUID, group_id: UUID) -> None:
        """Drop the group from the user's index (no-op if absent)."""
        stmt = delete(UserJoinedGroupModel).where(
            UserJoinedGroupModel.user_id == user_id,
            UserJoinedGroupModel.group_id == group_id,
        )
        await self._session.execute(stmt)

    async def remove_group_from_all(self, group_id: UUID) -> int:
        """Drop the group from every user's index."""
        stmt = delete(UserJoinedGroupModel).where(UserJoinedGroupModel.group_id == group_id)
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            email=model.email,
            display_name=model.display_name,
            created_at=model.created_at,
        )
