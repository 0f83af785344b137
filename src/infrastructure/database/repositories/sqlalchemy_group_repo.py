"""SQLAlchemy implementation of Group repository."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConcurrentModificationError
from domain.entities.group import Group, GroupSummary, GroupVisibility
from infrastructure.database.models import GroupMemberModel, GroupModel


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository.

    A group is stored as one ``groups`` row plus one ``group_members`` row per
    member. Writes go through a version-checked UPDATE so two transactions
    that read the same version cannot both commit.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Group | None:
        """Get a group with its member and admin sets."""
        stmt = (
            select(GroupModel)
            .where(GroupModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if not model:
            return None
        members = await self._get_member_rows([model.id])
        return self._to_entity(model, members.get(model.id, []))

    async def get_by_name(self, name: str) -> Group | None:
        """Get a group by exact name."""
        stmt = select(GroupModel.id).where(GroupModel.name == name).limit(1)
        result = await self._session.execute(stmt)
        group_id = result.scalar_one_or_none()
        return await self.get(group_id) if group_id else None

    async def create(self, group: Group) -> Group:
        """Insert a new group and its initial members."""
        self._session.add(self._to_model(group))
        for user_id in group.members:
            self._session.add(
                GroupMemberModel(
                    group_id=group.id,
                    user_id=user_id,
                    is_admin=user_id in group.admins,
                )
            )
        await self._session.flush()
        return group

    async def save(self, group: Group) -> Group:
        """Persist the aggregate if its stored version still matches."""
        expected = group.version
        stmt = (
            update(GroupModel)
            .where(GroupModel.id == group.id, GroupModel.version == expected)
            .values(
                name=group.name,
                description=group.description,
                visibility=group.visibility.value,
                owner_id=group.owner_id,
                max_members=group.max_members,
                version=expected + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError(str(group.id))

        await self._sync_members(group)
        group.version = expected + 1
        return group

    async def delete(self, group: Group) -> bool:
        """Delete the group row (version-checked) and its member rows."""
        await self._session.execute(
            delete(GroupMemberModel).where(GroupMemberModel.group_id == group.id)
        )
        stmt = (
            delete(GroupModel)
            .where(GroupModel.id == group.id, GroupModel.version == group.version)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError(str(group.id))
        return True

    async def discover(self, search: str | None, limit: int) -> list[GroupSummary]:
        """List public groups whose name contains ``search``, newest first."""
        member_count = func.count(GroupMemberModel.user_id).label("member_count")
        stmt = (
            select(GroupModel, member_count)
            .outerjoin(GroupMemberModel, GroupMemberModel.group_id == GroupModel.id)
            .where(GroupModel.visibility == GroupVisibility.PUBLIC.value)
            .group_by(GroupModel.id)
            .order_by(GroupModel.created_at.desc())
            .limit(limit)
        )
        if search:
            stmt = stmt.where(GroupModel.name.icontains(search, autoescape=True))

        result = await self._session.execute(stmt)
        return [
            GroupSummary(
                id=model.id,
                name=model.name,
                visibility=GroupVisibility(model.visibility),
                owner_id=model.owner_id,
                member_count=count,
                created_at=model.created_at,
                description=model.description,
                max_members=model.max_members,
            )
            for model, count in result.all()
        ]

    async def get_for_member(self, user_id: UUID) -> list[Group]:
        """Get all groups whose member set contains the user."""
        stmt = (
            select(GroupModel)
            .join(GroupMemberModel, GroupMemberModel.group_id == GroupModel.id)
            .where(GroupMemberModel.user_id == user_id)
            .order_by(GroupModel.created_at)
        )
        result = await self._session.execute(stmt)
        models = list(result.scalars())
        members = await self._get_member_rows([m.id for m in models])
        return [self._to_entity(m, members.get(m.id, [])) for m in models]

    # --- Internal helpers ---

    async def _get_member_rows(
        self, group_ids: Sequence[UUID]
    ) -> dict[UUID, list[GroupMemberModel]]:
        if not group_ids:
            return {}
        stmt = (
            select(GroupMemberModel)
            .where(GroupMemberModel.group_id.in_(group_ids))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        rows: dict[UUID, list[GroupMemberModel]] = {}
        for row in result.scalars():
            rows.setdefault(row.group_id, []).append(row)
        return rows

    async def _sync_members(self, group: Group) -> None:
        """Make group_members match the entity's member and admin sets."""
        stmt = select(GroupMemberModel.user_id, GroupMemberModel.is_admin).where(
            GroupMemberModel.group_id == group.id
        )
        result = await self._session.execute(stmt)
        current = {user_id: is_admin for user_id, is_admin in result.all()}
        desired = {user_id: user_id in group.admins for user_id in group.members}

        removed = current.keys() - desired.keys()
        if removed:
            await self._session.execute(
                delete(GroupMemberModel).where(
                    GroupMemberModel.group_id == group.id,
                    GroupMemberModel.user_id.in_(removed),
                )
            )

        for user_id, is_admin in desired.items():
            if user_id not in current:
                self._session.add(
                    GroupMemberModel(group_id=group.id, user_id=user_id, is_admin=is_admin)
                )
            elif current[user_id] != is_admin:
                await self._session.execute(
                    update(GroupMemberModel)
                    .where(
                        GroupMemberModel.group_id == group.id,
                        GroupMemberModel.user_id == user_id,
                    )
                    .values(is_admin=is_admin)
                    .execution_options(synchronize_session=False)
                )

        await self._session.flush()

    def _to_entity(self, model: GroupModel, members: list[GroupMemberModel]) -> Group:
        """Convert ORM rows to the domain aggregate."""
        return Group(
            id=model.id,
            name=model.name,
            description=model.description,
            visibility=GroupVisibility(model.visibility),
            owner_id=model.owner_id,
            max_members=model.max_members,
            encryption_key=model.encryption_key,
            members={m.user_id for m in members},
            admins={m.user_id for m in members if m.is_admin},
            version=model.version,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Group) -> GroupModel:
        """Convert domain entity to ORM model."""
        return GroupModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            visibility=entity.visibility.value,
            owner_id=entity.owner_id,
            max_members=entity.max_members,
            encryption_key=entity.encryption_key,
            version=entity.version,
            created_at=entity.created_at,
        )
