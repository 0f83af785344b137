"""Group service layer: group lifecycle, discovery and read models."""

from collections.abc import Callable
from typing import Optional
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import (
    GroupNameTakenError,
    GroupNotFoundError,
    InsufficientPermissionsError,
    InvalidCapacityError,
    InvalidVisibilityError,
)
from domain.entities.group import (
    Group,
    GroupDetails,
    GroupRole,
    GroupSummary,
    GroupVisibility,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access_control import permissions_for
from domain.services.concurrency import retry_on_conflict
from domain.services.encryption_service import EncryptionService

logger = structlog.get_logger()


class GroupService:
    """Service layer for creating, reading and deleting groups."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        encryption_service: Optional[EncryptionService] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._encryption = encryption_service or EncryptionService()

    async def create(
        self,
        owner_id: UUID,
        name: str,
        visibility: str | GroupVisibility = GroupVisibility.PUBLIC,
        description: Optional[str] = None,
        max_members: Optional[int] = None,
    ) -> Group:
        """Create a group owned (and joined) by ``owner_id``.

        Raises:
            InvalidVisibilityError: If visibility is not public or private.
            InvalidCapacityError: If max_members is less than 1.
            GroupNameTakenError: If names must be unique and this one is used.
        """
        parsed_visibility = self._parse_visibility(visibility)
        if max_members is not None and max_members < 1:
            raise InvalidCapacityError(max_members)

        async with self._uow_factory() as uow:
            if settings.enforce_unique_group_names:
                existing = await uow.groups.get_by_name(name)
                if existing:
                    raise GroupNameTakenError(name)

            group = Group(
                name=name,
                owner_id=owner_id,
                encryption_key=self._encryption.generate_key(),
                visibility=parsed_visibility,
                description=description,
                max_members=max_members,
            )

            created = await uow.groups.create(group)
            await uow.users.add_joined_group(owner_id, created.id)
            await uow.commit()

            logger.info(
                "group_created",
                group_id=str(created.id),
                owner_id=str(owner_id),
                visibility=parsed_visibility.value,
            )
            return created

    async def get(self, group_id: UUID) -> Group:
        """Get a group by ID."""
        async with self._uow_factory() as uow:
            return await self._get_group(uow, group_id)

    @retry_on_conflict
    async def update(
        self,
        group_id: UUID,
        user_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        max_members: Optional[int] = None,
    ) -> Group:
        """Update group settings. Requires owner or admin.

        max_members may not drop below the current member count.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not permissions_for(group, user_id).can_manage:
                raise InsufficientPermissionsError("admin", str(group_id))

            if name is not None and name != group.name:
                if settings.enforce_unique_group_names:
                    existing = await uow.groups.get_by_name(name)
                    if existing and existing.id != group.id:
                        raise GroupNameTakenError(name)
                group.name = name
            if description is not None:
                group.description = description
            if max_members is not None:
                if max_members < 1 or max_members < group.member_count:
                    raise InvalidCapacityError(max_members, group.member_count)
                group.max_members = max_members

            updated = await uow.groups.save(group)
            await uow.commit()
            return updated

    @retry_on_conflict
    async def delete(self, group_id: UUID, user_id: UUID) -> bool:
        """Delete a group and everything hanging off it. Owner only.

        Messages, join requests and joined-group index entries are removed
        before the group row itself, all in one transaction.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not permissions_for(group, user_id).can_delete:
                raise InsufficientPermissionsError("owner", str(group_id))

            messages = await uow.messages.delete_for_group(group_id)
            requests = await uow.join_requests.delete_for_group(group_id)
            index_rows = await uow.users.remove_group_from_all(group_id)
            deleted = await uow.groups.delete(group)
            await uow.commit()

            logger.info(
                "group_deleted",
                group_id=str(group_id),
                messages_removed=messages,
                join_requests_removed=requests,
                index_entries_removed=index_rows,
            )
            return deleted

    async def discover(self, search: Optional[str] = None) -> list[GroupSummary]:
        """List public groups, optionally filtered by a name substring."""
        term = search.strip() if search else None
        async with self._uow_factory() as uow:
            return await uow.groups.discover(term or None, settings.discover_page_size)

    async def get_details(self, group_id: UUID, user_id: UUID) -> GroupDetails:
        """Get a group as seen by ``user_id``: role, permissions, request status."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            permissions = permissions_for(group, user_id)

            request_status = None
            if permissions.role == GroupRole.NONE and not group.is_public:
                latest = await uow.join_requests.get_latest(group_id, user_id)
                request_status = latest.status.value if latest else None

            return GroupDetails(
                group=group,
                role=permissions.role,
                permissions=permissions,
                join_request_status=request_status,
            )

    async def list_members(self, group_id: UUID, user_id: UUID) -> Group:
        """Get a group for member listing. Private groups require membership."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            if not permissions_for(group, user_id).can_view_members:
                raise InsufficientPermissionsError("member", str(group_id))
            return group

    # --- Internal helpers ---

    @staticmethod
    async def _get_group(uow: IUnitOfWork, group_id: UUID) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group

    @staticmethod
    def _parse_visibility(visibility: str | GroupVisibility) -> GroupVisibility:
        try:
            return GroupVisibility(visibility)
        except ValueError:
            raise InvalidVisibilityError(str(visibility)) from None
