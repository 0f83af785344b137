"""Membership service: joins, removals, roles and ownership."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAGroupMemberError,
    GroupFullError,
    GroupMemberNotFoundError,
    GroupNotFoundError,
    GroupNotPublicError,
    InsufficientPermissionsError,
    InvalidRoleError,
    NotInGroupError,
    OwnerCannotLeaveError,
    OwnerImmutableError,
    UserNotFoundError,
)
from domain.entities.group import ASSIGNABLE_ROLES, Group, GroupRole
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access_control import permissions_for, role_of
from domain.services.concurrency import retry_on_conflict

logger = structlog.get_logger()


class MembershipService:
    """Service layer for mutating a group's member set, admin set and owner.

    Each operation loads the group, authorizes the actor against that fresh
    state, applies the change and saves the aggregate with a version check.
    The joined-groups index is updated in the same transaction.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    @retry_on_conflict
    async def join_public(self, group_id: UUID, user_id: UUID) -> Group:
        """Join a public group directly."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if group.is_member(user_id):
                raise AlreadyAGroupMemberError(str(group_id), str(user_id))
            if not group.is_public:
                raise GroupNotPublicError(str(group_id))
            self._require_capacity(group)

            group.add_member(user_id)
            saved = await self._save(uow, group, joined=[user_id])

            logger.info("member_joined", group_id=str(group_id), user_id=str(user_id))
            return saved

    @retry_on_conflict
    async def leave(self, group_id: UUID, user_id: UUID) -> Group:
        """Leave a group. The owner must transfer ownership first."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not group.is_member(user_id):
                raise NotInGroupError(str(group_id), str(user_id))
            if group.owner_id == user_id:
                raise OwnerCannotLeaveError(str(group_id))

            group.remove_member(user_id)
            saved = await self._save(uow, group, left=[user_id])

            logger.info("member_left", group_id=str(group_id), user_id=str(user_id))
            return saved

    @retry_on_conflict
    async def add_member(
        self, group_id: UUID, target_user_id: UUID, actor_id: UUID
    ) -> Group:
        """Add a user to a group. Requires owner or admin.

        A pending join request from the user is closed as approved.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            self._require_manager(group, actor_id)

            profile = await uow.users.get(target_user_id)
            if not profile:
                raise UserNotFoundError(str(target_user_id))

            if group.is_member(target_user_id):
                raise AlreadyAGroupMemberError(str(group_id), str(target_user_id))
            self._require_capacity(group)

            group.add_member(target_user_id)
            # A direct add settles any request the user still has open.
            pending = await uow.join_requests.get_pending(group_id, target_user_id)
            if pending:
                pending.approve()
                await uow.join_requests.update(pending)
            saved = await self._save(uow, group, joined=[target_user_id])

            logger.info(
                "member_added",
                group_id=str(group_id),
                user_id=str(target_user_id),
                actor_id=str(actor_id),
            )
            return saved

    @retry_on_conflict
    async def remove_member(
        self, group_id: UUID, target_user_id: UUID, actor_id: UUID
    ) -> Group:
        """Remove a member (and their admin seat). Requires owner or admin."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            self._require_manager(group, actor_id)

            if group.owner_id == target_user_id:
                raise OwnerImmutableError(str(group_id), str(target_user_id))
            if not group.is_member(target_user_id):
                raise NotInGroupError(str(group_id), str(target_user_id))

            group.remove_member(target_user_id)
            saved = await self._save(uow, group, left=[target_user_id])

            logger.info(
                "member_removed",
                group_id=str(group_id),
                user_id=str(target_user_id),
                actor_id=str(actor_id),
            )
            return saved

    @retry_on_conflict
    async def banish(
        self, group_id: UUID, target_user_id: UUID, actor_id: UUID
    ) -> Group:
        """Remove a member as a moderation action. Owner only.

        No block-list is kept: a banished user can still join a public group
        again or submit a new request to a private one.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            # Targeting the owner is a conflict whoever the actor is.
            if group.owner_id == target_user_id:
                raise OwnerImmutableError(str(group_id), str(target_user_id))
            if not permissions_for(group, actor_id).can_banish:
                raise InsufficientPermissionsError("owner", str(group_id))
            if not group.is_member(target_user_id):
                raise NotInGroupError(str(group_id), str(target_user_id))

            group.remove_member(target_user_id)
            saved = await self._save(uow, group, left=[target_user_id])

            logger.info(
                "member_banished",
                group_id=str(group_id),
                user_id=str(target_user_id),
                actor_id=str(actor_id),
            )
            return saved

    @retry_on_conflict
    async def update_role(
        self,
        group_id: UUID,
        target_user_id: UUID,
        new_role: str | GroupRole,
        actor_id: UUID,
    ) -> Group:
        """Grant or revoke admin. Requires owner or admin; idempotent.

        Raises:
            InvalidRoleError: If new_role is not ``admin`` or ``member``.
            OwnerImmutableError: If the target is the owner.
            NotInGroupError: If the target is not a member.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            self._require_manager(group, actor_id)

            role = self._parse_role(new_role)
            if group.owner_id == target_user_id:
                raise OwnerImmutableError(str(group_id), str(target_user_id))
            if not group.is_member(target_user_id):
                raise NotInGroupError(str(group_id), str(target_user_id))

            if role == GroupRole.ADMIN:
                group.grant_admin(target_user_id)
            else:
                group.revoke_admin(target_user_id)
            saved = await self._save(uow, group)

            logger.info(
                "member_role_updated",
                group_id=str(group_id),
                user_id=str(target_user_id),
                role=role.value,
                actor_id=str(actor_id),
            )
            return saved

    @retry_on_conflict
    async def transfer_ownership(
        self, group_id: UUID, new_owner_id: UUID, actor_id: UUID
    ) -> Group:
        """Hand the group to another member. Current owner only.

        The previous owner stays a member and admin.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not permissions_for(group, actor_id).can_transfer_ownership:
                raise InsufficientPermissionsError("owner", str(group_id))
            if not group.is_member(new_owner_id):
                raise GroupMemberNotFoundError(str(group_id), str(new_owner_id))

            group.transfer_to(new_owner_id)
            saved = await self._save(uow, group)

            logger.info(
                "ownership_transferred",
                group_id=str(group_id),
                previous_owner_id=str(actor_id),
                new_owner_id=str(new_owner_id),
            )
            return saved

    async def get_role(self, group_id: UUID, user_id: UUID) -> GroupRole:
        """Get the user's current role in a group."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            return role_of(group, user_id)

    # --- Internal helpers ---

    @staticmethod
    async def _get_group(uow: IUnitOfWork, group_id: UUID) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group

    @staticmethod
    def _require_manager(group: Group, actor_id: UUID) -> None:
        if not permissions_for(group, actor_id).can_manage:
            raise InsufficientPermissionsError("admin", str(group.id))

    @staticmethod
    def _require_capacity(group: Group) -> None:
        if group.is_full:
            raise GroupFullError(str(group.id), group.max_members or 0)

    @staticmethod
    def _parse_role(role: str | GroupRole) -> GroupRole:
        try:
            parsed = GroupRole(role)
        except ValueError:
            raise InvalidRoleError(str(role)) from None
        if parsed not in ASSIGNABLE_ROLES:
            raise InvalidRoleError(str(role))
        return parsed

    @staticmethod
    async def _save(
        uow: IUnitOfWork,
        group: Group,
        joined: list[UUID] | None = None,
        left: list[UUID] | None = None,
    ) -> Group:
        """Save the aggregate, update the joined-groups index and commit."""
        saved = await uow.groups.save(group)
        for user_id in joined or []:
            await uow.users.add_joined_group(user_id, group.id)
        for user_id in left or []:
            await uow.users.remove_joined_group(user_id, group.id)
        await uow.commit()
        return saved
