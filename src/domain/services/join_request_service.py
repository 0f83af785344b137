"""Join request service: admission workflow for private groups."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAGroupMemberError,
    DuplicateJoinRequestError,
    GroupFullError,
    GroupNotFoundError,
    GroupNotPrivateError,
    InsufficientPermissionsError,
    JoinRequestNotFoundError,
)
from domain.entities.group import Group
from domain.entities.join_request import JoinRequest
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access_control import permissions_for
from domain.services.concurrency import retry_on_conflict

logger = structlog.get_logger()


class JoinRequestService:
    """Service layer for the pending -> approved | rejected workflow.

    Every mutating call saves the group aggregate so decisions on one group are
    serialized by its version check.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    @retry_on_conflict
    async def submit(self, group_id: UUID, user_id: UUID) -> JoinRequest:
        """Ask to join a private group.

        Raises:
            GroupNotFoundError: If the group does not exist.
            GroupNotPrivateError: If the group is public (join it directly).
            AlreadyAGroupMemberError: If the user already belongs to the group.
            DuplicateJoinRequestError: If a request is already pending.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if group.is_public:
                raise GroupNotPrivateError(str(group_id))
            if group.is_member(user_id):
                raise AlreadyAGroupMemberError(str(group_id), str(user_id))

            existing = await uow.join_requests.get_pending(group_id, user_id)
            if existing:
                raise DuplicateJoinRequestError(str(group_id), str(user_id))

            created = await uow.join_requests.create(
                JoinRequest(group_id=group_id, user_id=user_id)
            )
            await uow.groups.save(group)
            await uow.commit()

            logger.info(
                "join_request_submitted",
                group_id=str(group_id),
                user_id=str(user_id),
                request_id=str(created.id),
            )
            return created

    @retry_on_conflict
    async def approve(
        self, group_id: UUID, user_id: UUID, approver_id: UUID
    ) -> JoinRequest:
        """Approve a pending request and admit the user. Owner only.

        When the group is full the request stays pending so it can be
        approved once a seat frees up.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not permissions_for(group, approver_id).can_review_join_requests:
                raise InsufficientPermissionsError("owner", str(group_id))

            request = await uow.join_requests.get_pending(group_id, user_id)
            if not request:
                raise JoinRequestNotFoundError(str(group_id), str(user_id))

            if not group.is_member(user_id):
                if group.is_full:
                    raise GroupFullError(str(group_id), group.max_members or 0)
                group.add_member(user_id)

            request.approve()
            await uow.join_requests.update(request)
            await uow.groups.save(group)
            await uow.users.add_joined_group(user_id, group_id)
            await uow.commit()

            logger.info(
                "join_request_approved",
                group_id=str(group_id),
                user_id=str(user_id),
                approver_id=str(approver_id),
            )
            return request

    @retry_on_conflict
    async def decline(
        self, group_id: UUID, user_id: UUID, approver_id: UUID
    ) -> JoinRequest:
        """Reject a pending request. Owner only; membership is untouched."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not permissions_for(group, approver_id).can_review_join_requests:
                raise InsufficientPermissionsError("owner", str(group_id))

            request = await uow.join_requests.get_pending(group_id, user_id)
            if not request:
                raise JoinRequestNotFoundError(str(group_id), str(user_id))

            request.reject()
            await uow.join_requests.update(request)
            await uow.groups.save(group)
            await uow.commit()

            logger.info(
                "join_request_declined",
                group_id=str(group_id),
                user_id=str(user_id),
                approver_id=str(approver_id),
            )
            return request

    async def list_pending(self, group_id: UUID, user_id: UUID) -> list[JoinRequest]:
        """List pending requests for a group. Owner only."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            if not permissions_for(group, user_id).can_review_join_requests:
                raise InsufficientPermissionsError("owner", str(group_id))
            return await uow.join_requests.get_pending_for_group(group_id)

    async def get_status(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the user's most recent request for a group, if any."""
        async with self._uow_factory() as uow:
            await self._get_group(uow, group_id)
            return await uow.join_requests.get_latest(group_id, user_id)

    @staticmethod
    async def _get_group(uow: IUnitOfWork, group_id: UUID) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group
