"""User service layer: profiles and the joined-groups index."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import UserNotFoundError
from domain.entities.group import Group
from domain.entities.profile import Profile
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

SEARCH_LIMIT = 20


class UserService:
    """Service layer for user lookups."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_profile(self, user_id: UUID) -> Profile:
        """Get a user's profile."""
        async with self._uow_factory() as uow:
            profile = await uow.users.get(user_id)
            if not profile:
                raise UserNotFoundError(str(user_id))
            return profile

    async def get_joined_groups(self, user_id: UUID) -> list[Group]:
        """Get the groups a user belongs to.

        Reads membership from the groups themselves, which are authoritative;
        the per-user index is only advisory.
        """
        async with self._uow_factory() as uow:
            return await uow.groups.get_for_member(user_id)

    async def search(self, query: str) -> list[Profile]:
        """Find users by email substring."""
        term = query.strip()
        if not term:
            return []
        async with self._uow_factory() as uow:
            return await uow.users.search(term, SEARCH_LIMIT)

    async def reconcile_joined_groups(self, user_id: UUID) -> set[UUID]:
        """Rewrite the user's joined-groups index from actual memberships.

        Idempotent, so it can be retried until it succeeds.
        """
        async with self._uow_factory() as uow:
            actual = {g.id for g in await uow.groups.get_for_member(user_id)}
            recorded = await uow.users.get_joined_group_ids(user_id)

            for group_id in actual - recorded:
                await uow.users.add_joined_group(user_id, group_id)
            for group_id in recorded - actual:
                await uow.users.remove_joined_group(user_id, group_id)
            await uow.commit()

            if actual != recorded:
                logger.info(
                    "joined_groups_reconciled",
                    user_id=str(user_id),
                    added=len(actual - recorded),
                    removed=len(recorded - actual),
                )
            return actual
