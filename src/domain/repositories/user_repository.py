"""User profile and joined-groups index repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IUserRepository(Protocol):
    """Repository interface for profiles and the joined-groups index.

    The index mirrors Group.members; index writes are idempotent so a
    repeated reconciliation converges.
    """

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by user ID."""
        ...

    async def search(self, query: str, limit: int) -> list[Profile]:
        """Find profiles whose email contains ``query`` (case-insensitive)."""
        ...

    async def get_joined_group_ids(self, user_id: UUID) -> set[UUID]:
        """Get the group IDs recorded in the user's index."""
        ...

    async def add_joined_group(self, user_id: UUID, group_id: UUID) -> None:
        """Record the group in the user's index (no-op if present)."""
        ...

    async def remove_joined_group(self, user_id: UUID, group_id: UUID) -> None:
        """Drop the group from the user's index (no-op if absent)."""
        ...

    async def remove_group_from_all(self, group_id: UUID) -> int:
        """Drop the group from every user's index. Returns rows removed."""
        ...
