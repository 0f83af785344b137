"""Group repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.group import Group, GroupSummary


class IGroupRepository(Protocol):
    """Repository interface for the Group aggregate (group row + member set)."""

    async def get(self, id: UUID) -> Group | None:
        """Get a group with its member and admin sets."""
        ...

    async def get_by_name(self, name: str) -> Group | None:
        """Get a group by exact name."""
        ...

    async def create(self, group: Group) -> Group:
        """Insert a new group and its initial members."""
        ...

    async def save(self, group: Group) -> Group:
        """Persist the aggregate if nobody else changed it since it was read.

        Bumps ``group.version``. Raises ConcurrentModificationError when the
        stored version no longer matches.
        """
        ...

    async def delete(self, group: Group) -> bool:
        """Delete the group row (version-checked) and its member rows."""
        ...

    async def discover(self, search: str | None, limit: int) -> list[GroupSummary]:
        """List public groups whose name contains ``search`` (case-insensitive)."""
        ...

    async def get_for_member(self, user_id: UUID) -> list[Group]:
        """Get all groups whose member set contains the user."""
        ...
