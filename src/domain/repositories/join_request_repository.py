"""Join request repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.join_request import JoinRequest


class IJoinRequestRepository(Protocol):
    """Repository interface for JoinRequest entities."""

    async def create(self, request: JoinRequest) -> JoinRequest:
        """Create a new join request.

        Raises DuplicateJoinRequestError if a pending one already exists.
        """
        ...

    async def get_pending(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the pending request for a (group, user) pair."""
        ...

    async def get_latest(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the most recent request for a (group, user) pair, any status."""
        ...

    async def get_pending_for_group(self, group_id: UUID) -> list[JoinRequest]:
        """Get all pending requests for a group, oldest first."""
        ...

    async def update(self, request: JoinRequest) -> JoinRequest:
        """Persist a status transition."""
        ...

    async def delete_for_group(self, group_id: UUID) -> int:
        """Delete every request of a group. Returns the number removed."""
        ...
