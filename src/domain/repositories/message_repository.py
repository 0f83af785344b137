"""Message repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.message import Message


class IMessageRepository(Protocol):
    """Repository interface for Message entities."""

    async def create(self, message: Message) -> Message:
        """Store an encrypted message."""
        ...

    async def get_recent(
        self,
        group_id: UUID,
        limit: int,
        before: datetime | None = None,
        before_id: UUID | None = None,
    ) -> list[Message]:
        """Get the newest ``limit`` messages older than the cursor, newest first.

        The cursor is ``(before, before_id)``; without ``before_id`` every
        message at exactly ``before`` is excluded.
        """
        ...

    async def delete_for_group(self, group_id: UUID) -> int:
        """Delete every message of a group. Returns the number removed."""
        ...
