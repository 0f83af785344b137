"""Join request domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class JoinRequestStatus(StrEnum):
    """Status of a private-group join request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class JoinRequest:
    """Domain entity for a request to join a private group.

    Leaves ``pending`` exactly once; approved and rejected are terminal.
    """

    group_id: UUID
    user_id: UUID
    id: UUID = field(default_factory=uuid4)
    status: JoinRequestStatus = JoinRequestStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    processed_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == JoinRequestStatus.PENDING

    def approve(self) -> None:
        """Mark the request as approved."""
        self._finish(JoinRequestStatus.APPROVED)

    def reject(self) -> None:
        """Mark the request as rejected."""
        self._finish(JoinRequestStatus.REJECTED)

    def _finish(self, status: JoinRequestStatus) -> None:
        if not self.is_pending:
            raise ValueError(f"Join request {self.id} is already {self.status}")
        self.status = status
        self.processed_at = datetime.utcnow()
