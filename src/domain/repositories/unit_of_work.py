"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.group_repository import IGroupRepository
from domain.repositories.join_request_repository import IJoinRequestRepository
from domain.repositories.message_repository import IMessageRepository
from domain.repositories.user_repository import IUserRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    groups: IGroupRepository
    join_requests: IJoinRequestRepository
    messages: IMessageRepository
    users: IUserRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
