"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.group import Group, GroupVisibility
from domain.services.encryption_service import EncryptionService


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing.

    ``groups.save`` echoes the aggregate back with its version bumped, like
    the real repository does.
    """

    def __init__(self) -> None:
        self.groups = AsyncMock()
        self.join_requests = AsyncMock()
        self.messages = AsyncMock()
        self.users = AsyncMock()
        self.committed = False
        self.rolled_back = False
        self.commits = 0

        async def save(group: Group) -> Group:
            group.version += 1
            return group

        self.groups.save.side_effect = save
        self.groups.create.side_effect = lambda group: group
        self.groups.get_by_name.return_value = None
        self.join_requests.get_pending.return_value = None
        self.join_requests.get_latest.return_value = None

    async def commit(self) -> None:
        self.committed = True
        self.commits += 1

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type:
            await self.rollback()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def owner_id() -> UUID:
    """The group owner."""
    return uuid4()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID (not the owner)."""
    return uuid4()


@pytest.fixture
def actor_id() -> UUID:
    """A random actor ID (distinct from user_id)."""
    return uuid4()


@pytest.fixture
def encryption() -> EncryptionService:
    return EncryptionService()


@pytest.fixture
def public_group(owner_id: UUID, encryption: EncryptionService) -> Group:
    """A public group whose only member is the owner."""
    return Group(
        name="Hiking Club",
        owner_id=owner_id,
        encryption_key=encryption.generate_key(),
        visibility=GroupVisibility.PUBLIC,
    )


@pytest.fixture
def private_group(owner_id: UUID, encryption: EncryptionService) -> Group:
    """A private group whose only member is the owner."""
    return Group(
        name="Book Circle",
        owner_id=owner_id,
        encryption_key=encryption.generate_key(),
        visibility=GroupVisibility.PRIVATE,
    )
