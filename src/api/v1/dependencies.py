"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.encryption_service import EncryptionService
from domain.services.group_service import GroupService
from domain.services.join_request_service import JoinRequestService
from domain.services.membership_service import MembershipService
from domain.services.message_service import MessageService
from domain.services.user_service import UserService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_encryption_service() -> EncryptionService:
    """Get Encryption service instance."""
    return EncryptionService()


@lru_cache
def get_group_service() -> GroupService:
    """Get Group service instance."""
    return GroupService(
        get_uow_factory(),
        encryption_service=get_encryption_service(),
    )


@lru_cache
def get_membership_service() -> MembershipService:
    """Get Membership service instance."""
    return MembershipService(get_uow_factory())


@lru_cache
def get_join_request_service() -> JoinRequestService:
    """Get Join Request service instance."""
    return JoinRequestService(get_uow_factory())


@lru_cache
def get_message_service() -> MessageService:
    """Get Message service instance."""
    return MessageService(
        get_uow_factory(),
        encryption_service=get_encryption_service(),
    )


@lru_cache
def get_user_service() -> UserService:
    """Get User service instance."""
    return UserService(get_uow_factory())
