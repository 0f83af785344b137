"""Unit tests for MembershipService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    AlreadyAGroupMemberError,
    GroupFullError,
    GroupMemberNotFoundError,
    GroupNotFoundError,
    GroupNotPublicError,
    InsufficientPermissionsError,
    InvalidRoleError,
    NotInGroupError,
    OwnerCannotLeaveError,
    OwnerImmutableError,
    UserNotFoundError,
)
from domain.entities.group import Group, GroupRole
from domain.entities.join_request import JoinRequest, JoinRequestStatus
from domain.entities.profile import Profile
from domain.services.membership_service import MembershipService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> MembershipService:
    return MembershipService(lambda: uow)


def _with_admin(group: Group) -> UUID:
    admin_id = uuid4()
    group.add_member(admin_id)
    group.grant_admin(admin_id)
    return admin_id


# --- join_public ---


class TestJoinPublic:
    @pytest.mark.asyncio
    async def test_capacity_is_enforced(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        """Second joiner of a two-seat group is turned away."""
        public_group.max_members = 2
        uow.groups.get.return_value = public_group
        user_b, user_c = uuid4(), uuid4()

        await service.join_public(public_group.id, user_b)
        with pytest.raises(GroupFullError):
            await service.join_public(public_group.id, user_c)

        assert public_group.members == {owner_id, user_b}
        uow.users.add_joined_group.assert_awaited_once_with(user_b, public_group.id)

    @pytest.mark.asyncio
    async def test_already_member(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        uow.groups.get.return_value = public_group

        with pytest.raises(AlreadyAGroupMemberError):
            await service.join_public(public_group.id, owner_id)

    @pytest.mark.asyncio
    async def test_private_group_needs_request(
        self, service: MembershipService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = private_group

        with pytest.raises(GroupNotPublicError):
            await service.join_public(private_group.id, user_id)

        uow.groups.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_group(self, service: MembershipService, uow: FakeUnitOfWork):
        uow.groups.get.return_value = None

        with pytest.raises(GroupNotFoundError):
            await service.join_public(uuid4(), uuid4())


# --- leave / transfer ---


class TestLeaveAndTransfer:
    @pytest.mark.asyncio
    async def test_owner_must_transfer_before_leaving(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        uow.groups.get.return_value = public_group
        new_owner = uuid4()

        with pytest.raises(OwnerCannotLeaveError):
            await service.leave(public_group.id, owner_id)
        with pytest.raises(GroupMemberNotFoundError):
            await service.transfer_ownership(public_group.id, new_owner, owner_id)

        public_group.add_member(new_owner)
        await service.transfer_ownership(public_group.id, new_owner, owner_id)
        result = await service.leave(public_group.id, owner_id)

        assert result.owner_id == new_owner
        assert owner_id not in result.members
        assert owner_id not in result.admins
        uow.users.remove_joined_group.assert_awaited_once_with(owner_id, public_group.id)

    @pytest.mark.asyncio
    async def test_non_member_cannot_leave(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = public_group

        with pytest.raises(NotInGroupError):
            await service.leave(public_group.id, user_id)

    @pytest.mark.asyncio
    async def test_admin_cannot_transfer(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        admin_id = _with_admin(public_group)
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        with pytest.raises(InsufficientPermissionsError):
            await service.transfer_ownership(public_group.id, user_id, admin_id)


# --- add / remove ---


class TestAddMember:
    @pytest.mark.asyncio
    async def test_admin_adds_existing_user(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        admin_id = _with_admin(public_group)
        uow.groups.get.return_value = public_group
        uow.users.get.return_value = Profile(id=user_id, email="u@example.com")

        result = await service.add_member(public_group.id, user_id, admin_id)

        assert user_id in result.members
        uow.users.add_joined_group.assert_awaited_once_with(user_id, public_group.id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_direct_add_closes_pending_request(
        self, service: MembershipService, uow: FakeUnitOfWork, private_group: Group, owner_id: UUID, user_id: UUID
    ):
        request = JoinRequest(group_id=private_group.id, user_id=user_id)
        uow.groups.get.return_value = private_group
        uow.users.get.return_value = Profile(id=user_id, email="u@example.com")
        uow.join_requests.get_pending.return_value = request

        await service.add_member(private_group.id, user_id, owner_id)

        assert request.status == JoinRequestStatus.APPROVED
        assert request.processed_at is not None
        uow.join_requests.update.assert_awaited_once_with(request)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_member_cannot_add(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        member = uuid4()
        public_group.add_member(member)
        uow.groups.get.return_value = public_group

        with pytest.raises(InsufficientPermissionsError):
            await service.add_member(public_group.id, user_id, member)

    @pytest.mark.asyncio
    async def test_unknown_user(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        uow.groups.get.return_value = public_group
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.add_member(public_group.id, uuid4(), owner_id)

    @pytest.mark.asyncio
    async def test_full_group(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID, user_id: UUID
    ):
        public_group.max_members = 1
        uow.groups.get.return_value = public_group
        uow.users.get.return_value = Profile(id=user_id)

        with pytest.raises(GroupFullError):
            await service.add_member(public_group.id, user_id, owner_id)


class TestRemoveMember:
    @pytest.mark.asyncio
    async def test_admin_removes_member(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        admin_id = _with_admin(public_group)
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        result = await service.remove_member(public_group.id, user_id, admin_id)

        assert user_id not in result.members
        uow.users.remove_joined_group.assert_awaited_once_with(user_id, public_group.id)

    @pytest.mark.asyncio
    async def test_admin_cannot_remove_owner(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        admin_id = _with_admin(public_group)
        uow.groups.get.return_value = public_group

        with pytest.raises(OwnerImmutableError):
            await service.remove_member(public_group.id, owner_id, admin_id)

        assert owner_id in public_group.members


# --- banish ---


class TestBanish:
    @pytest.mark.asyncio
    async def test_targeting_owner_is_a_conflict_even_for_admin(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        admin_id = _with_admin(public_group)
        uow.groups.get.return_value = public_group

        with pytest.raises(OwnerImmutableError):
            await service.banish(public_group.id, owner_id, admin_id)

        uow.groups.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_cannot_banish_member(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        admin_id = _with_admin(public_group)
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        with pytest.raises(InsufficientPermissionsError):
            await service.banish(public_group.id, user_id, admin_id)

    @pytest.mark.asyncio
    async def test_owner_banishes_admin(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        admin_id = _with_admin(public_group)
        uow.groups.get.return_value = public_group

        result = await service.banish(public_group.id, admin_id, owner_id)

        assert admin_id not in result.members
        assert admin_id not in result.admins

    @pytest.mark.asyncio
    async def test_banished_user_can_rejoin_public_group(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID, user_id: UUID
    ):
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        await service.banish(public_group.id, user_id, owner_id)
        result = await service.join_public(public_group.id, user_id)

        assert user_id in result.members


# --- update_role ---


class TestUpdateRole:
    @pytest.mark.asyncio
    async def test_promote_and_demote(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID, user_id: UUID
    ):
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        await service.update_role(public_group.id, user_id, "admin", owner_id)
        assert await service.get_role(public_group.id, user_id) == GroupRole.ADMIN

        await service.update_role(public_group.id, user_id, GroupRole.MEMBER, owner_id)
        assert await service.get_role(public_group.id, user_id) == GroupRole.MEMBER

    @pytest.mark.asyncio
    async def test_granting_admin_twice_is_idempotent(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID, user_id: UUID
    ):
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        await service.update_role(public_group.id, user_id, "admin", owner_id)
        result = await service.update_role(public_group.id, user_id, "admin", owner_id)

        assert result.admins == {owner_id, user_id}

    @pytest.mark.parametrize("role", ["owner", "none", "superuser"])
    @pytest.mark.asyncio
    async def test_rejects_unassignable_role(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID, user_id: UUID, role: str
    ):
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        with pytest.raises(InvalidRoleError):
            await service.update_role(public_group.id, user_id, role, owner_id)

    @pytest.mark.asyncio
    async def test_admin_cannot_demote_owner(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        admin_id = _with_admin(public_group)
        uow.groups.get.return_value = public_group

        with pytest.raises(OwnerImmutableError):
            await service.update_role(public_group.id, owner_id, "member", admin_id)

        assert owner_id in public_group.admins

    @pytest.mark.asyncio
    async def test_target_must_be_member(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, owner_id: UUID
    ):
        uow.groups.get.return_value = public_group

        with pytest.raises(NotInGroupError):
            await service.update_role(public_group.id, uuid4(), "admin", owner_id)

    @pytest.mark.asyncio
    async def test_member_cannot_change_roles(
        self, service: MembershipService, uow: FakeUnitOfWork, public_group: Group, user_id: UUID
    ):
        member = uuid4()
        public_group.add_member(member)
        public_group.add_member(user_id)
        uow.groups.get.return_value = public_group

        with pytest.raises(InsufficientPermissionsError):
            await service.update_role(public_group.id, user_id, "admin", member)
