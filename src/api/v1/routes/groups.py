"""Group API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_group_service, get_membership_service
from api.v1.schemas.group import (
    GroupCreate,
    GroupDetailResponse,
    GroupListResponse,
    GroupMembersResponse,
    GroupPermissionsResponse,
    GroupResponse,
    GroupUpdate,
    GroupViewResponse,
    MemberRoleResponse,
    MemberTargetRequest,
    TransferOwnershipRequest,
    UpdateRoleRequest,
)
from core.rate_limit import limiter
from domain.entities.group import Group, GroupSummary
from domain.services.access_control import role_of
from domain.services.group_service import GroupService
from domain.services.membership_service import MembershipService

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post(
    "",
    response_model=GroupDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
    responses={
        201: {"description": "Group created"},
        400: {"description": "Invalid visibility or capacity"},
        409: {"description": "Group name already exists"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_group(
    request: Request,
    body: GroupCreate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Create a group. The caller becomes its owner."""
    group = await service.create(
        owner_id=user.id,
        name=body.name,
        visibility=body.visibility,
        description=body.description,
        max_members=body.max_members,
    )
    return GroupDetailResponse(data=_build_group_response(group))


@router.get(
    "/discover",
    response_model=GroupListResponse,
    summary="Discover public groups",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def discover_groups(
    request: Request,
    user: CurrentUser,
    search: str | None = Query(None, max_length=100),
    service: GroupService = Depends(get_group_service),
) -> GroupListResponse:
    """List public groups, optionally filtered by name."""
    groups = await service.discover(search)
    data = [_build_summary_response(g) for g in groups]
    return GroupListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/{group_id}",
    response_model=GroupViewResponse,
    summary="Get group details",
    responses={404: {"description": "Group not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupViewResponse:
    """Get a group with the caller's role, permissions and request status."""
    details = await service.get_details(group_id, user.id)
    return GroupViewResponse(
        data=_build_group_response(details.group),
        user_role=details.role.value,
        permissions=GroupPermissionsResponse.model_validate(details.permissions),
        join_request_status=details.join_request_status,
    )


@router.patch(
    "/{group_id}",
    response_model=GroupDetailResponse,
    summary="Update group settings",
    responses={
        200: {"description": "Group updated"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_group(
    request: Request,
    group_id: UUID,
    body: GroupUpdate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Update a group. Requires owner or admin."""
    group = await service.update(
        group_id=group_id,
        user_id=user.id,
        name=body.name,
        description=body.description,
        max_members=body.max_members,
    )
    return GroupDetailResponse(data=_build_group_response(group))


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a group",
    responses={
        204: {"description": "Group deleted"},
        403: {"description": "Only the owner can delete the group"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> None:
    """Delete a group with its messages and join requests. Owner only."""
    await service.delete(group_id, user.id)
    return None


# --- Membership ---


@router.get(
    "/{group_id}/members",
    response_model=GroupMembersResponse,
    summary="List group members",
    responses={
        403: {"description": "Private group and caller is not a member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_group_members(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupMembersResponse:
    """List the owner, admins and members of a group."""
    group = await service.list_members(group_id, user.id)
    return GroupMembersResponse(
        owner_id=group.owner_id,
        admins=sorted(group.admins, key=str),
        members=sorted(group.members, key=str),
        total_members=group.member_count,
    )


@router.post(
    "/{group_id}/join",
    response_model=GroupDetailResponse,
    summary="Join a public group",
    responses={
        404: {"description": "Group not found"},
        409: {"description": "Already a member, group full or group is private"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def join_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> GroupDetailResponse:
    """Join a public group. Private groups take a join request instead."""
    group = await service.join_public(group_id, user.id)
    return GroupDetailResponse(data=_build_group_response(group))


@router.post(
    "/{group_id}/leave",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave a group",
    responses={409: {"description": "Not a member, or caller is the owner"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def leave_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> None:
    """Leave a group. The owner must transfer ownership first."""
    await service.leave(group_id, user.id)
    return None


@router.post(
    "/{group_id}/members",
    response_model=GroupDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add group member",
    responses={
        403: {"description": "Insufficient permissions"},
        404: {"description": "Group or user not found"},
        409: {"description": "Already a member or group full"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def add_group_member(
    request: Request,
    group_id: UUID,
    body: MemberTargetRequest,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> GroupDetailResponse:
    """Add a user to a group. Requires owner or admin."""
    group = await service.add_member(group_id, body.user_id, user.id)
    return GroupDetailResponse(data=_build_group_response(group))


@router.delete(
    "/{group_id}/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove group member",
    responses={
        403: {"description": "Insufficient permissions"},
        409: {"description": "Target is the owner or not a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_group_member(
    request: Request,
    group_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> None:
    """Remove a member from a group. Requires owner or admin."""
    await service.remove_member(group_id, member_user_id, user.id)
    return None


@router.post(
    "/{group_id}/members/{member_user_id}/banish",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Banish group member",
    responses={
        403: {"description": "Only the owner can banish"},
        409: {"description": "Target is the owner or not a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def banish_group_member(
    request: Request,
    group_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> None:
    """Banish a member. Owner only."""
    await service.banish(group_id, member_user_id, user.id)
    return None


@router.patch(
    "/{group_id}/members/role",
    response_model=MemberRoleResponse,
    summary="Update member role",
    responses={
        400: {"description": "Invalid role"},
        403: {"description": "Insufficient permissions"},
        409: {"description": "Target is the owner or not a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_member_role(
    request: Request,
    group_id: UUID,
    body: UpdateRoleRequest,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> MemberRoleResponse:
    """Promote a member to admin or demote an admin to member."""
    group = await service.update_role(group_id, body.user_id, body.role, user.id)
    return MemberRoleResponse(
        group_id=group.id,
        user_id=body.user_id,
        role=role_of(group, body.user_id).value,
    )


@router.post(
    "/{group_id}/transfer-ownership",
    response_model=GroupDetailResponse,
    summary="Transfer group ownership",
    responses={
        403: {"description": "Only the owner can transfer ownership"},
        404: {"description": "New owner is not a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def transfer_ownership(
    request: Request,
    group_id: UUID,
    body: TransferOwnershipRequest,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> GroupDetailResponse:
    """Make another member the owner. Owner only."""
    group = await service.transfer_ownership(group_id, body.new_owner_id, user.id)
    return GroupDetailResponse(data=_build_group_response(group))


def _build_group_response(group: Group) -> GroupResponse:
    """Convert domain entity to response schema."""
    return GroupResponse(
        id=group.id,
        name=group.name,
        description=group.description,
        visibility=group.visibility.value,
        owner_id=group.owner_id,
        max_members=group.max_members,
        member_count=group.member_count,
        created_at=group.created_at,
    )


def _build_summary_response(summary: GroupSummary) -> GroupResponse:
    """Convert a discovery entry to response schema."""
    return GroupResponse(
        id=summary.id,
        name=summary.name,
        description=summary.description,
        visibility=summary.visibility.value,
        owner_id=summary.owner_id,
        max_members=summary.max_members,
        member_count=summary.member_count,
        created_at=summary.created_at,
    )
