"""User API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_user_service
from api.v1.schemas.group import GroupResponse
from api.v1.schemas.user import (
    JoinedGroupsResponse,
    ProfileDetailResponse,
    ProfileListResponse,
    ProfileResponse,
    ReconcileResponse,
)
from core.rate_limit import limiter
from domain.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Get my profile",
    responses={404: {"description": "Profile not found"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ProfileDetailResponse:
    profile = await service.get_profile(user.id)
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.get(
    "/me/groups",
    response_model=JoinedGroupsResponse,
    summary="List my groups",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_my_groups(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> JoinedGroupsResponse:
    """List every group the caller belongs to."""
    groups = await service.get_joined_groups(user.id)
    data = [
        GroupResponse(
            id=g.id,
            name=g.name,
            description=g.description,
            visibility=g.visibility.value,
            owner_id=g.owner_id,
            max_members=g.max_members,
            member_count=g.member_count,
            created_at=g.created_at,
        )
        for g in groups
    ]
    return JoinedGroupsResponse(data=data, meta={"total": len(data)})


@router.post(
    "/me/groups/reconcile",
    response_model=ReconcileResponse,
    summary="Rebuild my joined-groups index",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def reconcile_my_groups(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ReconcileResponse:
    """Repair the caller's joined-groups index from actual memberships."""
    group_ids = await service.reconcile_joined_groups(user.id)
    return ReconcileResponse(group_ids=sorted(group_ids, key=str))


@router.get(
    "/search",
    response_model=ProfileListResponse,
    summary="Search users",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def search_users(
    request: Request,
    user: CurrentUser,
    q: str = Query("", max_length=100),
    service: UserService = Depends(get_user_service),
) -> ProfileListResponse:
    """Find users by email, e.g. to add them to a group."""
    profiles = await service.search(q)
    data = [ProfileResponse.model_validate(p) for p in profiles]
    return ProfileListResponse(data=data, meta={"total": len(data)})
