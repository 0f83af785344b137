"""Join request API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_join_request_service
from api.v1.schemas.join_request import (
    JoinRequestDetailResponse,
    JoinRequestListResponse,
    JoinRequestResponse,
    JoinRequestStatusResponse,
)
from core.rate_limit import limiter
from domain.entities.join_request import JoinRequest
from domain.services.join_request_service import JoinRequestService

router = APIRouter(
    prefix="/groups/{group_id}/join-requests",
    tags=["join-requests"],
)


@router.post(
    "",
    response_model=JoinRequestDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request to join a private group",
    responses={
        201: {"description": "Join request submitted"},
        404: {"description": "Group not found"},
        409: {"description": "Group is public, already a member or request pending"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def submit_join_request(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestDetailResponse:
    """Submit a join request for a private group."""
    join_request = await service.submit(group_id, user.id)
    return JoinRequestDetailResponse(data=_build_response(join_request))


@router.get(
    "",
    response_model=JoinRequestListResponse,
    summary="List pending join requests",
    responses={
        403: {"description": "Only the owner can review requests"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_join_requests(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestListResponse:
    """List the pending requests for a group. Owner only."""
    pending = await service.list_pending(group_id, user.id)
    data = [_build_response(r) for r in pending]
    return JoinRequestListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/me",
    response_model=JoinRequestStatusResponse,
    summary="Get my join request",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_join_request(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestStatusResponse:
    """Get the caller's most recent request for this group."""
    latest = await service.get_status(group_id, user.id)
    return JoinRequestStatusResponse(
        data=_build_response(latest) if latest else None,
    )


@router.post(
    "/{user_id}/approve",
    response_model=JoinRequestDetailResponse,
    summary="Approve join request",
    responses={
        403: {"description": "Only the owner can review requests"},
        404: {"description": "No pending request"},
        409: {"description": "Group is full"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def approve_join_request(
    request: Request,
    group_id: UUID,
    user_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestDetailResponse:
    """Approve a pending request and add the requester to the group."""
    join_request = await service.approve(group_id, user_id, user.id)
    return JoinRequestDetailResponse(data=_build_response(join_request))


@router.post(
    "/{user_id}/decline",
    response_model=JoinRequestDetailResponse,
    summary="Decline join request",
    responses={
        403: {"description": "Only the owner can review requests"},
        404: {"description": "No pending request"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def decline_join_request(
    request: Request,
    group_id: UUID,
    user_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestDetailResponse:
    """Decline a pending request."""
    join_request = await service.decline(group_id, user_id, user.id)
    return JoinRequestDetailResponse(data=_build_response(join_request))


def _build_response(join_request: JoinRequest) -> JoinRequestResponse:
    return JoinRequestResponse(
        id=join_request.id,
        group_id=join_request.group_id,
        user_id=join_request.user_id,
        status=join_request.status.value,
        created_at=join_request.created_at,
        processed_at=join_request.processed_at,
    )
