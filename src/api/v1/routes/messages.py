"""Group message API routes."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_message_service
from api.v1.schemas.message import (
    GroupMessageDetailResponse,
    GroupMessageListResponse,
    GroupMessageResponse,
    MessageCreate,
)
from core.rate_limit import limiter
from domain.services.message_service import MessageService

router = APIRouter(prefix="/groups/{group_id}/messages", tags=["messages"])


@router.post(
    "",
    response_model=GroupMessageDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
    responses={
        201: {"description": "Message stored encrypted"},
        400: {"description": "Empty message"},
        403: {"description": "Not a group member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def send_message(
    request: Request,
    group_id: UUID,
    body: MessageCreate,
    user: CurrentUser,
    service: MessageService = Depends(get_message_service),
) -> GroupMessageDetailResponse:
    """Post a message to a group. Content is encrypted at rest."""
    message = await service.send(group_id, user.id, body.content)
    return GroupMessageDetailResponse(
        data=GroupMessageResponse.model_validate(message)
    )


@router.get(
    "",
    response_model=GroupMessageListResponse,
    summary="List recent messages",
    responses={
        403: {"description": "Not a group member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_messages(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    limit: int | None = Query(None, ge=1, le=200),
    before: datetime | None = Query(None),
    before_id: UUID | None = Query(None),
    service: MessageService = Depends(get_message_service),
) -> GroupMessageListResponse:
    """List the newest messages, oldest first, decrypted for the caller."""
    messages = await service.list_messages(group_id, user.id, limit, before, before_id)
    data = [GroupMessageResponse.model_validate(m) for m in messages]
    return GroupMessageListResponse(data=data, meta={"count": len(data)})
