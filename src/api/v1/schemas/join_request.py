"""Pydantic schemas for Join Request API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class JoinRequestResponse(BaseModel):
    """Schema for Join Request response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    group_id: UUID
    user_id: UUID
    status: str
    created_at: datetime
    processed_at: datetime | None = None


class JoinRequestListResponse(BaseModel):
    """Schema for list of Join Requests response."""

    data: list[JoinRequestResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class JoinRequestDetailResponse(BaseModel):
    """Schema for single Join Request response."""

    data: JoinRequestResponse


class JoinRequestStatusResponse(BaseModel):
    """Schema for the caller's latest request, which may not exist."""

    data: JoinRequestResponse | None = None
