"""Pydantic schemas for Message API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Schema for posting a message."""

    content: str = Field(..., min_length=1, max_length=5000)


class GroupMessageResponse(BaseModel):
    """Schema for a decrypted group message."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    group_id: UUID
    sender_id: UUID
    content: str
    created_at: datetime


class GroupMessageListResponse(BaseModel):
    """Schema for list of group messages, oldest first."""

    data: list[GroupMessageResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class GroupMessageDetailResponse(BaseModel):
    """Schema for single message response."""

    data: GroupMessageResponse
