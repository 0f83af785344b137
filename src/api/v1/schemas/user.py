"""Pydantic schemas for User API."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.group import GroupResponse


class ProfileResponse(BaseModel):
    """Schema for a user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    display_name: str | None = None


class ProfileListResponse(BaseModel):
    """Schema for list of profiles response."""

    data: list[ProfileResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ProfileDetailResponse(BaseModel):
    """Schema for single profile response."""

    data: ProfileResponse


class JoinedGroupsResponse(BaseModel):
    """Schema for the groups a user belongs to."""

    data: list[GroupResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ReconcileResponse(BaseModel):
    """Schema for the rebuilt joined-groups index."""

    group_ids: list[UUID]
