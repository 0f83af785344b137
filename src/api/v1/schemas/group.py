"""Pydantic schemas for Group API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=100)
    visibility: str = Field("public", pattern="^(public|private)$")
    description: str | None = Field(None, max_length=500)
    max_members: int | None = Field(None, ge=1)


class GroupUpdate(BaseModel):
    """Schema for updating group settings."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    max_members: int | None = Field(None, ge=1)


class GroupResponse(BaseModel):
    """Schema for Group response. Never includes the encryption key."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    visibility: str
    owner_id: UUID
    max_members: int | None
    member_count: int = 0
    created_at: datetime


class GroupListResponse(BaseModel):
    """Schema for list of Groups response."""

    data: list[GroupResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class GroupDetailResponse(BaseModel):
    """Schema for single Group response."""

    data: GroupResponse


class GroupPermissionsResponse(BaseModel):
    """Schema for the caller's permissions in a group."""

    model_config = ConfigDict(from_attributes=True)

    can_post: bool
    can_manage: bool
    can_view_members: bool
    can_delete: bool
    can_transfer_ownership: bool
    can_review_join_requests: bool
    can_banish: bool


class GroupViewResponse(BaseModel):
    """Schema for a group as seen by the caller."""

    data: GroupResponse
    user_role: str
    permissions: GroupPermissionsResponse
    join_request_status: str | None = None


class GroupMembersResponse(BaseModel):
    """Schema for a group's member listing."""

    owner_id: UUID
    admins: list[UUID]
    members: list[UUID]
    total_members: int


class MemberTargetRequest(BaseModel):
    """Schema for adding a member to a group."""

    user_id: UUID


class UpdateRoleRequest(BaseModel):
    """Schema for changing a member's role."""

    user_id: UUID
    role: str = Field(..., min_length=1, max_length=20)


class TransferOwnershipRequest(BaseModel):
    """Schema for transferring group ownership."""

    new_owner_id: UUID


class MemberRoleResponse(BaseModel):
    """Schema for a member's role after a change."""

    group_id: UUID
    user_id: UUID
    role: str
