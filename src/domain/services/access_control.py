"""Role and permission evaluation for groups.

Pure functions of the group's current state. Services call these against the
group they just loaded inside their unit of work, so a decision is never made
from a stale or cached role.
"""

from uuid import UUID

from domain.entities.group import Group, GroupPermissions, GroupRole

MANAGER_ROLES = frozenset({GroupRole.OWNER, GroupRole.ADMIN})
MEMBER_ROLES = frozenset({GroupRole.OWNER, GroupRole.ADMIN, GroupRole.MEMBER})


def role_of(group: Group, user_id: UUID) -> GroupRole:
    """Effective role, checked in precedence order owner > admin > member."""
    if group.owner_id == user_id:
        return GroupRole.OWNER
    if user_id in group.admins:
        return GroupRole.ADMIN
    if user_id in group.members:
        return GroupRole.MEMBER
    return GroupRole.NONE


def permissions_for(group: Group, user_id: UUID) -> GroupPermissions:
    """Derive the full permission set for a user in a group."""
    role = role_of(group, user_id)
    is_owner = role == GroupRole.OWNER

    return GroupPermissions(
        role=role,
        can_post=role in MEMBER_ROLES,
        can_manage=role in MANAGER_ROLES,
        can_view_members=role in MEMBER_ROLES or group.is_public,
        can_delete=is_owner,
        can_transfer_ownership=is_owner,
        can_review_join_requests=is_owner,
        can_banish=is_owner,
    )
