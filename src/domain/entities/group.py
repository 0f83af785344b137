"""Group domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class GroupVisibility(StrEnum):
    """Who can join a group without asking."""

    PUBLIC = "public"
    PRIVATE = "private"


class GroupRole(StrEnum):
    """Effective role of a user within a group."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    NONE = "none"


# Roles that can be assigned through a role change.
ASSIGNABLE_ROLES = frozenset({GroupRole.ADMIN, GroupRole.MEMBER})


@dataclass
class Group:
    """Domain entity for a group.

    ``members`` is the source of truth for membership; ``admins`` is always a
    subset of it and both always contain ``owner_id``. ``version`` is the
    optimistic concurrency token checked on every save.
    """

    name: str
    owner_id: UUID
    encryption_key: str = field(repr=False)
    id: UUID = field(default_factory=uuid4)
    visibility: GroupVisibility = GroupVisibility.PUBLIC
    description: str | None = None
    max_members: int | None = None
    members: set[UUID] = field(default_factory=set)
    admins: set[UUID] = field(default_factory=set)
    version: int = 1
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Copy the member and admin sets, then seed the owner into both."""
        self.members = set(self.members)
        self.admins = set(self.admins)
        self.members.add(self.owner_id)
        self.admins.add(self.owner_id)

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def is_public(self) -> bool:
        return self.visibility == GroupVisibility.PUBLIC

    @property
    def is_full(self) -> bool:
        """True when one more member would exceed max_members."""
        return self.max_members is not None and len(self.members) >= self.max_members

    def is_member(self, user_id: UUID) -> bool:
        return user_id in self.members

    def add_member(self, user_id: UUID) -> None:
        self.members.add(user_id)

    def remove_member(self, user_id: UUID) -> None:
        """Drop a user from both the member and admin sets."""
        self.members.discard(user_id)
        self.admins.discard(user_id)

    def grant_admin(self, user_id: UUID) -> None:
        self.admins.add(user_id)

    def revoke_admin(self, user_id: UUID) -> None:
        self.admins.discard(user_id)

    def transfer_to(self, new_owner_id: UUID) -> None:
        """Make new_owner_id the owner; the previous owner keeps their seats."""
        self.owner_id = new_owner_id
        self.members.add(new_owner_id)
        self.admins.add(new_owner_id)


@dataclass
class GroupPermissions:
    """Permission set derived from a user's role in a group."""

    role: GroupRole
    can_post: bool = False
    can_manage: bool = False
    can_view_members: bool = False
    can_delete: bool = False
    can_transfer_ownership: bool = False
    can_review_join_requests: bool = False
    can_banish: bool = False


@dataclass
class GroupDetails:
    """Read model for a single group as seen by one user."""

    group: Group
    role: GroupRole
    permissions: GroupPermissions
    join_request_status: str | None = None

    @property
    def member_count(self) -> int:
        return self.group.member_count


@dataclass
class GroupSummary:
    """Discovery listing entry; carries no membership sets or key."""

    id: UUID
    name: str
    visibility: GroupVisibility
    owner_id: UUID
    member_count: int
    created_at: datetime
    description: str | None = None
    max_members: int | None = None
