"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    NOT_A_GROUP_MEMBER = "NOT_A_GROUP_MEMBER"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    GROUP_MEMBER_NOT_FOUND = "GROUP_MEMBER_NOT_FOUND"
    JOIN_REQUEST_NOT_FOUND = "JOIN_REQUEST_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ROLE = "INVALID_ROLE"
    INVALID_VISIBILITY = "INVALID_VISIBILITY"
    INVALID_CAPACITY = "INVALID_CAPACITY"
    INVALID_MESSAGE = "INVALID_MESSAGE"

    # Conflict errors (409)
    ALREADY_A_GROUP_MEMBER = "ALREADY_A_GROUP_MEMBER"
    NOT_IN_GROUP = "NOT_IN_GROUP"
    GROUP_FULL = "GROUP_FULL"
    GROUP_NAME_TAKEN = "GROUP_NAME_TAKEN"
    GROUP_NOT_PRIVATE = "GROUP_NOT_PRIVATE"
    GROUP_NOT_PUBLIC = "GROUP_NOT_PUBLIC"
    DUPLICATE_JOIN_REQUEST = "DUPLICATE_JOIN_REQUEST"
    OWNER_CANNOT_LEAVE = "OWNER_CANNOT_LEAVE"
    OWNER_IMMUTABLE = "OWNER_IMMUTABLE"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    CRYPTO_ERROR = "CRYPTO_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


# --- Not found (404) ---


class UserNotFoundError(AppException):
    """User profile not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class GroupNotFoundError(AppException):
    """Group not found."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_FOUND,
            message=f"Group not found: {group_id}",
            status_code=404,
            details={"group_id": group_id},
        )


class GroupMemberNotFoundError(AppException):
    """The referenced user is not a member of the group."""

    def __init__(self, group_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_MEMBER_NOT_FOUND,
            message="User is not a member of this group",
            status_code=404,
            details={"group_id": group_id, "user_id": user_id},
        )


class JoinRequestNotFoundError(AppException):
    """No pending join request for the (group, user) pair."""

    def __init__(self, group_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_NOT_FOUND,
            message="No pending join request for this user",
            status_code=404,
            details={"group_id": group_id, "user_id": user_id},
        )


# --- Forbidden (403) ---


class InsufficientPermissionsError(AppException):
    """User does not have sufficient permissions."""

    def __init__(self, required_role: str = "admin", group_id: str | None = None) -> None:
        details: dict[str, Any] = {"required_role": required_role}
        if group_id:
            details["group_id"] = group_id
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required role: {required_role}",
            status_code=403,
            details=details,
        )


class NotAGroupMemberError(AppException):
    """Caller must be a group member to read or post."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_GROUP_MEMBER,
            message="You are not a member of this group",
            status_code=403,
            details={"group_id": group_id},
        )


# --- Invalid (400) ---


class InvalidRoleError(AppException):
    """Role token is not one of the assignable roles."""

    def __init__(self, role: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE,
            message=f"Invalid role specified: {role}",
            status_code=400,
            details={"role": role},
        )


class InvalidVisibilityError(AppException):
    """Visibility must be public or private."""

    def __init__(self, visibility: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_VISIBILITY,
            message=f"Group visibility must be public or private, got: {visibility}",
            status_code=400,
            details={"visibility": visibility},
        )


class InvalidCapacityError(AppException):
    """max_members is not a usable capacity for the group."""

    def __init__(self, max_members: int, member_count: int = 0) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_CAPACITY,
            message="Group capacity must be positive and not below the current member count",
            status_code=400,
            details={"max_members": max_members, "member_count": member_count},
        )


class InvalidMessageError(AppException):
    """Message content is empty."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_MESSAGE,
            message="Message content is required",
            status_code=400,
        )


# --- Conflict (409) ---


class AlreadyAGroupMemberError(AppException):
    """User is already a member of the group."""

    def __init__(self, group_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_GROUP_MEMBER,
            message="User is already a member of this group",
            status_code=409,
            details={"group_id": group_id, "user_id": user_id},
        )


class NotInGroupError(AppException):
    """The membership change requires the user to be a current member."""

    def __init__(self, group_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_IN_GROUP,
            message="User is not a member of this group",
            status_code=409,
            details={"group_id": group_id, "user_id": user_id},
        )


class GroupFullError(AppException):
    """Group has reached max_members."""

    def __init__(self, group_id: str, max_members: int) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_FULL,
            message="Group is full",
            status_code=409,
            details={"group_id": group_id, "max_members": max_members},
        )


class GroupNameTakenError(AppException):
    """Group name is already in use."""

    def __init__(self, name: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NAME_TAKEN,
            message=f"Group name already exists: {name}",
            status_code=409,
            details={"name": name},
        )


class GroupNotPrivateError(AppException):
    """Join requests only apply to private groups."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_PRIVATE,
            message="This group is public; join it directly",
            status_code=409,
            details={"group_id": group_id},
        )


class GroupNotPublicError(AppException):
    """Private groups can only be joined through a join request."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_PUBLIC,
            message="This group is private; submit a join request",
            status_code=409,
            details={"group_id": group_id},
        )


class DuplicateJoinRequestError(AppException):
    """A pending join request already exists for this user and group."""

    def __init__(self, group_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_JOIN_REQUEST,
            message="Join request already pending",
            status_code=409,
            details={"group_id": group_id, "user_id": user_id},
        )


class OwnerCannotLeaveError(AppException):
    """The owner must transfer ownership before leaving."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.OWNER_CANNOT_LEAVE,
            message="Group owner cannot leave without transferring ownership",
            status_code=409,
            details={"group_id": group_id},
        )


class OwnerImmutableError(AppException):
    """The owner cannot be removed, banished or have their role changed."""

    def __init__(self, group_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.OWNER_IMMUTABLE,
            message="The group owner cannot be removed or demoted",
            status_code=409,
            details={"group_id": group_id, "user_id": user_id},
        )


class ConcurrentModificationError(AppException):
    """The group changed between read and write."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CONCURRENT_MODIFICATION,
            message="Group was modified concurrently, please retry",
            status_code=409,
            details={"group_id": group_id},
        )


# --- Server errors (500) ---


class CryptoError(AppException):
    """Encryption or decryption of a message body failed."""

    def __init__(self, message: str = "Unable to process encrypted content") -> None:
        super().__init__(
            error_code=ErrorCode.CRYPTO_ERROR,
            message=message,
            status_code=500,
        )
