"""
Authorization: which caller may run which operation.

Server-side gates depend on authentication and role only (see POLICIES).
Permission flags are stored per user and returned by /api/user so the
client can show or hide actions; `user_has_permission` answers flag
questions but no route is gated on a flag.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Any

from flask import current_app, g, request

from app.fellowship.constants import Permission, Role
from app.fellowship.errors import ApiError, ForbiddenError, UnauthorizedError
from app.fellowship.models import User


class Access(Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    STAFF = "staff"  # any role except member
    SYSTEM_ADMIN = "system_admin"


@dataclass(frozen=True)
class Policy:
    access: Access
    # Raised for anonymous callers. Some endpoints answer 403 rather than 401.
    anonymous_error: type[ApiError] = UnauthorizedError


POLICIES: dict[str, Policy] = {
    "users.list": Policy(Access.STAFF, ForbiddenError),
    "users.create": Policy(Access.STAFF, ForbiddenError),
    "users.update_permissions": Policy(Access.SYSTEM_ADMIN, ForbiddenError),
    "members.list": Policy(Access.PUBLIC),
    "members.get": Policy(Access.PUBLIC),
    "members.create": Policy(Access.AUTHENTICATED),
    "announcements.list": Policy(Access.PUBLIC),
    "announcements.create": Policy(Access.AUTHENTICATED),
    "comments.list": Policy(Access.PUBLIC),
    "comments.create": Policy(Access.AUTHENTICATED),
    "groups.list": Policy(Access.PUBLIC),
    "groups.create": Policy(Access.AUTHENTICATED, ForbiddenError),
    "groups.join": Policy(Access.AUTHENTICATED, ForbiddenError),
    "groups.roster": Policy(Access.AUTHENTICATED),
    "group_members.update_status": Policy(Access.STAFF, ForbiddenError),
}


def role_satisfies(role: str, access: Access) -> bool:
    if access in (Access.PUBLIC, Access.AUTHENTICATED):
        return True
    if access is Access.STAFF:
        return role != Role.MEMBER.value
    if access is Access.SYSTEM_ADMIN:
        return role == Role.SYSTEM_ADMIN.value
    raise ValueError(f"Unhandled access level: {access}")


def can(user: User | None, action: str) -> bool:
    policy = POLICIES[action]
    if policy.access is Access.PUBLIC:
        return True
    if user is None:
        return False
    return role_satisfies(user.role, policy.access)


def can_assign_role(actor: User, role: str) -> bool:
    """Only a system_admin may hand out the system_admin role."""
    if role == Role.SYSTEM_ADMIN.value:
        return actor.role == Role.SYSTEM_ADMIN.value
    return actor.is_staff


def user_has_permission(user: User | None, permission: Permission) -> bool:
    if not user:
        return False
    if user.role == Role.SYSTEM_ADMIN.value:
        return True
    return permission.value in (user.permissions or [])


def current_user() -> User | None:
    return getattr(g, "current_user", None)


def require_access(action: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    policy = POLICIES[action]

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user = current_user()
            if policy.access is not Access.PUBLIC and user is None:
                raise policy.anonymous_error()
            if not can(user, action):
                current_app.logger.warning(
                    "Forbidden: action=%s user_id=%s role=%s path=%s request_id=%s",
                    action,
                    user.id if user else None,
                    user.role if user else None,
                    request.path,
                    getattr(g, "request_id", None),
                )
                raise ForbiddenError()
            return fn(*args, **kwargs)

        return wrapped

    return decorator
