from __future__ import annotations

from typing import TYPE_CHECKING

from werkzeug.security import generate_password_hash

from app.fellowship.audit import record_event
from app.fellowship.constants import PERMISSION_VALUES, ROLE_VALUES, SEED_ADMIN_PERMISSIONS, Role
from app.fellowship.models import User
from app.fellowship.validation import ErrorList, check_choice, check_str, check_str_list, clean_str, dedupe

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


MIN_PASSWORD_LENGTH = 4


def validate_user_payload(payload: dict) -> ErrorList:
    """Validate user creation payload. Returns list of (field, message)."""
    errors: ErrorList = []
    check_str(errors, payload, "username", "Username", max_length=150)
    check_str(errors, payload, "password", "Password")
    password = payload.get("password")
    if isinstance(password, str) and password.strip() and len(password) < MIN_PASSWORD_LENGTH:
        errors.append(("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters."))
    check_choice(errors, payload, "role", "Role", ROLE_VALUES, required=False)
    check_str_list(errors, payload, "permissions", "Permissions", PERMISSION_VALUES, required=False)
    return errors


def validate_permissions_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_str_list(errors, payload, "permissions", "Permissions", PERMISSION_VALUES)
    return errors


def get_user(s: "Session", user_id: int) -> User | None:
    return s.get(User, user_id)


def get_user_by_username(s: "Session", username: str) -> User | None:
    return s.query(User).filter(User.username == username).one_or_none()


def get_users(s: "Session") -> list[User]:
    return s.query(User).order_by(User.id.asc()).all()


def create_user(s: "Session", payload: dict, actor: User | None) -> User:
    """Create a login account. `payload["password"]` is plaintext; only the hash is stored."""
    user = User(
        username=clean_str(payload.get("username")),
        password_hash=generate_password_hash(payload["password"]),
        role=payload.get("role") or Role.MEMBER.value,
        permissions=dedupe(payload.get("permissions") or []),
    )
    s.add(user)
    s.flush()

    record_event(
        s,
        actor=actor,
        action="user.create",
        entity_type="User",
        entity_id=str(user.id),
        metadata={"username": user.username, "role": user.role, "permissions": user.permissions},
    )
    return user


def update_user_permissions(s: "Session", user_id: int, permissions: list[str], actor: User) -> User | None:
    """Replace the user's permission set wholesale. Returns None when the user does not exist."""
    user = get_user(s, user_id)
    if user is None:
        return None
    before = list(user.permissions or [])
    # Assign a new list so the JSON column is flagged dirty.
    user.permissions = dedupe(permissions)
    record_event(
        s,
        actor=actor,
        action="user.permissions_update",
        entity_type="User",
        entity_id=str(user.id),
        metadata={"before": before, "after": user.permissions},
    )
    return user


def seed_admin(s: "Session", username: str, password: str) -> User | None:
    """
    Bootstrap a system_admin when there are no accounts yet.
    Idempotent: returns None (and changes nothing) once any user exists.
    """
    if s.query(User.id).first() is not None:
        return None
    return create_user(
        s,
        {
            "username": username,
            "password": password,
            "role": Role.SYSTEM_ADMIN.value,
            "permissions": list(SEED_ADMIN_PERMISSIONS),
        },
        actor=None,
    )
