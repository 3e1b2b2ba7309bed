from __future__ import annotations

from flask import Blueprint, jsonify

from app.fellowship.db import db_session
from app.fellowship.errors import ForbiddenError, NotFoundError, ValidationError, first_error
from app.fellowship.modules.users.service import (
    create_user,
    get_user_by_username,
    get_users,
    update_user_permissions,
    validate_permissions_payload,
    validate_user_payload,
)
from app.fellowship.constants import Role
from app.fellowship.rbac import can_assign_role, current_user, require_access
from app.fellowship.validation import clean_str, json_payload

bp = Blueprint("users", __name__)


# ---------- List ----------
@bp.get("/users")
@require_access("users.list")
def users_list():
    s = db_session()
    return jsonify([u.to_dict() for u in get_users(s)])


# ---------- Create ----------
@bp.post("/users")
@require_access("users.create")
def users_create():
    s = db_session()
    u = current_user()
    payload = json_payload()

    # Role assignment is checked before the body is validated.
    role = payload.get("role") or Role.MEMBER.value
    if isinstance(role, str) and not can_assign_role(u, role):
        raise ForbiddenError("Only a system admin can create system admin accounts.")

    first_error(validate_user_payload(payload))

    if get_user_by_username(s, clean_str(payload.get("username"))) is not None:
        raise ValidationError("Username already exists.", field="username")

    user = create_user(s, payload, u)
    s.commit()
    return jsonify(user.to_dict()), 201


# ---------- Permissions ----------
@bp.patch("/users/<int:user_id>/permissions")
@require_access("users.update_permissions")
def users_update_permissions(user_id: int):
    s = db_session()
    payload = json_payload()

    first_error(validate_permissions_payload(payload))

    user = update_user_permissions(s, user_id, payload["permissions"], current_user())
    if user is None:
        raise NotFoundError()
    s.commit()
    return jsonify(user.to_dict())
