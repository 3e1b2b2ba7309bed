from __future__ import annotations

from flask import Blueprint, jsonify, request

from app.fellowship.db import db_session
from app.fellowship.errors import ForbiddenError, NotFoundError, ValidationError, first_error
from app.fellowship.modules.members.service import (
    create_member,
    get_member,
    get_member_by_user_id,
    get_members,
    validate_member_payload,
)
from app.fellowship.modules.users.service import get_user
from app.fellowship.rbac import current_user, require_access
from app.fellowship.validation import json_payload

bp = Blueprint("members", __name__)


@bp.get("/members")
@require_access("members.list")
def members_list():
    s = db_session()
    search = (request.args.get("search") or "").strip() or None
    return jsonify([m.to_dict() for m in get_members(s, search)])


@bp.post("/members")
@require_access("members.create")
def members_create():
    s = db_session()
    u = current_user()
    payload = json_payload()

    first_error(validate_member_payload(payload))

    user_id = payload.get("userId")
    if user_id is not None:
        # Members may only link a profile to their own account.
        if not u.is_staff and user_id != u.id:
            raise ForbiddenError()
        if get_user(s, user_id) is None:
            raise ValidationError("Linked user does not exist.", field="userId")
        if get_member_by_user_id(s, user_id) is not None:
            raise ValidationError("This user already has a member profile.", field="userId")

    member = create_member(s, payload)
    s.commit()
    return jsonify(member.to_dict()), 201


@bp.get("/members/<int:member_id>")
@require_access("members.get")
def members_get(member_id: int):
    s = db_session()
    member = get_member(s, member_id)
    if not member:
        raise NotFoundError()
    return jsonify(member.to_dict())
