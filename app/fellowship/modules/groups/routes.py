from __future__ import annotations

from flask import Blueprint, jsonify

from app.fellowship.db import db_session
from app.fellowship.errors import ForbiddenError, NotFoundError, ValidationError, first_error
from app.fellowship.models import User
from app.fellowship.modules.groups.service import (
    add_group_member,
    create_group,
    find_group_member,
    get_group,
    get_group_members,
    get_groups,
    update_group_member_status,
    validate_group_payload,
    validate_join_payload,
    validate_status_payload,
)
from app.fellowship.modules.members.models import Member
from app.fellowship.modules.members.service import get_member, get_member_by_user_id
from app.fellowship.rbac import current_user, require_access
from app.fellowship.validation import json_payload

bp = Blueprint("groups", __name__)


def _resolve_joining_member(s, u: User, requested_id: int | None) -> Member:
    """
    Members join as themselves and need a profile first. Staff may also
    enroll someone else's profile by passing its id.
    """
    own = get_member_by_user_id(s, u.id)
    if u.is_staff and requested_id is not None and (own is None or requested_id != own.id):
        member = get_member(s, requested_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member
    if own is None:
        raise ValidationError("Create a member profile before joining a group.", field="memberId")
    if requested_id is not None and requested_id != own.id:
        raise ForbiddenError("You can only request to join a group for your own profile.")
    return own


# ---------- Groups ----------
@bp.get("/groups")
@require_access("groups.list")
def groups_list():
    s = db_session()
    return jsonify([grp.to_dict() for grp in get_groups(s)])


@bp.post("/groups")
@require_access("groups.create")
def groups_create():
    s = db_session()
    payload = json_payload()
    first_error(validate_group_payload(payload))

    group = create_group(s, payload)
    s.commit()
    return jsonify(group.to_dict()), 201


# ---------- Membership ----------
@bp.post("/groups/<int:group_id>/members")
@require_access("groups.join")
def groups_join(group_id: int):
    s = db_session()
    u = current_user()
    payload = json_payload()
    first_error(validate_join_payload(payload))

    if get_group(s, group_id) is None:
        raise NotFoundError("Group not found")

    member = _resolve_joining_member(s, u, payload.get("memberId"))
    if find_group_member(s, group_id, member.id) is not None:
        raise ValidationError("This member has already requested to join the group.", field="memberId")

    gm = add_group_member(s, group_id, member.id)
    s.commit()
    return jsonify(gm.to_dict()), 201


@bp.get("/groups/<int:group_id>/members")
@require_access("groups.roster")
def groups_roster(group_id: int):
    s = db_session()
    if get_group(s, group_id) is None:
        raise NotFoundError("Group not found")
    return jsonify([gm.to_dict(with_member=True) for gm in get_group_members(s, group_id)])


@bp.patch("/group-members/<int:group_member_id>/status")
@require_access("group_members.update_status")
def group_members_update_status(group_member_id: int):
    s = db_session()
    payload = json_payload()
    first_error(validate_status_payload(payload))

    gm = update_group_member_status(s, group_member_id, payload["status"], current_user())
    if gm is None:
        raise NotFoundError()
    s.commit()
    return jsonify(gm.to_dict())
