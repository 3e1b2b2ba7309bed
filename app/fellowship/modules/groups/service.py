from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import update

from app.fellowship.audit import record_event
from app.fellowship.constants import GROUP_MEMBER_STATUS_VALUES, GroupMemberStatus
from app.fellowship.modules.groups.models import Group, GroupMember
from app.fellowship.validation import ErrorList, check_choice, check_int, check_str, clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.fellowship.models import User


def validate_group_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_str(errors, payload, "name", "Name", max_length=255)
    check_str(errors, payload, "description", "Description")
    check_int(errors, payload, "leaderId", "Leader id", required=False)
    return errors


def validate_join_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_int(errors, payload, "memberId", "Member id", required=False)
    return errors


def validate_status_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_choice(errors, payload, "status", "Status", GROUP_MEMBER_STATUS_VALUES)
    return errors


def create_group(s: "Session", payload: dict) -> Group:
    group = Group(
        name=clean_str(payload.get("name")),
        description=clean_str(payload.get("description")),
        leader_id=payload.get("leaderId"),
        member_count=0,
    )
    s.add(group)
    s.flush()
    return group


def get_group(s: "Session", group_id: int) -> Group | None:
    return s.get(Group, group_id)


def get_groups(s: "Session") -> list[Group]:
    return s.query(Group).order_by(Group.id.asc()).all()


def find_group_member(s: "Session", group_id: int, member_id: int) -> GroupMember | None:
    return (
        s.query(GroupMember)
        .filter(GroupMember.group_id == group_id, GroupMember.member_id == member_id)
        .one_or_none()
    )


def add_group_member(s: "Session", group_id: int, member_id: int) -> GroupMember:
    """
    Record a pending join request and bump the group's member_count.

    Both writes share the caller's transaction: commit once after this
    returns, or roll back and neither is kept.
    """
    gm = GroupMember(
        group_id=group_id,
        member_id=member_id,
        status=GroupMemberStatus.PENDING.value,
    )
    s.add(gm)
    s.flush()
    s.execute(
        update(Group)
        .where(Group.id == group_id)
        .values(member_count=Group.member_count + 1)
    )
    return gm


def get_group_member(s: "Session", group_member_id: int) -> GroupMember | None:
    return s.get(GroupMember, group_member_id)


def update_group_member_status(s: "Session", group_member_id: int, status: str, actor: "User") -> GroupMember | None:
    """Overwrite the status. Returns None when the row does not exist."""
    gm = get_group_member(s, group_member_id)
    if gm is None:
        return None
    old_status = gm.status
    gm.status = status
    record_event(
        s,
        actor=actor,
        action="group_member.status_update",
        entity_type="GroupMember",
        entity_id=str(gm.id),
        metadata={"group_id": gm.group_id, "member_id": gm.member_id, "old": old_status, "new": status},
    )
    return gm


def get_group_members(s: "Session", group_id: int) -> list[GroupMember]:
    return (
        s.query(GroupMember)
        .filter(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at.asc(), GroupMember.id.asc())
        .all()
    )
