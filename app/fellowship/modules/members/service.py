from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.fellowship.constants import MEMBER_CATEGORY_VALUES
from app.fellowship.validation import ErrorList, check_choice, check_int, check_str, clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.fellowship.modules.members.models import Member

logger = logging.getLogger(__name__)


def validate_member_payload(payload: dict) -> ErrorList:
    """Validate member creation payload. Returns list of (field, message)."""
    errors: ErrorList = []
    check_str(errors, payload, "fullName", "Full name", max_length=255)
    check_choice(errors, payload, "category", "Category", MEMBER_CATEGORY_VALUES)
    check_int(errors, payload, "userId", "User id", required=False)
    check_str(errors, payload, "email", "Email", required=False, max_length=320)
    check_str(errors, payload, "phone", "Phone", required=False, max_length=64)
    check_str(errors, payload, "address", "Address", required=False)
    return errors


def create_member(s: "Session", payload: dict) -> "Member":
    from app.fellowship.modules.members.models import Member

    member = Member(
        user_id=payload.get("userId"),
        full_name=clean_str(payload.get("fullName")),
        category=payload.get("category"),
        email=clean_str(payload.get("email")),
        phone=clean_str(payload.get("phone")),
        address=clean_str(payload.get("address")),
    )
    s.add(member)
    s.flush()
    return member


def get_member(s: "Session", member_id: int) -> "Member | None":
    from app.fellowship.modules.members.models import Member

    return s.get(Member, member_id)


def get_member_by_user_id(s: "Session", user_id: int) -> "Member | None":
    from app.fellowship.modules.members.models import Member

    return s.query(Member).filter(Member.user_id == user_id).one_or_none()


def get_members(s: "Session", search: str | None = None) -> list["Member"]:
    """
    All member profiles, oldest first.

    `search` is accepted for API compatibility; callers filter the full list
    themselves.
    """
    from app.fellowship.modules.members.models import Member

    if search:
        logger.debug("get_members: search=%r ignored, returning full list", search)
    return s.query(Member).order_by(Member.id.asc()).all()
