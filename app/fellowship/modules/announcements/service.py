from __future__ import annotations

from typing import TYPE_CHECKING

from app.fellowship.modules.announcements.models import Announcement, Comment
from app.fellowship.validation import ErrorList, check_int, check_str, clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.fellowship.models import User


def validate_announcement_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_str(errors, payload, "title", "Title")
    check_str(errors, payload, "content", "Content")
    return errors


def validate_comment_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_int(errors, payload, "announcementId", "Announcement id")
    check_int(errors, payload, "parentId", "Parent comment id", required=False)
    check_str(errors, payload, "content", "Content")
    return errors


def create_announcement(s: "Session", payload: dict, author: "User") -> Announcement:
    """Author always comes from the caller, never from the payload."""
    announcement = Announcement(
        title=clean_str(payload.get("title")),
        content=clean_str(payload.get("content")),
        author_id=author.id,
    )
    s.add(announcement)
    s.flush()
    return announcement


def get_announcement(s: "Session", announcement_id: int) -> Announcement | None:
    return s.get(Announcement, announcement_id)


def get_announcements(s: "Session") -> list[Announcement]:
    """Newest first; equal timestamps fall back to insertion order."""
    return (
        s.query(Announcement)
        .order_by(Announcement.created_at.desc(), Announcement.id.asc())
        .all()
    )


def create_comment(s: "Session", payload: dict, author: "User") -> Comment:
    comment = Comment(
        announcement_id=payload["announcementId"],
        parent_id=payload.get("parentId"),
        author_id=author.id,
        content=clean_str(payload.get("content")),
    )
    s.add(comment)
    s.flush()
    return comment


def get_comments(s: "Session", announcement_id: int) -> list[Comment]:
    return (
        s.query(Comment)
        .filter(Comment.announcement_id == announcement_id)
        .order_by(Comment.created_at.desc(), Comment.id.asc())
        .all()
    )
