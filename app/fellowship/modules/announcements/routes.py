from __future__ import annotations

from flask import Blueprint, jsonify

from app.fellowship.db import db_session
from app.fellowship.errors import first_error
from app.fellowship.modules.announcements.service import (
    create_announcement,
    create_comment,
    get_announcements,
    get_comments,
    validate_announcement_payload,
    validate_comment_payload,
)
from app.fellowship.rbac import current_user, require_access
from app.fellowship.validation import json_payload

bp = Blueprint("announcements", __name__)


# ---------- Announcements ----------
@bp.get("/announcements")
@require_access("announcements.list")
def announcements_list():
    s = db_session()
    return jsonify([a.to_dict(with_author=True) for a in get_announcements(s)])


@bp.post("/announcements")
@require_access("announcements.create")
def announcements_create():
    s = db_session()
    payload = json_payload()
    first_error(validate_announcement_payload(payload))

    announcement = create_announcement(s, payload, current_user())
    s.commit()
    return jsonify(announcement.to_dict()), 201


# ---------- Comments ----------
@bp.get("/announcements/<int:announcement_id>/comments")
@require_access("comments.list")
def comments_list(announcement_id: int):
    s = db_session()
    return jsonify([c.to_dict(with_author=True) for c in get_comments(s, announcement_id)])


@bp.post("/comments")
@require_access("comments.create")
def comments_create():
    s = db_session()
    payload = json_payload()
    first_error(validate_comment_payload(payload))

    # A missing announcement/parent surfaces as IntegrityError -> 400.
    comment = create_comment(s, payload, current_user())
    s.commit()
    return jsonify(comment.to_dict()), 201
