from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, Flask, current_app, g, jsonify, request, session
from werkzeug.security import check_password_hash

from app.fellowship.audit import record_event
from app.fellowship.db import db_session
from app.fellowship.errors import RateLimitedError, UnauthorizedError, first_error
from app.fellowship.models import User
from app.fellowship.validation import ErrorList, check_str, json_payload

bp = Blueprint("auth", __name__)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds


class LoginThrottle:
    """Failed-login bookkeeping per client IP. One instance per app."""

    def __init__(self, limit: int = _LOGIN_RATE_LIMIT, window_seconds: int = _LOGIN_RATE_WINDOW) -> None:
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self._attempts: dict[str, list[datetime]] = defaultdict(list)

    def is_limited(self, ip: str) -> bool:
        cutoff = datetime.utcnow() - self.window
        recent = [t for t in self._attempts.get(ip, ()) if t > cutoff]
        if not recent:
            self._attempts.pop(ip, None)
            return False
        self._attempts[ip] = recent
        return len(recent) >= self.limit

    def tracked_ips(self) -> int:
        return len(self._attempts)

    def record(self, ip: str) -> None:
        self._attempts[ip].append(datetime.utcnow())

    def clear(self, ip: str) -> None:
        self._attempts.pop(ip, None)


def init_auth(app: Flask) -> None:
    app.extensions["login_throttle"] = LoginThrottle()


def _throttle() -> LoginThrottle:
    return current_app.extensions["login_throttle"]


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if request.path.startswith(("/health", "/healthz")):
        g.current_user = None
        return

    user_id = session.get("user_id")
    if not user_id:
        g.current_user = None
        return

    try:
        s = db_session()
        user = s.get(User, int(user_id))
        if not user:
            session.pop("user_id", None)
            g.current_user = None
            return
        g.current_user = user
    except Exception as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        session.pop("user_id", None)
        g.current_user = None


def validate_login_payload(payload: dict) -> ErrorList:
    errors: ErrorList = []
    check_str(errors, payload, "username", "Username")
    check_str(errors, payload, "password", "Password")
    return errors


@bp.post("/login")
def login():
    payload = json_payload()
    first_error(validate_login_payload(payload))

    username = payload["username"].strip()
    password = payload["password"]
    ip = request.remote_addr or "unknown"
    throttle = _throttle()

    if throttle.is_limited(ip):
        raise RateLimitedError()

    s = db_session()
    user = s.query(User).filter(User.username == username).one_or_none()
    if not user or not check_password_hash(user.password_hash, password):
        throttle.record(ip)
        record_event(
            s,
            actor=None,
            action="auth.login_failed",
            entity_type="User",
            entity_id=username,
            metadata={"username": username},
        )
        s.commit()
        current_app.logger.info("Login failed (username=%s request_id=%s)", username, g.request_id)
        raise UnauthorizedError("Invalid username or password")

    session.clear()
    session["user_id"] = user.id
    session.permanent = True
    throttle.clear(ip)
    record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=str(user.id))
    s.commit()
    g.current_user = user
    return jsonify(user.to_dict())


@bp.post("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        s = db_session()
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=str(user.id))
        s.commit()
    session.clear()
    return jsonify({"ok": True})


@bp.get("/user")
def me():
    user = getattr(g, "current_user", None)
    if not user:
        raise UnauthorizedError()
    return jsonify(user.to_dict())
