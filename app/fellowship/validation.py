"""
Request-body helpers shared by the module validators.

Validators collect `(field, message)` pairs; routes surface the first one
through `errors.first_error`.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from flask import request

from app.fellowship.errors import ValidationError

ErrorList = list[tuple[str | None, str]]


def json_payload() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def clean_str(value: Any) -> str | None:
    """Strip strings; blank becomes None. Non-strings pass through untouched."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_str(errors: ErrorList, payload: dict, key: str, label: str, *, required: bool = True, max_length: int | None = None) -> None:
    value = payload.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            errors.append((key, f"{label} is required."))
        return
    if not isinstance(value, str):
        errors.append((key, f"{label} must be a string."))
        return
    if max_length is not None and len(value.strip()) > max_length:
        errors.append((key, f"{label} must be at most {max_length} characters."))


def check_int(errors: ErrorList, payload: dict, key: str, label: str, *, required: bool = True) -> None:
    value = payload.get(key)
    if value is None:
        if required:
            errors.append((key, f"{label} is required."))
        return
    if not is_int(value):
        errors.append((key, f"{label} must be an integer."))


def check_choice(errors: ErrorList, payload: dict, key: str, label: str, choices: Iterable[str], *, required: bool = True) -> None:
    value = payload.get(key)
    if value is None or value == "":
        if required:
            errors.append((key, f"{label} is required."))
        return
    allowed = sorted(choices)
    if value not in allowed:
        errors.append((key, f"Invalid {label.lower()}. Must be one of: {', '.join(allowed)}"))


def check_str_list(errors: ErrorList, payload: dict, key: str, label: str, choices: Iterable[str], *, required: bool = True) -> None:
    value = payload.get(key)
    if value is None:
        if required:
            errors.append((key, f"{label} is required."))
        return
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        errors.append((key, f"{label} must be a list of strings."))
        return
    allowed = set(choices)
    unknown = [v for v in value if v not in allowed]
    if unknown:
        errors.append((key, f"Unknown {label.lower()}: {', '.join(unknown)}"))


def dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out
