from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from functools import wraps
from typing import Optional, TypeVar

from flask import jsonify, session

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import (
    DomainError,
    InvalidTransition,
    NotFound,
    OverlapConflict,
    PermissionDenied,
    QuotaExceeded,
    ValidationError,
    VehicleUnavailable,
)
from .datetime_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_CONFLICTS = (OverlapConflict, VehicleUnavailable, QuotaExceeded, InvalidTransition)


def status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, _CONFLICTS):
        return 409
    if isinstance(exc, PermissionDenied):
        return 403
    return 400


def error_response(exc: DomainError):
    code = status_for(exc)
    logger.warning("request refused (%s): %s", code, exc)
    body = {"success": False, "message": str(exc)}
    if isinstance(exc, OverlapConflict) and exc.conflict_id is not None:
        body["conflict_id"] = exc.conflict_id
    return jsonify(body), code


def login_required(view):
    """Session is filled by the upstream sign-in layer; only `employee_id` is read here."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "請先登入"}), 401
        return view(*args, **kwargs)

    return wrapper


def parse_datetime_field(data: dict, key: str, label: str, timezone_str: str = DEFAULT_TIMEZONE) -> datetime:
    raw = (data.get(key) or "").strip()
    if not raw:
        raise ValidationError(f"請填寫{label} (必填)")
    try:
        return parse_iso_datetime(raw, timezone_str)
    except ValueError as e:
        raise ValidationError(f"{label}格式錯誤") from e


def parse_optional_datetime(
    data: dict, key: str, label: str, timezone_str: str = DEFAULT_TIMEZONE
) -> Optional[datetime]:
    if not (data.get(key) or "").strip():
        return None
    return parse_datetime_field(data, key, label, timezone_str)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="minutes") if value else None


def parse_enum(enum_cls: type[E], value, label: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationError(f"{label}不正確: {value}") from e
