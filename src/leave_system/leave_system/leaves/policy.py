"""Category-specific acceptance rules applied after chargeable hours are known."""

from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import is_weekend
from ..core.constants import (
    MEAL_ALLOWANCE_FROM,
    OVERTIME_MIN_HOURS,
    OVERTIME_REQUIRED_START,
    WEEKDAY_OVERTIME_MAX_HOURS,
)
from ..core.enums import LeaveType
from ..core.exceptions import InvalidDuration


def is_valid_personal_leave_hours(hours: float) -> bool:
    """事假時數須為 2 小時的倍數 (2, 4, 6, 8, ...)."""
    return hours > 0 and round(hours, 2) % 2 == 0


def has_meal_allowance(end: datetime, *, is_overtime: bool) -> bool:
    return is_overtime and end.time() >= MEAL_ALLOWANCE_FROM


def validate_overtime(start: datetime, hours: float) -> None:
    if hours <= 0:
        raise InvalidDuration("有效加班時數為 0，請檢查時段是否符合規則")
    if start.time() != OVERTIME_REQUIRED_START:
        raise InvalidDuration("加班起始時間必須為 18:00")
    if hours < OVERTIME_MIN_HOURS:
        raise InvalidDuration("加班時間至少需到 19:00 (1小時)")
    if not is_weekend(start.date()) and hours > WEEKDAY_OVERTIME_MAX_HOURS:
        raise InvalidDuration("平日加班時數上限為 4 小時")


def validate_duration(leave_type: LeaveType, start: datetime, hours: float) -> None:
    if leave_type is LeaveType.OVERTIME:
        validate_overtime(start, hours)
        return

    if hours <= 0:
        raise InvalidDuration("時數為 0 或結束時間早於開始時間")
    if leave_type is LeaveType.OTHER and not is_valid_personal_leave_hours(hours):
        raise InvalidDuration("事假時數必須為 2 小時的倍數 (如 2hr, 4hr...)")
