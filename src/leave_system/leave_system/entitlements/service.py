"""Entitlement tracking: leave cycle, annual-leave table, usage and remaining quota.

The leave cycle is derived on every query from the hire-date anniversary; it is
never stored. Usage counts approved, completed and still-pending requests so a
request in the middle of multi-step approval already reserves its days.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import add_years
from ..core.constants import (
    ANNUAL_LEAVE_TABLE,
    HOURS_PER_DAY,
    MAX_ANNUAL_LEAVE_DAYS,
    SENIOR_BASE_DAYS,
    SENIOR_YEARS,
)
from ..core.enums import LeaveType, RequestStatus
from ..core.exceptions import QuotaExceeded
from ..employees.model import Employee
from ..leaves.duration.calculator import DurationCalculator
from ..leaves.repository import LeaveRequestRepository

QUOTA_TYPES = (LeaveType.ANNUAL, LeaveType.SICK, LeaveType.OTHER)

_CONSUMING_STATUSES = (
    RequestStatus.PENDING_DEPT,
    RequestStatus.PENDING_GM,
    RequestStatus.APPROVED,
    RequestStatus.COMPLETED,
)


@dataclass(frozen=True)
class CycleRange:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def __str__(self) -> str:
        return f"{self.start:%Y/%m/%d} ~ {self.end:%Y/%m/%d}"


@dataclass(frozen=True)
class Quota:
    leave_type: LeaveType
    total: float
    used: float
    remaining: float
    cycle: CycleRange

    @property
    def label(self) -> str:
        return self.leave_type.label


def get_cycle_range(hire_date: Optional[date], today: date) -> CycleRange:
    if not hire_date:
        return CycleRange(
            start=datetime(today.year, 1, 1),
            end=datetime(today.year, 12, 31, 23, 59, 59),
        )

    cycle_start = add_years(hire_date, today.year - hire_date.year)
    if today < cycle_start:
        cycle_start = add_years(hire_date, today.year - 1 - hire_date.year)
    cycle_end = add_years(hire_date, cycle_start.year + 1 - hire_date.year)
    return CycleRange(
        start=datetime.combine(cycle_start, time.min),
        end=datetime.combine(cycle_end, time.min),
    )


def years_of_service(hire_date: date, today: date) -> float:
    return (today - hire_date).days / 365.25


def get_annual_entitlement_days(hire_date: date, today: date) -> int:
    years = years_of_service(hire_date, today)
    if years >= SENIOR_YEARS:
        days = SENIOR_BASE_DAYS + math.floor(years - SENIOR_YEARS)
        return min(days, MAX_ANNUAL_LEAVE_DAYS)

    days = 0
    for lower_bound, entitled in ANNUAL_LEAVE_TABLE:
        if years >= lower_bound:
            days = entitled
    return days


class EntitlementTracker:
    def __init__(self, leaves: LeaveRequestRepository, *, calculator: Optional[DurationCalculator] = None):
        self._leaves = leaves
        self._calculator = calculator or DurationCalculator()

    def get_used_hours(self, employee_id: str, leave_type: LeaveType, hire_date: Optional[date], *, today: date) -> float:
        cycle = get_cycle_range(hire_date, today)
        total = 0.0
        for r in self._leaves.list_for_employee(employee_id):
            if r.is_overtime or r.leave_type != leave_type:
                continue
            if r.status not in _CONSUMING_STATUSES or not cycle.contains(r.start_time):
                continue
            total += self._calculator.chargeable_hours(r.start_time, r.end_time, is_overtime=False)
        return round(total, 2)

    def total_days(self, employee: Employee, leave_type: LeaveType, *, today: date) -> float:
        if leave_type is LeaveType.ANNUAL:
            if employee.hire_date:
                return get_annual_entitlement_days(employee.hire_date, today)
            return employee.annual_leave_quota
        if leave_type is LeaveType.SICK:
            return employee.sick_quota_days
        return employee.personal_quota_days

    def get_remaining(self, employee: Employee, leave_type: LeaveType, *, today: date) -> Optional[Quota]:
        """None for leave types that carry no quota (business trips, overtime)."""
        if leave_type not in QUOTA_TYPES:
            return None

        total = self.total_days(employee, leave_type, today=today)
        used_hours = self.get_used_hours(employee.employee_id, leave_type, employee.hire_date, today=today)
        used = round(used_hours / HOURS_PER_DAY, 2)
        return Quota(
            leave_type=leave_type,
            total=total,
            used=used,
            remaining=max(0.0, round(total - used, 2)),
            cycle=get_cycle_range(employee.hire_date, today),
        )

    def ensure_within_quota(self, employee: Employee, leave_type: LeaveType, requested_hours: float, *, today: date) -> None:
        quota = self.get_remaining(employee, leave_type, today=today)
        if quota is None:
            return
        requested = requested_hours / HOURS_PER_DAY
        if requested > quota.remaining:
            raise QuotaExceeded(quota.label, remaining=quota.remaining, requested=round(requested, 2))
