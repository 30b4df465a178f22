from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.leave_system.leave_system.core.enums import ApprovalLevel, Grade, LeaveType, RequestStatus, Role
from src.leave_system.leave_system.core.exceptions import QuotaExceeded
from src.leave_system.leave_system.employees.model import Employee
from src.leave_system.leave_system.entitlements.service import (
    EntitlementTracker,
    get_annual_entitlement_days,
    get_cycle_range,
)
from src.leave_system.leave_system.leaves.model import LeaveRequest

TODAY = date(2026, 10, 19)


def hired_years_ago(years: float) -> date:
    return TODAY - timedelta(days=int(years * 365.25) + 1)


def _req(employee_id, leave_type, start, end, status=RequestStatus.APPROVED) -> LeaveRequest:
    return LeaveRequest(
        request_id=0,
        employee_id=employee_id,
        leave_type=leave_type,
        start_time=start,
        end_time=end,
        reason="r",
        status=status,
        approval_level=ApprovalLevel.DEPT_MANAGER,
    )


def _employee(**kwargs) -> Employee:
    return Employee(
        employee_id="e1",
        full_name="林專員",
        department="業務部",
        job_title="專員",
        role=Role.EMPLOYEE,
        grade=Grade.IC,
        **kwargs,
    )


@pytest.mark.parametrize(
    "years, expected",
    [
        (0.4, 0),
        (0.5, 3),
        (1, 7),
        (2, 10),
        (3, 14),
        (5, 15),
        (9.9, 15),
        (10.5, 15),
        (12.9, 17),
        (40, 30),
    ],
)
def test_annual_entitlement_table(years, expected):
    assert get_annual_entitlement_days(hired_years_ago(years), TODAY) == expected


def test_cycle_starts_at_latest_anniversary():
    cycle = get_cycle_range(date(2023, 9, 1), TODAY)
    assert cycle.start == datetime(2026, 9, 1)
    assert cycle.end == datetime(2027, 9, 1)


def test_cycle_before_this_years_anniversary_uses_last_year():
    cycle = get_cycle_range(date(2023, 9, 1), date(2026, 8, 31))
    assert cycle.start == datetime(2025, 9, 1)
    assert cycle.end == datetime(2026, 9, 1)


def test_leap_day_hire_falls_back_to_feb_28():
    cycle = get_cycle_range(date(2020, 2, 29), date(2027, 3, 1))
    assert cycle.start == datetime(2027, 2, 28)


def test_cycle_without_hire_date_is_calendar_year():
    cycle = get_cycle_range(None, TODAY)
    assert cycle.start == datetime(2026, 1, 1)
    assert cycle.end == datetime(2026, 12, 31, 23, 59, 59)
    assert str(cycle) == "2026/01/01 ~ 2026/12/31"


def test_used_hours_count_pending_approved_and_completed_in_cycle(world):
    repo = world.leaves_repo
    day = datetime(2026, 10, 26)
    full = (day.replace(hour=8), day.replace(hour=17, minute=30))
    for i, status in enumerate(RequestStatus):
        start = full[0] + timedelta(days=7 * i)
        repo.add(_req("e1", LeaveType.ANNUAL, start, start.replace(hour=17, minute=30), status))
    # outside the cycle, another type, another employee
    repo.add(_req("e1", LeaveType.ANNUAL, datetime(2026, 8, 3, 8), datetime(2026, 8, 3, 17, 30)))
    repo.add(_req("e1", LeaveType.SICK, *full))
    repo.add(_req("e2", LeaveType.ANNUAL, *full))

    tracker = EntitlementTracker(repo)
    # pending_dept, pending_gm, approved, completed
    assert tracker.get_used_hours("e1", LeaveType.ANNUAL, date(2023, 9, 1), today=TODAY) == 32.0
    assert tracker.get_used_hours("e1", LeaveType.SICK, date(2023, 9, 1), today=TODAY) == 8.0


def test_remaining_annual_quota(world):
    repo = world.leaves_repo
    repo.add(_req("e1", LeaveType.ANNUAL, datetime(2026, 10, 26, 8), datetime(2026, 10, 27, 12, 15)))

    quota = EntitlementTracker(repo).get_remaining(_employee(hire_date=date(2023, 9, 1)), LeaveType.ANNUAL, today=TODAY)
    assert quota.total == 14
    assert quota.used == 1.5
    assert quota.remaining == 12.5
    assert quota.label == "特休"


def test_annual_total_without_hire_date_uses_admin_quota(world):
    tracker = EntitlementTracker(world.leaves_repo)
    quota = tracker.get_remaining(_employee(annual_leave_quota=5), LeaveType.ANNUAL, today=TODAY)
    assert quota.total == 5


def test_sick_and_personal_defaults(world):
    tracker = EntitlementTracker(world.leaves_repo)
    emp = _employee(hire_date=date(2023, 9, 1))
    assert tracker.get_remaining(emp, LeaveType.SICK, today=TODAY).total == 30
    assert tracker.get_remaining(emp, LeaveType.OTHER, today=TODAY).total == 14
    assert tracker.get_remaining(_employee(sick_leave_quota=3), LeaveType.SICK, today=TODAY).total == 3


def test_business_and_overtime_have_no_quota(world):
    tracker = EntitlementTracker(world.leaves_repo)
    emp = _employee(hire_date=date(2023, 9, 1))
    assert tracker.get_remaining(emp, LeaveType.BUSINESS, today=TODAY) is None
    assert tracker.get_remaining(emp, LeaveType.OVERTIME, today=TODAY) is None
    tracker.ensure_within_quota(emp, LeaveType.BUSINESS, 400, today=TODAY)


def test_quota_exceeded_message(world):
    tracker = EntitlementTracker(world.leaves_repo)
    emp = _employee(hire_date=date(2023, 9, 1))
    tracker.ensure_within_quota(emp, LeaveType.ANNUAL, 14 * 8, today=TODAY)

    with pytest.raises(QuotaExceeded) as exc:
        tracker.ensure_within_quota(emp, LeaveType.ANNUAL, 14 * 8 + 2, today=TODAY)
    assert str(exc.value) == "特休不足！剩餘可用: 14.00 天，本次申請: 14.25 天"
    assert exc.value.remaining == 14
