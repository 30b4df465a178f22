from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.leave_system.leave_system.container import wire_services
from src.leave_system.leave_system.core.enums import Grade, Role
from src.leave_system.leave_system.employees.model import Employee
from src.leave_system.leave_system.leaves.model import LeaveRequest
from src.leave_system.leave_system.vehicles.model import Vehicle, VehicleBooking

# Monday
NOW = datetime(2026, 10, 19, 9, 0)


class InMemoryEmployeeRepo:
    def __init__(self, employees):
        self._rows = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self._rows.get(employee_id)

    def list_all(self):
        return list(self._rows.values())

    def update_presence(self, employee_id, *, status, location_detail, expected_return):
        emp = self._rows.get(employee_id)
        if not emp:
            return False
        self._rows[employee_id] = replace(
            emp, current_status=status, location_detail=location_detail, expected_return=expected_return
        )
        return True

    def remove(self, employee_id):
        self._rows.pop(employee_id, None)

    def update_quotas(self, employee_id, *, annual_leave_quota, sick_leave_quota, personal_leave_quota):
        emp = self._rows.get(employee_id)
        if not emp:
            return False
        self._rows[employee_id] = replace(
            emp,
            annual_leave_quota=annual_leave_quota,
            sick_leave_quota=sick_leave_quota,
            personal_leave_quota=personal_leave_quota,
        )
        return True


class InMemoryLeaveRepo:
    """Bookings of company-car trips are written through the linked vehicle fake."""

    def __init__(self, vehicles=None):
        self._vehicles = vehicles
        self._next_id = 1
        self.rows: dict[int, LeaveRequest] = {}

    def add(self, request: LeaveRequest) -> LeaveRequest:
        """Seed a request directly (bypassing submission rules)."""
        request = replace(request, request_id=self._next_id)
        self.rows[self._next_id] = request
        self._next_id += 1
        return request

    def create(self, new):
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = LeaveRequest(
            request_id=rid,
            employee_id=new.employee_id,
            leave_type=new.leave_type,
            start_time=new.start_time,
            end_time=new.end_time,
            reason=new.reason,
            status=new.status,
            approval_level=new.approval_level,
            overtime_hours=new.overtime_hours,
            meal_allowance=new.meal_allowance,
            transport_mode=new.transport_mode,
            logs=(new.first_log,),
            created_at=new.first_log.timestamp,
        )
        if new.booking:
            self._vehicles.add_booking(
                vehicle_id=new.booking.vehicle_id,
                employee_id=new.employee_id,
                start_time=new.start_time,
                end_time=new.end_time,
                purpose=new.booking.purpose,
                status=new.status,
                leave_request_id=rid,
            )
        return rid

    def get(self, request_id):
        return self.rows.get(int(request_id))

    def list_for_employee(self, employee_id, *, limit=None):
        items = sorted(
            (r for r in self.rows.values() if r.employee_id == employee_id),
            key=lambda r: r.start_time,
            reverse=True,
        )
        return items if limit is None else items[:limit]

    def list_by_status(self, statuses, *, limit=None):
        items = [r for r in self.rows.values() if r.status in statuses]
        return items if limit is None else items[:limit]

    def list_starting_between(self, start, end):
        return [r for r in self.rows.values() if start <= r.start_time < end]

    def update_status(self, request_id, *, expected, status, log):
        req = self.rows.get(int(request_id))
        if not req or req.status != expected:
            return False
        self.rows[req.request_id] = replace(req, status=status, logs=req.logs + (log,))
        if self._vehicles:
            self._vehicles.sync_status(req.request_id, status)
        return True

    def update_times(self, request_id, *, start_time, end_time, overtime_hours, meal_allowance, log):
        req = self.rows.get(int(request_id))
        if not req or req.status.is_terminal:
            return False
        self.rows[req.request_id] = replace(
            req,
            start_time=start_time,
            end_time=end_time,
            overtime_hours=overtime_hours,
            meal_allowance=meal_allowance,
            logs=req.logs + (log,),
        )
        if self._vehicles:
            self._vehicles.sync_times(req.request_id, start_time=start_time, end_time=end_time)
        return True


class InMemoryVehicleRepo:
    def __init__(self, vehicles, *, names=None):
        self._vehicles = {v.vehicle_id: v for v in vehicles}
        self._names = names or {}
        self._next_id = 1
        self.bookings: dict[int, VehicleBooking] = {}

    def get_vehicle(self, vehicle_id):
        return self._vehicles.get(int(vehicle_id))

    def list_bookings_for_vehicle(self, vehicle_id):
        return [b for b in self.bookings.values() if b.vehicle_id == int(vehicle_id)]

    def add_booking(self, *, vehicle_id, employee_id, start_time, end_time, purpose, status, leave_request_id):
        bid = self._next_id
        self._next_id += 1
        self.bookings[bid] = VehicleBooking(
            booking_id=bid,
            vehicle_id=int(vehicle_id),
            employee_id=employee_id,
            start_time=start_time,
            end_time=end_time,
            purpose=purpose,
            status=status,
            leave_request_id=leave_request_id,
            booker_name=self._names.get(employee_id),
        )
        return bid

    def get_by_leave_request(self, leave_request_id):
        for b in self.bookings.values():
            if b.leave_request_id == int(leave_request_id):
                return b
        return None

    def sync_status(self, leave_request_id, status):
        count = 0
        for bid, b in list(self.bookings.items()):
            if b.leave_request_id == int(leave_request_id):
                self.bookings[bid] = replace(b, status=status)
                count += 1
        return count

    def sync_times(self, leave_request_id, *, start_time, end_time):
        count = 0
        for bid, b in list(self.bookings.items()):
            if b.leave_request_id == int(leave_request_id):
                self.bookings[bid] = replace(b, start_time=start_time, end_time=end_time)
                count += 1
        return count


def make_employee(employee_id, *, grade=Grade.IC, department="業務部", role=Role.EMPLOYEE, **kwargs) -> Employee:
    return Employee(
        employee_id=employee_id,
        full_name=kwargs.pop("full_name", employee_id),
        department=department,
        job_title=kwargs.pop("job_title", ""),
        role=role,
        grade=grade,
        **kwargs,
    )


@pytest.fixture
def people() -> dict[str, Employee]:
    return {
        "gm": make_employee("gm", grade=Grade.GENERAL_MANAGER, department="管理部", full_name="王總"),
        "manager": make_employee("manager", grade=Grade.MANAGER, full_name="李經理"),
        "chief": make_employee("chief", grade=Grade.CHIEF, full_name="陳課長"),
        # hired 2023-09-01: 3.1 years of service on NOW, 14 annual days
        "staff": make_employee("staff", full_name="林專員", hire_date=date(2023, 9, 1)),
        "staff2": make_employee("staff2", full_name="張專員", hire_date=date(2020, 1, 1)),
        "rd_manager": make_employee("rd_manager", grade=Grade.MANAGER, department="研發部", full_name="周經理"),
        "admin": make_employee("admin", role=Role.ADMIN, department="資訊部", full_name="管理員"),
    }


@pytest.fixture
def world(people):
    """Services wired over in-memory repositories."""
    employees_repo = InMemoryEmployeeRepo(people.values())
    vehicles_repo = InMemoryVehicleRepo(
        [
            Vehicle(1, "公務車 A", "ABC-1234"),
            Vehicle(2, "公務車 B", "XYZ-5678"),
            Vehicle(3, "公務車 C", "DEF-0000", is_available=False),
        ],
        names={e.employee_id: e.full_name for e in people.values()},
    )
    leaves_repo = InMemoryLeaveRepo(vehicles=vehicles_repo)
    return wire_services(employees_repo=employees_repo, leaves_repo=leaves_repo, vehicles_repo=vehicles_repo)


@pytest.fixture
def now() -> datetime:
    return NOW
