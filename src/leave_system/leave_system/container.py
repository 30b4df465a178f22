from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .approvals.router import ApprovalRouter
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .entitlements.service import EntitlementTracker
from .leaves.duration.calculator import DurationCalculator
from .leaves.mysql_leave_repository import MySQLLeaveRequestRepository
from .leaves.repository import LeaveRequestRepository
from .leaves.service import LeaveService
from .vehicles.mysql_vehicle_repository import MySQLVehicleRepository
from .vehicles.repository import VehicleRepository
from .vehicles.service import VehicleBookingService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    leaves_repo: LeaveRequestRepository
    vehicles_repo: VehicleRepository

    employee_service: EmployeeService
    vehicle_service: VehicleBookingService
    leave_service: LeaveService

    timezone: str = DEFAULT_TIMEZONE


def wire_services(
    *,
    employees_repo: EmployeeRepository,
    leaves_repo: LeaveRequestRepository,
    vehicles_repo: VehicleRepository,
    conn: Optional[DatabaseConnection] = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> Container:
    """Build the service graph over any repository implementations (MySQL or in-memory)."""
    calculator = DurationCalculator()
    employee_service = EmployeeService(employees_repo)
    vehicle_service = VehicleBookingService(vehicles_repo)
    leave_service = LeaveService(
        leaves_repo,
        employee_service,
        vehicle_service,
        calculator=calculator,
        entitlements=EntitlementTracker(leaves_repo, calculator=calculator),
        router=ApprovalRouter(),
        timezone=timezone,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        leaves_repo=leaves_repo,
        vehicles_repo=vehicles_repo,
        employee_service=employee_service,
        vehicle_service=vehicle_service,
        leave_service=leave_service,
        timezone=timezone,
    )


def build_container(*, db_config: dict, timezone: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_services(
        employees_repo=MySQLEmployeeRepository(conn),
        leaves_repo=MySQLLeaveRequestRepository(conn),
        vehicles_repo=MySQLVehicleRepository(conn),
        conn=conn,
        timezone=timezone,
    )
