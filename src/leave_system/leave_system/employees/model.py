from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_PERSONAL_LEAVE_DAYS, DEFAULT_SICK_LEAVE_DAYS
from ..core.enums import EmployeeStatus, Grade, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee (fields the leave engine needs).

    Note: pure data object, no DB access code here.
    """

    employee_id: str
    full_name: str
    department: str
    job_title: str
    role: Role
    grade: Grade
    hire_date: Optional[date] = None
    annual_leave_quota: int = 0
    sick_leave_quota: Optional[int] = None
    personal_leave_quota: Optional[int] = None
    current_status: EmployeeStatus = EmployeeStatus.IN_OFFICE
    location_detail: Optional[str] = None
    expected_return: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_general_manager(self) -> bool:
        return self.grade == Grade.GENERAL_MANAGER or self.is_admin

    @property
    def is_manager(self) -> bool:
        return self.grade == Grade.MANAGER and not self.is_general_manager

    @property
    def is_chief(self) -> bool:
        return self.grade == Grade.CHIEF and not self.is_general_manager

    @property
    def is_supervisor(self) -> bool:
        """課長/經理/總經理: salaried, not eligible for overtime."""
        return self.grade != Grade.IC

    @property
    def sick_quota_days(self) -> int:
        return DEFAULT_SICK_LEAVE_DAYS if self.sick_leave_quota is None else self.sick_leave_quota

    @property
    def personal_quota_days(self) -> int:
        return DEFAULT_PERSONAL_LEAVE_DAYS if self.personal_leave_quota is None else self.personal_leave_quota
