from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..core.enums import EmployeeStatus, LeaveType, RequestStatus
from ..core.exceptions import NotFound, PermissionDenied, ValidationError
from ..leaves.model import LeaveRequest
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Use case: employee lookup, live presence status and quota administration."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def find(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get_by_id(employee_id)

    def get(self, employee_id: str) -> Employee:
        emp = self._employees.get_by_id(employee_id)
        if not emp:
            raise NotFound("員工不存在")
        return emp

    def list_all(self) -> list[Employee]:
        return list(self._employees.list_all())

    def update_presence(
        self,
        *,
        actor: Employee,
        employee_id: str,
        status: EmployeeStatus,
        location_detail: Optional[str] = None,
        expected_return: Optional[datetime] = None,
    ) -> None:
        if actor.employee_id != employee_id and not actor.is_admin:
            raise PermissionDenied("只能更新自己的動態")
        self.get(employee_id)

        ok = self._employees.update_presence(
            employee_id,
            status=status,
            location_detail=(location_detail or "").strip() or None,
            expected_return=expected_return,
        )
        if not ok:
            raise ValidationError("更新動態失敗")

    def update_quotas(
        self,
        *,
        actor: Employee,
        employee_id: str,
        annual_leave_quota: int,
        sick_leave_quota: int,
        personal_leave_quota: int,
    ) -> None:
        if not actor.is_admin:
            raise PermissionDenied("您沒有權限")
        quotas = (int(annual_leave_quota), int(sick_leave_quota), int(personal_leave_quota))
        if any(q < 0 for q in quotas):
            raise ValidationError("假別額度不可為負數")
        self.get(employee_id)

        if not self._employees.update_quotas(
            employee_id,
            annual_leave_quota=quotas[0],
            sick_leave_quota=quotas[1],
            personal_leave_quota=quotas[2],
        ):
            raise ValidationError("更新額度失敗")
        logger.info("quotas of %s set to %s by %s", employee_id, quotas, actor.employee_id)

    def mark_away_for(self, request: LeaveRequest, *, now: datetime) -> bool:
        """Approved request in progress -> employee shows as out/on leave until its end."""
        if request.status != RequestStatus.APPROVED:
            return False
        if not (request.start_time <= now < request.end_time):
            return False

        status = EmployeeStatus.OUT if request.leave_type is LeaveType.BUSINESS else EmployeeStatus.LEAVE
        return self._employees.update_presence(
            request.employee_id,
            status=status,
            location_detail=request.reason,
            expected_return=request.end_time,
        )

    def reset_returned(self, *, now: datetime) -> int:
        """Employees whose expected return has passed go back to in_office."""
        count = 0
        for emp in self._employees.list_all():
            if emp.current_status not in (EmployeeStatus.LEAVE, EmployeeStatus.OUT):
                continue
            if emp.expected_return is None or emp.expected_return > now:
                continue
            if self._employees.update_presence(
                emp.employee_id,
                status=EmployeeStatus.IN_OFFICE,
                location_detail=None,
                expected_return=None,
            ):
                count += 1
        return count
