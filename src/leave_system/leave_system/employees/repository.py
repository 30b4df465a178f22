from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def update_presence(
        self,
        employee_id: str,
        *,
        status: EmployeeStatus,
        location_detail: Optional[str],
        expected_return: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def update_quotas(
        self,
        employee_id: str,
        *,
        annual_leave_quota: int,
        sick_leave_quota: int,
        personal_leave_quota: int,
    ) -> bool:
        raise NotImplementedError
