from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, Grade, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, full_name, department, job_title, role, grade, hire_date,
    annual_leave_quota, sick_leave_quota, personal_leave_quota,
    current_status, location_detail, expected_return
"""


def _to_employee(row: dict) -> Employee:
    job_title = row.get("job_title") or ""
    grade = Grade(row["grade"]) if row.get("grade") else Grade.from_job_title(job_title)
    return Employee(
        employee_id=str(row["employee_id"]),
        full_name=row["full_name"],
        department=row["department"],
        job_title=job_title,
        role=Role(row["role"]),
        grade=grade,
        hire_date=row.get("hire_date"),
        annual_leave_quota=int(row.get("annual_leave_quota") or 0),
        sick_leave_quota=row.get("sick_leave_quota"),
        personal_leave_quota=row.get("personal_leave_quota"),
        current_status=EmployeeStatus(row.get("current_status") or EmployeeStatus.IN_OFFICE.value),
        location_detail=row.get("location_detail"),
        expected_return=row.get("expected_return"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY department, full_name")
            return [_to_employee(r) for r in fetchall(cur)]

    def update_presence(
        self,
        employee_id: str,
        *,
        status: EmployeeStatus,
        location_detail: Optional[str],
        expected_return: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET current_status=%s, location_detail=%s, expected_return=%s
                WHERE employee_id=%s
                """,
                (status.value, location_detail, expected_return, employee_id),
            )
            return cur.rowcount > 0

    def update_quotas(
        self,
        employee_id: str,
        *,
        annual_leave_quota: int,
        sick_leave_quota: int,
        personal_leave_quota: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET annual_leave_quota=%s, sick_leave_quota=%s, personal_leave_quota=%s
                WHERE employee_id=%s
                """,
                (int(annual_leave_quota), int(sick_leave_quota), int(personal_leave_quota), employee_id),
            )
            return cur.rowcount > 0
