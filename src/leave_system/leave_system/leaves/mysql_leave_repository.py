from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ApprovalLevel, LeaveType, LogAction, RequestStatus, TransportMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, in_placeholders
from .model import LeaveRequest, NewLeaveRequest, RequestLog
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, employee_id, leave_type, start_time, end_time, reason, status,
    approval_level, overtime_hours, meal_allowance, transport_mode, created_at
"""


def _insert_log(cur, request_id: int, log: RequestLog) -> None:
    cur.execute(
        """
        INSERT INTO leave_request_logs(request_id, action, actor_name, logged_at, comment)
        VALUES(%s,%s,%s,%s,%s)
        """,
        (int(request_id), log.action.value, log.actor_name, log.timestamp, log.comment or None),
    )


def _insert_booking(cur, request_id: int, new: NewLeaveRequest) -> None:
    cur.execute(
        """
        INSERT INTO vehicle_bookings(
            vehicle_id, employee_id, start_time, end_time, purpose, status, leave_request_id
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(new.booking.vehicle_id),
            new.employee_id,
            new.start_time,
            new.end_time,
            new.booking.purpose,
            new.status.value,
            int(request_id),
        ),
    )


def _load_logs(cur, request_ids: Sequence[int]) -> dict[int, list[RequestLog]]:
    out: dict[int, list[RequestLog]] = {int(rid): [] for rid in request_ids}
    if not request_ids:
        return out
    cur.execute(
        f"""
        SELECT request_id, action, actor_name, logged_at, comment
        FROM leave_request_logs
        WHERE request_id IN ({in_placeholders(request_ids)})
        ORDER BY log_id ASC
        """,
        tuple(int(rid) for rid in request_ids),
    )
    for r in fetchall(cur):
        out[int(r["request_id"])].append(
            RequestLog(
                action=LogAction(r["action"]),
                actor_name=r["actor_name"],
                timestamp=r["logged_at"],
                comment=r.get("comment") or "",
            )
        )
    return out


def _to_request(row: dict, logs: list[RequestLog]) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(row["request_id"]),
        employee_id=str(row["employee_id"]),
        leave_type=LeaveType(row["leave_type"]),
        start_time=row["start_time"],
        end_time=row["end_time"],
        reason=row["reason"],
        status=RequestStatus(row["status"]),
        approval_level=ApprovalLevel(row["approval_level"]),
        overtime_hours=as_float(row.get("overtime_hours")),
        meal_allowance=bool(row.get("meal_allowance")),
        transport_mode=TransportMode(row["transport_mode"]) if row.get("transport_mode") else None,
        logs=tuple(logs),
        created_at=row.get("created_at"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: tuple, *, limit: Optional[int] = None, order: str = "start_time DESC"):
        sql = f"SELECT {_COLUMNS} FROM leave_requests WHERE {where} ORDER BY {order}"
        if limit is not None:
            sql += " LIMIT %s"
            params = params + (int(limit),)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            rows = fetchall(cur)
            logs = _load_logs(cur, [int(r["request_id"]) for r in rows])
            return [_to_request(r, logs[int(r["request_id"])]) for r in rows]

    def create(self, new: NewLeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_time, end_time, reason, status,
                    approval_level, overtime_hours, meal_allowance, transport_mode
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new.employee_id,
                    new.leave_type.value,
                    new.start_time,
                    new.end_time,
                    new.reason,
                    new.status.value,
                    new.approval_level.value,
                    new.overtime_hours,
                    int(new.meal_allowance),
                    new.transport_mode.value if new.transport_mode else None,
                ),
            )
            request_id = int(cur.lastrowid)
            _insert_log(cur, request_id, new.first_log)
            if new.booking:
                _insert_booking(cur, request_id, new)
            return request_id

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            row = fetchone(cur)
            if not row:
                return None
            logs = _load_logs(cur, [int(request_id)])
            return _to_request(row, logs[int(request_id)])

    def list_for_employee(self, employee_id: str, *, limit: Optional[int] = None) -> Sequence[LeaveRequest]:
        return self._select("employee_id=%s", (employee_id,), limit=limit)

    def list_by_status(
        self, statuses: Sequence[RequestStatus], *, limit: Optional[int] = None
    ) -> Sequence[LeaveRequest]:
        if not statuses:
            return []
        return self._select(
            f"status IN ({in_placeholders(statuses)})",
            tuple(s.value for s in statuses),
            limit=limit,
            order="created_at ASC",
        )

    def list_starting_between(self, start: datetime, end: datetime) -> Sequence[LeaveRequest]:
        return self._select("start_time >= %s AND start_time < %s", (start, end), order="start_time ASC")

    def update_status(
        self,
        request_id: int,
        *,
        expected: RequestStatus,
        status: RequestStatus,
        log: RequestLog,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_requests SET status=%s WHERE request_id=%s AND status=%s",
                (status.value, int(request_id), expected.value),
            )
            if cur.rowcount <= 0:
                return False
            _insert_log(cur, request_id, log)
            cur.execute(
                "UPDATE vehicle_bookings SET status=%s WHERE leave_request_id=%s",
                (status.value, int(request_id)),
            )
            return True

    def update_times(
        self,
        request_id: int,
        *,
        start_time: datetime,
        end_time: datetime,
        overtime_hours: Optional[float],
        meal_allowance: bool,
        log: RequestLog,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET start_time=%s, end_time=%s, overtime_hours=%s, meal_allowance=%s
                WHERE request_id=%s AND status NOT IN (%s,%s)
                """,
                (
                    start_time,
                    end_time,
                    overtime_hours,
                    int(meal_allowance),
                    int(request_id),
                    RequestStatus.REJECTED.value,
                    RequestStatus.CANCELLED.value,
                ),
            )
            if cur.rowcount <= 0:
                return False
            _insert_log(cur, request_id, log)
            cur.execute(
                "UPDATE vehicle_bookings SET start_time=%s, end_time=%s WHERE leave_request_id=%s",
                (start_time, end_time, int(request_id)),
            )
            return True
