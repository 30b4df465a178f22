from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveRequest, NewLeaveRequest, RequestLog


class LeaveRequestRepository(Protocol):
    def create(self, new: NewLeaveRequest) -> int:
        """Insert the request, its first log entry and any companion booking in one transaction."""

        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str, *, limit: Optional[int] = None) -> Sequence[LeaveRequest]:
        """Newest first; `limit=None` returns the full history."""

        raise NotImplementedError

    def list_by_status(
        self, statuses: Sequence[RequestStatus], *, limit: Optional[int] = None
    ) -> Sequence[LeaveRequest]:
        """Oldest first; `limit=None` returns every match."""

        raise NotImplementedError

    def list_starting_between(self, start: datetime, end: datetime) -> Sequence[LeaveRequest]:
        """Requests (any employee) whose start_time falls in [start, end)."""

        raise NotImplementedError

    def update_status(
        self,
        request_id: int,
        *,
        expected: RequestStatus,
        status: RequestStatus,
        log: RequestLog,
    ) -> bool:
        """Conditional update (only while status == expected) plus one log append.

        A linked vehicle booking takes the same status in the same transaction.
        """

        raise NotImplementedError

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
        """Skipped for rejected/cancelled requests; a linked booking moves with the request."""

        raise NotImplementedError
