from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalLevel, LeaveType, LogAction, RequestStatus, TransportMode
from ..vehicles.model import CompanionBooking


@dataclass(frozen=True)
class RequestLog:
    """One entry of the append-only approval history."""

    action: LogAction
    actor_name: str
    timestamp: datetime
    comment: str = ""


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a request for time away from (or beyond) standard duty."""

    request_id: int
    employee_id: str
    leave_type: LeaveType
    start_time: datetime
    end_time: datetime
    reason: str
    status: RequestStatus
    approval_level: ApprovalLevel
    overtime_hours: Optional[float] = None
    meal_allowance: bool = False
    transport_mode: Optional[TransportMode] = None
    logs: tuple[RequestLog, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    @property
    def is_overtime(self) -> bool:
        return self.leave_type is LeaveType.OVERTIME

    @property
    def is_active(self) -> bool:
        """Counts for overlap checks: everything except rejected/cancelled."""
        return not self.status.is_terminal

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end_time and end > self.start_time


@dataclass(frozen=True)
class NewLeaveRequest:
    """Validated submission, ready to be written by the repository.

    `booking` (company-car trips) is inserted in the same transaction as the request.
    """

    employee_id: str
    leave_type: LeaveType
    start_time: datetime
    end_time: datetime
    reason: str
    status: RequestStatus
    approval_level: ApprovalLevel
    overtime_hours: Optional[float]
    meal_allowance: bool
    transport_mode: Optional[TransportMode]
    first_log: RequestLog
    booking: Optional[CompanionBooking] = None


@dataclass(frozen=True)
class SubmissionResult:
    request_id: int
    status: RequestStatus
    approval_level: ApprovalLevel
    hours: float
    meal_allowance: bool
    booking_id: Optional[int] = None
