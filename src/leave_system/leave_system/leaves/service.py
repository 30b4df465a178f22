from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..approvals.router import ApprovalRouter, ApprovalStep, Transition
from ..common.datetime_utils import format_span, now_local, to_local_naive
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_TIMEZONE, MONTHLY_OVERTIME_WARNING_HOURS
from ..core.enums import LeaveType, LogAction, RequestStatus, TransportMode
from ..core.exceptions import InvalidTransition, NotFound, OverlapConflict, PermissionDenied, ValidationError
from ..employees.model import Employee
from ..employees.service import EmployeeService
from ..entitlements.service import EntitlementTracker, Quota
from ..vehicles.service import VehicleBookingService
from .duration.calculator import DurationCalculator
from .model import LeaveRequest, NewLeaveRequest, RequestLog, SubmissionResult
from .policy import has_meal_allowance, validate_duration
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)

_COUNTED_STATUSES = (
    RequestStatus.PENDING_DEPT,
    RequestStatus.PENDING_GM,
    RequestStatus.APPROVED,
    RequestStatus.COMPLETED,
)


@dataclass(frozen=True)
class PendingApproval:
    """Row of an approver's work queue."""

    request: LeaveRequest
    requester: Employee
    hours: float
    steps: list[ApprovalStep]
    monthly_overtime_hours: float = 0.0
    overtime_warning: bool = False


@dataclass(frozen=True)
class EmployeeLeaveStats:
    employee_id: str
    full_name: str
    department: str
    job_title: str
    annual_hours: float = 0.0
    personal_hours: float = 0.0
    sick_hours: float = 0.0
    business_hours: float = 0.0
    overtime_hours: float = 0.0


class LeaveService:
    """Use case: submit, approve, reject, cancel and correct leave/overtime requests.

    Every precondition is checked before the first write; a failed check raises
    and nothing is persisted.
    """

    def __init__(
        self,
        leaves: LeaveRequestRepository,
        employees: EmployeeService,
        vehicles: VehicleBookingService,
        *,
        calculator: Optional[DurationCalculator] = None,
        entitlements: Optional[EntitlementTracker] = None,
        router: Optional[ApprovalRouter] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._leaves = leaves
        self._employees = employees
        self._vehicles = vehicles
        self._calculator = calculator or DurationCalculator()
        self._entitlements = entitlements or EntitlementTracker(leaves, calculator=self._calculator)
        self._router = router or ApprovalRouter()
        self._timezone = timezone

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_local_naive(now, self._timezone) if now else now_local(self._timezone)

    def _get(self, request_id: int) -> LeaveRequest:
        req = self._leaves.get(int(request_id))
        if not req:
            raise NotFound("申請單不存在")
        return req

    def compute_hours(self, leave_type: LeaveType, start: datetime, end: datetime) -> float:
        return self._calculator.chargeable_hours(start, end, is_overtime=leave_type is LeaveType.OVERTIME)

    def check_overlap(
        self,
        employee_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_request_id: Optional[int] = None,
    ) -> None:
        for r in self._leaves.list_for_employee(employee_id):
            if r.request_id == exclude_request_id or not r.is_active:
                continue
            if r.overlaps(start, end):
                raise OverlapConflict(
                    f"與已存在的「{r.leave_type.label}」重疊！日期: {format_span(r.start_time, r.end_time)} 事由: {r.reason}",
                    conflict_id=r.request_id,
                )

    # -------- submission --------
    def submit(
        self,
        *,
        requester: Employee,
        leave_type: LeaveType,
        start: datetime,
        end: datetime,
        reason: str,
        transport_mode: Optional[TransportMode] = None,
        vehicle_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionResult:
        now = self._now(now)
        start = to_local_naive(start, self._timezone)
        end = to_local_naive(end, self._timezone)
        is_overtime = leave_type is LeaveType.OVERTIME

        if is_overtime and requester.is_supervisor:
            raise PermissionDenied("主管職級 (課長/經理/總經理) 責任制，不適用加班申請")

        hours = self.compute_hours(leave_type, start, end)
        validate_duration(leave_type, start, hours)
        reason = require_non_empty(reason, "事由說明")
        self.check_overlap(requester.employee_id, start, end)

        if leave_type is not LeaveType.BUSINESS:
            transport_mode = None
        uses_company_car = transport_mode is TransportMode.COMPANY_CAR
        if uses_company_car:
            if not vehicle_id:
                raise ValidationError("請選擇要預約的公務車輛")
            self._vehicles.ensure_available(int(vehicle_id), start, end)

        self._entitlements.ensure_within_quota(requester, leave_type, hours, today=now.date())

        decision = self._router.initial_route(requester, hours)
        comment = f"時數: {hours}hr"
        if decision.is_long_leave:
            comment += " (超過3天，需經部門及總經理簽核)"
        new = NewLeaveRequest(
            employee_id=requester.employee_id,
            leave_type=leave_type,
            start_time=start,
            end_time=end,
            reason=reason,
            status=decision.status,
            approval_level=decision.approval_level,
            overtime_hours=hours if is_overtime else None,
            meal_allowance=has_meal_allowance(end, is_overtime=is_overtime),
            transport_mode=transport_mode,
            first_log=RequestLog(
                action=LogAction.AUTO_APPROVED if decision.status == RequestStatus.APPROVED else LogAction.SUBMITTED,
                actor_name=requester.full_name,
                timestamp=now,
                comment=comment,
            ),
            booking=self._vehicles.companion_booking(int(vehicle_id), reason) if uses_company_car else None,
        )

        if uses_company_car:
            # Availability may have changed while the form was being filled in.
            self._vehicles.ensure_available(int(vehicle_id), start, end)

        request_id = self._leaves.create(new)
        booking_id = None
        if uses_company_car:
            booking = self._vehicles.booking_for_leave(request_id)
            booking_id = booking.booking_id if booking else None

        logger.info(
            "leave request %s submitted by %s: %s %.2fh -> %s/%s",
            request_id,
            requester.employee_id,
            leave_type.value,
            hours,
            decision.status.value,
            decision.approval_level.value,
        )

        if decision.status == RequestStatus.APPROVED:
            created = self._leaves.get(request_id)
            if created:
                self._employees.mark_away_for(created, now=now)

        return SubmissionResult(
            request_id=request_id,
            status=decision.status,
            approval_level=decision.approval_level,
            hours=hours,
            meal_allowance=new.meal_allowance,
            booking_id=booking_id,
        )

    # -------- transitions --------
    def _apply(self, req: LeaveRequest, transition: Transition, *, actor_name: str, now: datetime) -> RequestStatus:
        log = RequestLog(action=transition.action, actor_name=actor_name, timestamp=now, comment=transition.comment)
        ok = self._leaves.update_status(req.request_id, expected=req.status, status=transition.status, log=log)
        if not ok:
            raise InvalidTransition("申請單狀態已變更，請重新整理後再試")

        logger.info(
            "leave request %s: %s -> %s by %s",
            req.request_id,
            req.status.value,
            transition.status.value,
            actor_name,
        )

        if transition.status == RequestStatus.APPROVED:
            updated = self._leaves.get(req.request_id)
            if updated:
                self._employees.mark_away_for(updated, now=now)
        return transition.status

    def approve(self, *, approver: Employee, request_id: int, now: Optional[datetime] = None) -> RequestStatus:
        now = self._now(now)
        req = self._get(request_id)
        requester = self._employees.get(req.employee_id)
        self._router.ensure_can_decide(approver, requester, req)
        return self._apply(req, self._router.on_approve(req), actor_name=approver.full_name, now=now)

    def reject(
        self,
        *,
        approver: Employee,
        request_id: int,
        comment: str = "",
        now: Optional[datetime] = None,
    ) -> RequestStatus:
        now = self._now(now)
        req = self._get(request_id)
        requester = self._employees.get(req.employee_id)
        self._router.ensure_can_decide(approver, requester, req)
        transition = self._router.on_reject(req, comment=(comment or "").strip())
        return self._apply(req, transition, actor_name=approver.full_name, now=now)

    def cancel(self, *, actor: Employee, request_id: int, now: Optional[datetime] = None) -> RequestStatus:
        now = self._now(now)
        req = self._get(request_id)
        transition = self._router.on_cancel(req, actor, now=now)
        return self._apply(req, transition, actor_name=actor.full_name, now=now)

    def correct_times(
        self,
        *,
        actor: Employee,
        request_id: int,
        start: datetime,
        end: datetime,
        now: Optional[datetime] = None,
    ) -> float:
        """Admin-only correction of the requested time range; returns the new hours."""
        if not actor.is_admin:
            raise PermissionDenied("只有管理員可以修正申請時間")

        now = self._now(now)
        start = to_local_naive(start, self._timezone)
        end = to_local_naive(end, self._timezone)
        req = self._get(request_id)
        if req.status.is_terminal:
            raise InvalidTransition("已駁回或取消的申請無法修正")

        hours = self.compute_hours(req.leave_type, start, end)
        validate_duration(req.leave_type, start, hours)
        self.check_overlap(req.employee_id, start, end, exclude_request_id=req.request_id)

        uses_company_car = req.transport_mode is TransportMode.COMPANY_CAR
        if uses_company_car:
            booking = self._vehicles.booking_for_leave(req.request_id)
            if booking:
                self._vehicles.ensure_available(
                    booking.vehicle_id, start, end, exclude_leave_request_id=req.request_id
                )

        log = RequestLog(
            action=LogAction.CORRECTED,
            actor_name=actor.full_name,
            timestamp=now,
            comment=f"{format_span(req.start_time, req.end_time)} → {format_span(start, end)}",
        )
        ok = self._leaves.update_times(
            req.request_id,
            start_time=start,
            end_time=end,
            overtime_hours=hours if req.is_overtime else None,
            meal_allowance=has_meal_allowance(end, is_overtime=req.is_overtime),
            log=log,
        )
        if not ok:
            raise ValidationError("修正申請時間失敗")

        logger.info("leave request %s corrected by %s to %s", req.request_id, actor.employee_id, format_span(start, end))
        return hours

    # -------- queries --------
    def get_quota(self, employee: Employee, leave_type: LeaveType, *, today: Optional[date] = None) -> Optional[Quota]:
        today = today or now_local(self._timezone).date()
        return self._entitlements.get_remaining(employee, leave_type, today=today)

    def list_mine(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[LeaveRequest]:
        return list(self._leaves.list_for_employee(employee_id, limit=limit))

    def approval_steps(self, request: LeaveRequest) -> list[ApprovalStep]:
        return self._router.approval_steps(request)

    def monthly_overtime_hours(self, employee_id: str, month_of: datetime) -> float:
        """Approved overtime hours of the employee in the calendar month of `month_of`."""
        month_start = datetime(month_of.year, month_of.month, 1)
        if month_of.month == 12:
            next_month = datetime(month_of.year + 1, 1, 1)
        else:
            next_month = datetime(month_of.year, month_of.month + 1, 1)

        total = 0.0
        for r in self._leaves.list_starting_between(month_start, next_month):
            if r.employee_id != employee_id or not r.is_overtime:
                continue
            if r.status in (RequestStatus.APPROVED, RequestStatus.COMPLETED):
                total += r.overtime_hours or 0.0
        return round(total, 2)

    def list_pending_for(self, approver: Employee) -> list[PendingApproval]:
        if not approver.is_supervisor and not approver.is_admin:
            return []

        # Requests whose employee row is gone are skipped.
        requesters: dict[str, Optional[Employee]] = {}
        out: list[PendingApproval] = []
        pending = self._leaves.list_by_status([RequestStatus.PENDING_DEPT, RequestStatus.PENDING_GM], limit=None)
        for req in pending:
            if req.employee_id not in requesters:
                requesters[req.employee_id] = self._employees.find(req.employee_id)
            requester = requesters[req.employee_id]
            if not requester or not self._router.can_approve(approver, requester, req):
                continue

            hours = self.compute_hours(req.leave_type, req.start_time, req.end_time)
            monthly = 0.0
            if req.is_overtime:
                monthly = self.monthly_overtime_hours(req.employee_id, req.start_time) + (req.overtime_hours or 0.0)
            out.append(
                PendingApproval(
                    request=req,
                    requester=requester,
                    hours=hours,
                    steps=self._router.approval_steps(req),
                    monthly_overtime_hours=round(monthly, 2),
                    overtime_warning=monthly > MONTHLY_OVERTIME_WARNING_HOURS,
                )
            )
        return out

    def department_stats(
        self,
        *,
        actor: Employee,
        year: int,
        department: Optional[str] = None,
    ) -> list[EmployeeLeaveStats]:
        """Yearly chargeable hours per employee, by leave type."""
        if not actor.is_supervisor and not actor.is_admin:
            raise PermissionDenied("您沒有權限查看部門統計")
        if not actor.is_general_manager:
            department = actor.department

        employees = [e for e in self._employees.list_all() if not department or e.department == department]
        requests = [
            r
            for r in self._leaves.list_starting_between(datetime(year, 1, 1), datetime(year + 1, 1, 1))
            if r.status in _COUNTED_STATUSES
        ]

        stats: list[EmployeeLeaveStats] = []
        for emp in employees:
            sums = {t: 0.0 for t in LeaveType}
            for r in requests:
                if r.employee_id != emp.employee_id:
                    continue
                if r.is_overtime:
                    sums[LeaveType.OVERTIME] += r.overtime_hours or 0.0
                else:
                    sums[r.leave_type] += self._calculator.chargeable_hours(r.start_time, r.end_time)
            stats.append(
                EmployeeLeaveStats(
                    employee_id=emp.employee_id,
                    full_name=emp.full_name,
                    department=emp.department,
                    job_title=emp.job_title,
                    annual_hours=round(sums[LeaveType.ANNUAL], 2),
                    personal_hours=round(sums[LeaveType.OTHER], 2),
                    sick_hours=round(sums[LeaveType.SICK], 2),
                    business_hours=round(sums[LeaveType.BUSINESS], 2),
                    overtime_hours=round(sums[LeaveType.OVERTIME], 2),
                )
            )
        return stats

    # -------- scheduled sweep --------
    def refresh_presence(self, *, now: Optional[datetime] = None) -> dict:
        """Caller-scheduled sweep: close elapsed approvals and sync the status board."""
        now = self._now(now)
        completed = 0
        away = 0
        for req in self._leaves.list_by_status([RequestStatus.APPROVED], limit=None):
            if req.end_time <= now:
                self._apply(req, self._router.on_complete(req), actor_name="系統", now=now)
                completed += 1
            elif self._employees.mark_away_for(req, now=now):
                away += 1

        returned = self._employees.reset_returned(now=now)
        logger.info("presence refresh: completed=%s away=%s returned=%s", completed, away, returned)
        return {"completed": completed, "away": away, "returned": returned}
