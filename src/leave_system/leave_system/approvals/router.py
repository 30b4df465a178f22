from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.constants import LONG_LEAVE_HOURS
from ..core.enums import ApprovalLevel, LogAction, RequestStatus
from ..core.exceptions import InvalidTransition, PermissionDenied
from ..employees.model import Employee
from ..leaves.model import LeaveRequest


@dataclass(frozen=True)
class RoutingDecision:
    status: RequestStatus
    approval_level: ApprovalLevel
    is_long_leave: bool = False


@dataclass(frozen=True)
class Transition:
    """Outcome of a transition check: target status plus the log action to append."""

    status: RequestStatus
    action: LogAction
    comment: str = ""


@dataclass(frozen=True)
class ApprovalStep:
    name: str
    state: str  # done | current | waiting


class ApprovalRouter:
    """State machine for leave requests.

    pending_dept -> pending_gm -> approved (or pending_dept -> approved),
    rejected/cancelled are terminal, approved -> completed once elapsed.
    Methods only decide; persisting the result is the caller's job.
    """

    def __init__(self, *, long_leave_hours: float = LONG_LEAVE_HOURS):
        self._long_leave_hours = long_leave_hours

    def initial_route(self, requester: Employee, hours: float) -> RoutingDecision:
        is_long = hours > self._long_leave_hours
        if requester.is_general_manager:
            return RoutingDecision(RequestStatus.APPROVED, ApprovalLevel.GENERAL_MANAGER, is_long)
        if requester.is_manager:
            # Managers skip department review.
            return RoutingDecision(RequestStatus.PENDING_GM, ApprovalLevel.GENERAL_MANAGER, is_long)
        level = ApprovalLevel.GENERAL_MANAGER if is_long else ApprovalLevel.DEPT_MANAGER
        return RoutingDecision(RequestStatus.PENDING_DEPT, level, is_long)

    # -------- authorization --------
    def can_approve(self, approver: Employee, requester: Employee, request: LeaveRequest) -> bool:
        if approver.employee_id == request.employee_id:
            return False

        if request.status == RequestStatus.PENDING_GM:
            return approver.is_general_manager

        if request.status == RequestStatus.PENDING_DEPT:
            if approver.department != requester.department or requester.is_general_manager:
                return False
            if approver.is_manager:
                return True
            if approver.is_chief:
                return not (requester.is_manager or requester.is_chief)
        return False

    def ensure_can_decide(self, approver: Employee, requester: Employee, request: LeaveRequest) -> None:
        if not request.status.is_pending:
            raise InvalidTransition("此申請已結案，無法再簽核")
        if not self.can_approve(approver, requester, request):
            raise PermissionDenied("您沒有簽核此申請的權限")

    # -------- transitions --------
    def on_approve(self, request: LeaveRequest) -> Transition:
        if request.status == RequestStatus.PENDING_DEPT:
            if request.approval_level == ApprovalLevel.GENERAL_MANAGER:
                return Transition(
                    RequestStatus.PENDING_GM,
                    LogAction.DEPT_APPROVED,
                    "時數超過3天或特殊申請，轉呈總經理",
                )
            return Transition(RequestStatus.APPROVED, LogAction.APPROVED)
        if request.status == RequestStatus.PENDING_GM:
            return Transition(RequestStatus.APPROVED, LogAction.APPROVED)
        raise InvalidTransition("此申請已結案，無法再簽核")

    def on_reject(self, request: LeaveRequest, *, comment: str = "") -> Transition:
        if not request.status.is_pending:
            raise InvalidTransition("此申請已結案，無法駁回")
        return Transition(RequestStatus.REJECTED, LogAction.REJECTED, comment)

    def on_cancel(self, request: LeaveRequest, actor: Employee, *, now: datetime) -> Transition:
        if request.status.is_terminal:
            raise InvalidTransition("此申請已駁回或取消")
        if actor.is_admin:
            return Transition(RequestStatus.CANCELLED, LogAction.FORCE_CANCELLED, "管理者強制取消")
        if actor.employee_id != request.employee_id:
            raise PermissionDenied("只能取消自己的申請")
        if request.end_time <= now:
            raise PermissionDenied("申請時段已結束，無法取消")
        return Transition(RequestStatus.CANCELLED, LogAction.CANCELLED, "使用者取消")

    def on_complete(self, request: LeaveRequest) -> Transition:
        if request.status != RequestStatus.APPROVED:
            raise InvalidTransition("只有已核准的申請可以結案")
        return Transition(RequestStatus.COMPLETED, LogAction.COMPLETED)

    # -------- display --------
    def approval_steps(self, request: LeaveRequest) -> list[ApprovalStep]:
        done = request.status in (RequestStatus.APPROVED, RequestStatus.COMPLETED)
        steps = [ApprovalStep("申請", "done")]

        if request.status == RequestStatus.PENDING_DEPT:
            dept_state = "current"
        elif done or request.status == RequestStatus.PENDING_GM:
            dept_state = "done"
        else:
            dept_state = "waiting"
        steps.append(ApprovalStep("部門主管", dept_state))

        if request.approval_level == ApprovalLevel.GENERAL_MANAGER:
            if request.status == RequestStatus.PENDING_GM:
                gm_state = "current"
            elif done:
                gm_state = "done"
            else:
                gm_state = "waiting"
            steps.append(ApprovalStep("總經理", gm_state))
        return steps
