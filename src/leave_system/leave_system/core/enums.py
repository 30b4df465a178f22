from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """系統角色 (權限用)."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class Grade(str, Enum):
    """職級: routing and approval authority are decided on this value."""

    IC = "ic"
    CHIEF = "chief"
    MANAGER = "manager"
    GENERAL_MANAGER = "general_manager"

    @classmethod
    def from_job_title(cls, job_title: str | None) -> "Grade":
        """Map a legacy job title to a grade (used only when importing old rows)."""
        title = (job_title or "").strip()
        if "總經理" in title:
            return cls.GENERAL_MANAGER
        if "經理" in title:
            return cls.MANAGER
        if "課長" in title:
            return cls.CHIEF
        return cls.IC


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    BUSINESS = "business"
    OTHER = "other"
    OVERTIME = "overtime"

    @property
    def label(self) -> str:
        return _LEAVE_TYPE_LABELS[self]


_LEAVE_TYPE_LABELS = {
    LeaveType.ANNUAL: "特休",
    LeaveType.SICK: "病假",
    LeaveType.BUSINESS: "公出",
    LeaveType.OTHER: "事假",
    LeaveType.OVERTIME: "加班",
}


class RequestStatus(str, Enum):
    """申請單狀態 (多段簽核)."""

    PENDING_DEPT = "pending_dept"
    PENDING_GM = "pending_gm"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    # Vehicle bookings only: the car has been handed back.
    RETURNED = "returned"

    @property
    def is_pending(self) -> bool:
        return self in (RequestStatus.PENDING_DEPT, RequestStatus.PENDING_GM)

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.REJECTED, RequestStatus.CANCELLED)


class ApprovalLevel(str, Enum):
    DEPT_MANAGER = "dept_manager"
    GENERAL_MANAGER = "general_manager"


class TransportMode(str, Enum):
    PERSONAL_CAR = "personal_car"
    HS_RAIL = "hs_rail"
    COMPANY_CAR = "company_car"


class EmployeeStatus(str, Enum):
    """即時動態 (status board)."""

    IN_OFFICE = "in_office"
    MEETING = "meeting"
    OUT = "out"
    ABROAD = "abroad"
    LEAVE = "leave"


class LogAction(str, Enum):
    SUBMITTED = "送出申請"
    AUTO_APPROVED = "自動核准"
    DEPT_APPROVED = "部門核准(轉呈GM)"
    APPROVED = "核准"
    REJECTED = "駁回"
    CANCELLED = "取消申請"
    FORCE_CANCELLED = "強制取消"
    COMPLETED = "結案"
    CORRECTED = "管理員修正時間"
