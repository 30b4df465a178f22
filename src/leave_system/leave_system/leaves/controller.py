from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.web import (
    error_response,
    iso,
    login_required,
    parse_datetime_field,
    parse_enum,
)
from ..container import Container
from ..core.constants import HOURS_PER_DAY
from ..core.enums import LeaveType, TransportMode
from ..core.exceptions import DomainError, PermissionDenied, ValidationError
from ..entitlements.service import QUOTA_TYPES, Quota
from .model import LeaveRequest
from .service import EmployeeLeaveStats, PendingApproval


def _request_to_dict(req: LeaveRequest, steps=None) -> dict:
    data = {
        "request_id": req.request_id,
        "employee_id": req.employee_id,
        "leave_type": req.leave_type.value,
        "leave_type_label": req.leave_type.label,
        "start_time": iso(req.start_time),
        "end_time": iso(req.end_time),
        "reason": req.reason,
        "status": req.status.value,
        "approval_level": req.approval_level.value,
        "overtime_hours": req.overtime_hours,
        "meal_allowance": req.meal_allowance,
        "transport_mode": req.transport_mode.value if req.transport_mode else None,
        "logs": [
            {
                "action": log.action.value,
                "actor_name": log.actor_name,
                "timestamp": iso(log.timestamp),
                "comment": log.comment,
            }
            for log in req.logs
        ],
    }
    if steps is not None:
        data["steps"] = [{"name": s.name, "state": s.state} for s in steps]
    return data


def _quota_to_dict(quota: Quota) -> dict:
    return {
        "leave_type": quota.leave_type.value,
        "label": quota.label,
        "total_days": quota.total,
        "used_days": quota.used,
        "remaining_days": quota.remaining,
        "cycle": str(quota.cycle),
    }


def _pending_to_dict(item: PendingApproval) -> dict:
    data = _request_to_dict(item.request, item.steps)
    data.update(
        {
            "requester_name": item.requester.full_name,
            "department": item.requester.department,
            "hours": item.hours,
            "monthly_overtime_hours": item.monthly_overtime_hours,
            "overtime_warning": item.overtime_warning,
        }
    )
    return data


def _stats_to_dict(s: EmployeeLeaveStats) -> dict:
    return {
        "employee_id": s.employee_id,
        "full_name": s.full_name,
        "department": s.department,
        "job_title": s.job_title,
        "annual_hours": s.annual_hours,
        "personal_hours": s.personal_hours,
        "sick_hours": s.sick_hours,
        "business_hours": s.business_hours,
        "overtime_hours": s.overtime_hours,
    }


def register(app: Flask, container: Container) -> None:
    tz = container.timezone

    def _current():
        return container.employee_service.get(str(session["employee_id"]))

    def _payload() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/leaves/hours", methods=["GET"], endpoint="leave_hours")
    @login_required
    def leave_hours():
        try:
            args = request.args.to_dict()
            leave_type = parse_enum(LeaveType, args.get("leave_type"), "假別")
            start = parse_datetime_field(args, "start", "開始時間", tz)
            end = parse_datetime_field(args, "end", "結束時間", tz)
            hours = container.leave_service.compute_hours(leave_type, start, end)
            return jsonify({"success": True, "hours": hours, "days": round(hours / HOURS_PER_DAY, 2)})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves", methods=["POST"], endpoint="submit_leave")
    @login_required
    def submit_leave():
        try:
            data = _payload()
            transport_mode: Optional[TransportMode] = None
            if data.get("transport_mode"):
                transport_mode = parse_enum(TransportMode, data["transport_mode"], "交通方式")
            vehicle_id = data.get("vehicle_id")

            result = container.leave_service.submit(
                requester=_current(),
                leave_type=parse_enum(LeaveType, data.get("leave_type"), "假別"),
                start=parse_datetime_field(data, "start", "開始時間", tz),
                end=parse_datetime_field(data, "end", "結束時間", tz),
                reason=data.get("reason", ""),
                transport_mode=transport_mode,
                vehicle_id=int(vehicle_id) if vehicle_id else None,
            )
            return (
                jsonify(
                    {
                        "success": True,
                        "request_id": result.request_id,
                        "status": result.status.value,
                        "approval_level": result.approval_level.value,
                        "hours": result.hours,
                        "meal_allowance": result.meal_allowance,
                        "booking_id": result.booking_id,
                    }
                ),
                201,
            )
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/mine", methods=["GET"], endpoint="my_leaves")
    @login_required
    def my_leaves():
        items = container.leave_service.list_mine(str(session["employee_id"]))
        return jsonify(
            {
                "success": True,
                "items": [_request_to_dict(r, container.leave_service.approval_steps(r)) for r in items],
            }
        )

    @app.route("/api/leaves/quota", methods=["GET"], endpoint="my_quota")
    @login_required
    def my_quota():
        try:
            me = _current()
            quotas = [container.leave_service.get_quota(me, t) for t in QUOTA_TYPES]
            return jsonify({"success": True, "items": [_quota_to_dict(q) for q in quotas if q]})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/pending", methods=["GET"], endpoint="pending_leaves")
    @login_required
    def pending_leaves():
        try:
            items = container.leave_service.list_pending_for(_current())
            return jsonify({"success": True, "items": [_pending_to_dict(i) for i in items]})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/<int:request_id>/approve", methods=["POST"], endpoint="approve_leave")
    @login_required
    def approve_leave(request_id: int):
        try:
            status = container.leave_service.approve(approver=_current(), request_id=request_id)
            return jsonify({"success": True, "status": status.value})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/<int:request_id>/reject", methods=["POST"], endpoint="reject_leave")
    @login_required
    def reject_leave(request_id: int):
        try:
            status = container.leave_service.reject(
                approver=_current(),
                request_id=request_id,
                comment=_payload().get("comment", ""),
            )
            return jsonify({"success": True, "status": status.value})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/<int:request_id>/cancel", methods=["POST"], endpoint="cancel_leave")
    @login_required
    def cancel_leave(request_id: int):
        try:
            status = container.leave_service.cancel(actor=_current(), request_id=request_id)
            return jsonify({"success": True, "status": status.value})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/<int:request_id>/times", methods=["POST"], endpoint="correct_leave_times")
    @login_required
    def correct_leave_times(request_id: int):
        try:
            data = _payload()
            hours = container.leave_service.correct_times(
                actor=_current(),
                request_id=request_id,
                start=parse_datetime_field(data, "start", "開始時間", tz),
                end=parse_datetime_field(data, "end", "結束時間", tz),
            )
            return jsonify({"success": True, "hours": hours})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/stats", methods=["GET"], endpoint="leave_stats")
    @login_required
    def leave_stats():
        try:
            year_raw = request.args.get("year", "")
            if not year_raw.isdigit():
                raise ValidationError("年份格式錯誤")
            stats = container.leave_service.department_stats(
                actor=_current(),
                year=int(year_raw),
                department=request.args.get("department") or None,
            )
            return jsonify({"success": True, "items": [_stats_to_dict(s) for s in stats]})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/leaves/refresh", methods=["POST"], endpoint="refresh_presence")
    @login_required
    def refresh_presence():
        try:
            if not _current().is_admin:
                raise PermissionDenied("您沒有權限")
            summary = container.leave_service.refresh_presence()
            return jsonify({"success": True, **summary})
        except DomainError as e:
            return error_response(e)
