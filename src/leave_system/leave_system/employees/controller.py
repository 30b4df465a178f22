from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import error_response, iso, login_required, parse_enum, parse_optional_datetime
from ..container import Container
from ..core.enums import EmployeeStatus
from ..core.exceptions import DomainError, ValidationError
from .model import Employee


def _employee_to_dict(emp: Employee) -> dict:
    return {
        "employee_id": emp.employee_id,
        "full_name": emp.full_name,
        "department": emp.department,
        "job_title": emp.job_title,
        "role": emp.role.value,
        "grade": emp.grade.value,
        "hire_date": emp.hire_date.isoformat() if emp.hire_date else None,
        "current_status": emp.current_status.value,
        "location_detail": emp.location_detail,
        "expected_return": iso(emp.expected_return),
    }


def register(app: Flask, container: Container) -> None:
    def _current() -> Employee:
        return container.employee_service.get(str(session["employee_id"]))

    @app.route("/api/employees/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        try:
            return jsonify({"success": True, "employee": _employee_to_dict(_current())})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/employees/board", methods=["GET"], endpoint="status_board")
    @login_required
    def status_board():
        items = container.employee_service.list_all()
        return jsonify({"success": True, "items": [_employee_to_dict(e) for e in items]})

    @app.route("/api/employees/<employee_id>/presence", methods=["POST"], endpoint="update_presence")
    @login_required
    def update_presence(employee_id: str):
        try:
            data = request.get_json(silent=True) or {}
            container.employee_service.update_presence(
                actor=_current(),
                employee_id=employee_id,
                status=parse_enum(EmployeeStatus, data.get("status"), "動態"),
                location_detail=data.get("location_detail"),
                expected_return=parse_optional_datetime(data, "expected_return", "預計返回時間", container.timezone),
            )
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)

    @app.route("/api/employees/<employee_id>/quotas", methods=["POST"], endpoint="update_quotas")
    @login_required
    def update_quotas(employee_id: str):
        try:
            data = request.get_json(silent=True) or {}
            try:
                quotas = {k: int(data[k]) for k in ("annual_leave_quota", "sick_leave_quota", "personal_leave_quota")}
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError("額度必須為整數") from e
            container.employee_service.update_quotas(actor=_current(), employee_id=employee_id, **quotas)
            return jsonify({"success": True})
        except DomainError as e:
            return error_response(e)
