from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Vehicle, VehicleBooking
from .repository import VehicleRepository

_BOOKING_SELECT = """
    SELECT b.booking_id, b.vehicle_id, b.employee_id, b.start_time, b.end_time,
           b.purpose, b.status, b.leave_request_id, e.full_name AS booker_name
    FROM vehicle_bookings b
    LEFT JOIN employees e ON e.employee_id = b.employee_id
"""


def _to_booking(r: dict) -> VehicleBooking:
    return VehicleBooking(
        booking_id=int(r["booking_id"]),
        vehicle_id=int(r["vehicle_id"]),
        employee_id=str(r["employee_id"]),
        start_time=r["start_time"],
        end_time=r["end_time"],
        purpose=r.get("purpose"),
        status=RequestStatus(r["status"]),
        leave_request_id=r.get("leave_request_id"),
        booker_name=r.get("booker_name"),
    )


class MySQLVehicleRepository(VehicleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT vehicle_id, name, plate_number, is_available FROM vehicles WHERE vehicle_id=%s",
                (int(vehicle_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Vehicle(
                vehicle_id=int(r["vehicle_id"]),
                name=r["name"],
                plate_number=r["plate_number"],
                is_available=bool(r.get("is_available", True)),
            )

    def list_bookings_for_vehicle(self, vehicle_id: int) -> Sequence[VehicleBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_BOOKING_SELECT} WHERE b.vehicle_id=%s ORDER BY b.start_time", (int(vehicle_id),))
            return [_to_booking(r) for r in fetchall(cur)]

    def get_by_leave_request(self, leave_request_id: int) -> Optional[VehicleBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_BOOKING_SELECT} WHERE b.leave_request_id=%s", (int(leave_request_id),))
            r = fetchone(cur)
            return _to_booking(r) if r else None
