from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_span
from ..core.exceptions import NotFound, VehicleUnavailable
from .model import CompanionBooking, VehicleBooking
from .repository import VehicleRepository


class VehicleBookingService:
    """Use case: company-car bookings that ride along with business-trip requests."""

    def __init__(self, vehicles: VehicleRepository):
        self._vehicles = vehicles

    def find_conflict(
        self,
        vehicle_id: int,
        start: datetime,
        end: datetime,
        *,
        exclude_leave_request_id: Optional[int] = None,
    ) -> Optional[VehicleBooking]:
        for b in self._vehicles.list_bookings_for_vehicle(int(vehicle_id)):
            if exclude_leave_request_id is not None and b.leave_request_id == exclude_leave_request_id:
                continue
            if b.blocks_vehicle and b.overlaps(start, end):
                return b
        return None

    def ensure_available(
        self,
        vehicle_id: int,
        start: datetime,
        end: datetime,
        *,
        exclude_leave_request_id: Optional[int] = None,
    ) -> None:
        vehicle = self._vehicles.get_vehicle(int(vehicle_id))
        if not vehicle:
            raise NotFound("車輛不存在")
        if not vehicle.is_available:
            raise VehicleUnavailable(
                f"{vehicle.name} ({vehicle.plate_number}) 目前停用，請重新選擇",
                vehicle_id=int(vehicle_id),
            )

        conflict = self.find_conflict(vehicle_id, start, end, exclude_leave_request_id=exclude_leave_request_id)
        if conflict:
            booker = conflict.booker_name or "未知"
            raise VehicleUnavailable(
                f"此車輛已被 {booker} 預約 ({format_span(conflict.start_time, conflict.end_time)})，請重新選擇",
                vehicle_id=int(vehicle_id),
            )

    def companion_booking(self, vehicle_id: int, reason: str) -> CompanionBooking:
        return CompanionBooking(vehicle_id=int(vehicle_id), purpose=f"公務車連動：{reason}")

    def booking_for_leave(self, leave_request_id: int) -> Optional[VehicleBooking]:
        return self._vehicles.get_by_leave_request(int(leave_request_id))
