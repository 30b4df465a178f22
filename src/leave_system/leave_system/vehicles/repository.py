from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Vehicle, VehicleBooking


class VehicleRepository(Protocol):
    """Read side of company cars; bookings are written with their leave request."""

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        raise NotImplementedError

    def list_bookings_for_vehicle(self, vehicle_id: int) -> Sequence[VehicleBooking]:
        raise NotImplementedError

    def get_by_leave_request(self, leave_request_id: int) -> Optional[VehicleBooking]:
        raise NotImplementedError
