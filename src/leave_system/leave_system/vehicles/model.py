from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class Vehicle:
    vehicle_id: int
    name: str
    plate_number: str
    is_available: bool = True


@dataclass(frozen=True)
class CompanionBooking:
    """Car booking written together with its business-trip request.

    Employee, time range and status are taken from the request itself.
    """

    vehicle_id: int
    purpose: str


@dataclass(frozen=True)
class VehicleBooking:
    """Company-car booking; `leave_request_id` links it to its business-trip request."""

    booking_id: int
    vehicle_id: int
    employee_id: str
    start_time: datetime
    end_time: datetime
    purpose: Optional[str]
    status: RequestStatus
    leave_request_id: Optional[int] = None
    booker_name: Optional[str] = None

    @property
    def blocks_vehicle(self) -> bool:
        return self.status not in (RequestStatus.REJECTED, RequestStatus.CANCELLED, RequestStatus.RETURNED)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end_time and end > self.start_time
