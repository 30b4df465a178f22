from __future__ import annotations

from datetime import date, datetime

from .base import DayModel


class NonWorkingDayModel(DayModel):
    """Weekend for ordinary leave: nothing is charged."""

    def hours_for_day(self, *, day: date, start: datetime, end: datetime) -> float:
        return 0.0
