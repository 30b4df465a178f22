from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from ...core.constants import OVERTIME_WINDOW, WEEKDAY_OVERTIME_MAX_HOURS
from .base import DayModel, overlap_hours, window_on


@dataclass(frozen=True)
class EveningOvertimeModel(DayModel):
    """Weekday overtime: the 18:00-22:00 window of that day, capped, 1 decimal."""

    window: tuple[time, time] = OVERTIME_WINDOW
    max_hours: float = WEEKDAY_OVERTIME_MAX_HOURS

    def hours_for_day(self, *, day: date, start: datetime, end: datetime) -> float:
        window_start, window_end = window_on(day, self.window)
        hours = overlap_hours(start, end, window_start, window_end)
        return round(min(hours, self.max_hours), 1)
