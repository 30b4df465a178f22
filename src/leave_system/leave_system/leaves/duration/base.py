from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, time


def overlap_hours(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> float:
    """Length in hours of [start, end) ∩ [window_start, window_end), 0 when disjoint."""
    actual_start = max(start, window_start)
    actual_end = min(end, window_end)
    if actual_start >= actual_end:
        return 0.0
    return (actual_end - actual_start).total_seconds() / 3600


def window_on(day: date, window: tuple[time, time]) -> tuple[datetime, datetime]:
    return datetime.combine(day, window[0]), datetime.combine(day, window[1])


class DayModel(ABC):
    """Strategy Pattern: chargeable hours one calendar day contributes to a request."""

    @abstractmethod
    def hours_for_day(self, *, day: date, start: datetime, end: datetime) -> float:
        raise NotImplementedError
