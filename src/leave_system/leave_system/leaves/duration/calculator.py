from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .factory import DayModelFactory


class DurationCalculator:
    """Convert a (start, end, is_overtime) triple into chargeable hours."""

    def __init__(self, factory: Optional[DayModelFactory] = None):
        self._factory = factory or DayModelFactory()

    def chargeable_hours(self, start: datetime, end: datetime, *, is_overtime: bool = False) -> float:
        if start >= end:
            return 0.0

        total = 0.0
        day = start.date()
        while day <= end.date():
            model = self._factory.for_day(day, is_overtime=is_overtime)
            total += model.hours_for_day(day=day, start=start, end=end)
            day += timedelta(days=1)
        return round(total, 2)


_default = DurationCalculator()


def compute_chargeable_hours(start: datetime, end: datetime, is_overtime: bool = False) -> float:
    return _default.chargeable_hours(start, end, is_overtime=is_overtime)
