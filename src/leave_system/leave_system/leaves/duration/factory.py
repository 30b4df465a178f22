from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ...common.datetime_utils import is_weekend
from .base import DayModel
from .non_working_model import NonWorkingDayModel
from .overtime_model import EveningOvertimeModel
from .standard_model import StandardBlocksModel


@dataclass
class DayModelFactory:
    """Factory Pattern: pick the day model from weekday/weekend and overtime flag."""

    standard: DayModel = field(default_factory=StandardBlocksModel)
    evening_overtime: DayModel = field(default_factory=EveningOvertimeModel)
    non_working: DayModel = field(default_factory=NonWorkingDayModel)

    def for_day(self, day: date, *, is_overtime: bool) -> DayModel:
        weekend = is_weekend(day)
        if is_overtime:
            # Weekend overtime follows the normal-hours block structure.
            return self.standard if weekend else self.evening_overtime
        return self.non_working if weekend else self.standard
