from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from ...core.constants import WORK_BLOCKS
from .base import DayModel, overlap_hours, window_on


@dataclass(frozen=True)
class StandardBlocksModel(DayModel):
    """Segmented workday: only time inside the fixed work blocks is charged."""

    blocks: tuple[tuple[time, time], ...] = WORK_BLOCKS

    def hours_for_day(self, *, day: date, start: datetime, end: datetime) -> float:
        total = 0.0
        for block in self.blocks:
            block_start, block_end = window_on(day, block)
            total += overlap_hours(start, end, block_start, block_end)
        return total
