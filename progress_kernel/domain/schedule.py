"""
Schedule position of a project: how much of the planned calendar has
elapsed and how many days remain.

Pure function of (start date, estimated end date, today).  ``today`` is
supplied by the caller from a Clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class SchedulePosition:
    time_progress: int
    days_remaining: int
    total_days: int
    elapsed_days: int

    @property
    def past_due(self) -> bool:
        return self.elapsed_days > self.total_days


def compute_schedule_progress(start: date, end: date, today: date) -> SchedulePosition:
    """
    Elapsed share of the planned duration, clamped to 0..100.

    A zero or negative planned duration gives 0% elapsed.  Days remaining
    never goes below zero.
    """
    total = (end - start).days
    elapsed = (today - start).days

    progress = 0
    if total > 0:
        ratio = Decimal(elapsed) * Decimal(100) / Decimal(total)
        progress = int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return SchedulePosition(
        time_progress=max(0, min(100, progress)),
        days_remaining=max(0, (end - today).days),
        total_days=total,
        elapsed_days=elapsed,
    )
