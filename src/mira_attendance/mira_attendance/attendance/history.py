from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from ..core.constants import RECENT_HISTORY_DAYS
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord
from .stats import round_percentage


@dataclass(frozen=True)
class MonthStats:
    present: int
    absent: int
    leftover_days: int
    working_days: int


@dataclass(frozen=True)
class HistorySummary:
    """Read-model for the result screen shown after a capture."""

    overall_percentage: int
    trend: int
    present_days: int
    working_days: int
    month: MonthStats


def _present(records: Sequence[AttendanceRecord]) -> int:
    return sum(1 for r in records if r.status == AttendanceStatus.PRESENT)


def summarize_history(records: Sequence[AttendanceRecord], today: date) -> HistorySummary:
    """Summarize a most-recent-first history.

    trend: present days in the last week of records minus the week before.
    """

    days_in_month = calendar.monthrange(today.year, today.month)[1]
    leftover = days_in_month - today.day

    by_date = {r.work_date: r.status for r in records}
    month_present = 0
    month_absent = 0
    for day in range(1, days_in_month + 1):
        status = by_date.get(date(today.year, today.month, day))
        if status == AttendanceStatus.PRESENT:
            month_present += 1
        elif status == AttendanceStatus.ABSENT:
            month_absent += 1

    week = RECENT_HISTORY_DAYS
    present = _present(records)
    return HistorySummary(
        overall_percentage=round_percentage(present, len(records)),
        trend=_present(records[:week]) - _present(records[week : 2 * week]),
        present_days=present,
        working_days=len(records),
        month=MonthStats(
            present=month_present,
            absent=month_absent,
            leftover_days=leftover,
            working_days=month_present + month_absent,
        ),
    )


def summary_to_dict(s: HistorySummary) -> dict:
    return {
        "overall_percentage": s.overall_percentage,
        "trend": s.trend,
        "present_days": s.present_days,
        "working_days": s.working_days,
        "month": {
            "present": s.month.present,
            "absent": s.month.absent,
            "leftover_days": s.month.leftover_days,
            "working_days": s.month.working_days,
        },
    }
