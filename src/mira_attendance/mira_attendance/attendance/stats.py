from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from ..core.enums import AttendanceStatus, Role
from ..users.repository import UserDirectory
from .ledger import AttendanceLedger


@dataclass(frozen=True)
class DailyStats:
    work_date: date
    total_students: int
    present_count: int
    absent_count: int
    present_percentage: int


def round_percentage(part: int, whole: int) -> int:
    """Percentage rounded half up; 0 for an empty whole."""
    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


class StatsAggregator:
    """Daily roll-up over the student roster.

    Always recomputed from the ledger, never cached: any capture session may
    have written since the last call.
    """

    def __init__(self, ledger: AttendanceLedger, users: UserDirectory):
        self._ledger = ledger
        self._users = users

    def daily_stats(self, work_date: date) -> DailyStats:
        student_ids = {u.user_id for u in self._users.list_by_role(Role.STUDENT)}
        present_ids = {
            r.user_id
            for r in self._ledger.query_by_date(work_date)
            if r.status == AttendanceStatus.PRESENT and r.user_id in student_ids
        }

        total = len(student_ids)
        present = len(present_ids)
        return DailyStats(
            work_date=work_date,
            total_students=total,
            present_count=present,
            absent_count=total - present,
            present_percentage=round_percentage(present, total),
        )


def stats_to_dict(s: DailyStats) -> dict:
    return {
        "date": s.work_date.strftime("%Y-%m-%d"),
        "total_students": s.total_students,
        "present_count": s.present_count,
        "absent_count": s.absent_count,
        "present_percentage": s.present_percentage,
    }
