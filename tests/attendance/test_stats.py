from datetime import date, time

import pytest

from src.mira_attendance.mira_attendance.attendance.model import AttendanceRecord
from src.mira_attendance.mira_attendance.attendance.stats import StatsAggregator, round_percentage
from src.mira_attendance.mira_attendance.users.repository import InMemoryUserDirectory

DAY = date(2026, 3, 10)


@pytest.mark.parametrize(
    "part, whole, expected",
    [(0, 0, 0), (0, 10, 0), (1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (10, 10, 100)],
)
def test_round_percentage(part, whole, expected):
    assert round_percentage(part, whole) == expected


def test_daily_stats_counts_students_only(ledger, directory, faculty):
    ledger.mark_present("stud-ec-001", DAY, time(9, 0))
    ledger.mark_present(faculty.user_id, DAY, time(8, 30))
    ledger.mark_present("stud-ec-002", date(2026, 3, 9), time(9, 0))

    stats = StatsAggregator(ledger, directory).daily_stats(DAY)

    assert stats.total_students == 3
    assert stats.present_count == 1
    assert stats.absent_count == 2
    assert stats.present_percentage == 33
    assert stats.present_count + stats.absent_count == stats.total_students


def test_absent_records_do_not_count_as_present(ledger, attendance_repo, directory):
    attendance_repo.append(AttendanceRecord.absent(user_id="stud-ec-003", work_date=DAY))
    ledger.mark_present("stud-ec-001", DAY, time(9, 0))

    stats = StatsAggregator(ledger, directory).daily_stats(DAY)

    assert stats.present_count == 1
    assert stats.absent_count == 2


def test_stats_reflect_new_writes_immediately(ledger, directory):
    aggregator = StatsAggregator(ledger, directory)
    assert aggregator.daily_stats(DAY).present_count == 0

    ledger.mark_present("stud-ec-002", DAY, time(9, 0))

    assert aggregator.daily_stats(DAY).present_count == 1


def test_empty_roster_gives_zero_percentage(ledger):
    stats = StatsAggregator(ledger, InMemoryUserDirectory()).daily_stats(DAY)

    assert stats.total_students == 0
    assert stats.present_percentage == 0
