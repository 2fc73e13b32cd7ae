from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.responses import error_response, ok
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from .history import summarize_history, summary_to_dict
from .model import record_to_dict
from .stats import stats_to_dict


def _date_or_today(value, today):
    if not value:
        return today
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats():
        try:
            work_date = _date_or_today(request.args.get("date"), container.clock().date())
            return ok(stats_to_dict(container.stats.daily_stats(work_date)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/users/<user_id>/history", methods=["GET"], endpoint="attendance_history")
    def attendance_history(user_id: str):
        try:
            if container.users_repo.get_by_id(user_id) is None:
                raise NotFoundError("User not found")
            history = container.ledger.query_history(user_id)
            summary = summarize_history(history, container.clock().date())
            return ok(
                {
                    "records": [record_to_dict(r) for r in history],
                    "summary": summary_to_dict(summary),
                }
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/dates/<day>", methods=["GET"], endpoint="attendance_by_date")
    def attendance_by_date(day: str):
        """Roster of the day: every student with their record, absent when none."""
        try:
            work_date = _date_or_today(day, container.clock().date())
            by_user = {r.user_id: r for r in container.ledger.query_by_date(work_date)}
            roster = []
            for student in container.users_repo.list_by_role(Role.STUDENT):
                record = by_user.get(student.user_id)
                roster.append(
                    {
                        "user_id": student.user_id,
                        "pin": student.pin,
                        "name": student.name,
                        "status": record.status.value if record else AttendanceStatus.ABSENT.value,
                        "record": record_to_dict(record) if record else None,
                    }
                )
            roster.sort(key=lambda row: row["pin"])
            return ok(roster, date=work_date.strftime("%Y-%m-%d"))
        except Exception as e:
            return error_response(e)
