from __future__ import annotations

from ..attendance.model import AttendanceRecord
from ..users.model import User

SIGNATURE = "Mira Attendance System"


def _time(record: AttendanceRecord) -> str:
    return record.timestamp.strftime("%H:%M:%S") if record.timestamp else "-"


def student_subject(user: User) -> str:
    return "Your Attendance has been Marked"


def parent_subject(user: User) -> str:
    return f"Attendance Marked for {user.name}"


def presence_body(user: User, record: AttendanceRecord) -> str:
    if record.location:
        location = f"{record.location.status.value} ({record.location.coordinates or 'not captured'})"
    else:
        location = "not captured"
    return (
        "Dear Parent/Student,\n\n"
        f"This is to inform you that attendance for {user.name} (PIN: {user.pin}) "
        "has been marked as PRESENT.\n\n"
        f"Timestamp: {_time(record)}\n"
        f"Location Status: {location}\n\n"
        f"Regards,\n{SIGNATURE}"
    )


def messaging_text(user: User, record: AttendanceRecord) -> str:
    return f"Attendance for {user.name} (PIN: {user.pin}) has been marked PRESENT at {_time(record)}."
