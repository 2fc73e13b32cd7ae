from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Campus roles. Only STUDENT counts towards the daily roster."""

    PRINCIPAL = "PRINCIPAL"
    HOD = "HOD"
    FACULTY = "FACULTY"
    STAFF = "STAFF"
    STUDENT = "STUDENT"


class Branch(str, Enum):
    CS = "CS"
    EC = "EC"
    CE = "CE"
    EEE = "EEE"
    MECH = "MECH"
    IT = "IT"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the ledger."""

    PRESENT = "Present"
    ABSENT = "Absent"


class LocationStatus(str, Enum):
    ON_CAMPUS = "On-Campus"
    OFF_CAMPUS = "Off-Campus"


class CapturePhase(str, Enum):
    IDLE = "idle"
    ALIGNING = "aligning"
    LIVENESS = "liveness"
    VERIFYING = "verifying"
    RESULT = "result"
    ERROR = "error"


class LocationErrorKind(str, Enum):
    PERMISSION_DENIED = "denied"
    POSITION_UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"
