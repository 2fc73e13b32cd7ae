from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import AttendanceStatus, LocationStatus


def record_id_for(user_id: str, work_date: date) -> str:
    """The record id is derived from the natural key (user_id, work_date)."""
    return f"{user_id}-{work_date.strftime('%Y-%m-%d')}"


@dataclass(frozen=True)
class LocationStamp:
    status: LocationStatus
    coordinates: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (user_id, work_date)."""

    record_id: str
    user_id: str
    work_date: date
    status: AttendanceStatus
    timestamp: Optional[time] = None
    location: Optional[LocationStamp] = None

    @property
    def key(self) -> tuple[str, date]:
        return self.user_id, self.work_date

    @classmethod
    def present(
        cls,
        *,
        user_id: str,
        work_date: date,
        timestamp: time,
        location: Optional[LocationStamp] = None,
    ) -> "AttendanceRecord":
        return cls(
            record_id=record_id_for(user_id, work_date),
            user_id=user_id,
            work_date=work_date,
            status=AttendanceStatus.PRESENT,
            timestamp=timestamp.replace(microsecond=0),
            location=location,
        )

    @classmethod
    def absent(cls, *, user_id: str, work_date: date) -> "AttendanceRecord":
        """Only used by the history backfill; the pipeline never stores absences."""
        return cls(
            record_id=record_id_for(user_id, work_date),
            user_id=user_id,
            work_date=work_date,
            status=AttendanceStatus.ABSENT,
        )


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "id": r.record_id,
        "user_id": r.user_id,
        "date": r.work_date.strftime("%Y-%m-%d"),
        "status": r.status.value,
        "timestamp": r.timestamp.strftime("%H:%M:%S") if r.timestamp else None,
        "location": (
            {"status": r.location.status.value, "coordinates": r.location.coordinates}
            if r.location
            else None
        ),
    }
