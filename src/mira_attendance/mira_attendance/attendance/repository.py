from __future__ import annotations

import threading
from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Append-only store keyed by (user_id, work_date)."""

    def read(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def append(self, record: AttendanceRecord) -> bool:
        """Insert the record. Returns False when the key already exists."""

        raise NotImplementedError

    def query(
        self,
        *,
        user_id: Optional[str] = None,
        work_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Filtered by user, by date, both or neither (roster wide)."""

        raise NotImplementedError


class InMemoryAttendanceRepository(AttendanceRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: dict[tuple[str, date], AttendanceRecord] = {}

    def read(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._by_key.get((user_id, work_date))

    def append(self, record: AttendanceRecord) -> bool:
        with self._lock:
            if record.key in self._by_key:
                return False
            self._by_key[record.key] = record
            return True

    def query(self, *, user_id: Optional[str] = None, work_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = list(self._by_key.values())
        if user_id is not None:
            items = [r for r in items if r.user_id == user_id]
        if work_date is not None:
            items = [r for r in items if r.work_date == work_date]
        return items
