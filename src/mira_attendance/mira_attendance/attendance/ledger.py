from __future__ import annotations

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, time
from typing import Iterator, Optional, Sequence

from ..core.exceptions import PersistenceError
from .model import AttendanceRecord, LocationStamp
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _most_recent_first(r: AttendanceRecord):
    return r.work_date, r.timestamp or time.min


class AttendanceLedger:
    """At most one record per (user_id, work_date); writes are idempotent.

    The ledger is the only shared mutable resource between capture sessions.
    Check-then-write is serialized per key so two sessions for the same
    student and day end up with a single stored record.
    """

    def __init__(self, repository: AttendanceRepository):
        self._repo = repository
        self._guard = threading.Lock()
        self._key_locks: dict[tuple[str, date], threading.Lock] = defaultdict(threading.Lock)
        self._key_users: dict[tuple[str, date], int] = defaultdict(int)

    @contextmanager
    def _locked(self, key: tuple[str, date]) -> Iterator[None]:
        with self._guard:
            lock = self._key_locks[key]
            self._key_users[key] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._key_users[key] -= 1
                if self._key_users[key] == 0:
                    del self._key_users[key]
                    del self._key_locks[key]

    def mark_present(
        self,
        user_id: str,
        work_date: date,
        timestamp: time,
        location: Optional[LocationStamp] = None,
    ) -> AttendanceRecord:
        key = (user_id, work_date)
        with self._locked(key):
            existing = self._repo.read(user_id, work_date)
            if existing:
                logger.info("Attendance already recorded for %s on %s", user_id, work_date)
                return existing

            record = AttendanceRecord.present(
                user_id=user_id,
                work_date=work_date,
                timestamp=timestamp,
                location=location,
            )
            if not self._repo.append(record):
                # Lost a race against a writer outside this process.
                stored = self._repo.read(user_id, work_date)
                if stored is None:
                    raise PersistenceError(f"Attendance for {user_id} on {work_date} was neither stored nor found")
                return stored

            logger.info(
                "Marked %s present on %s at %s (%s)",
                user_id,
                work_date,
                record.timestamp,
                record.location.status.value if record.location else "no location",
            )
            return record

    def get(self, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._repo.read(user_id, work_date)

    def query_history(self, user_id: str) -> Sequence[AttendanceRecord]:
        records = list(self._repo.query(user_id=user_id))
        records.sort(key=_most_recent_first, reverse=True)
        return records

    def query_by_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        return list(self._repo.query(work_date=work_date))
