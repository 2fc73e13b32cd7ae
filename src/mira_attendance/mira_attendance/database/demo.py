"""Demo roster and synthetic attendance history.

Used by `scripts/seed_db.py` and by the in-memory storage mode. History is
backfilled for the previous days only; today is left for live captures.
"""

from __future__ import annotations

import random
import re
from datetime import date, timedelta
from typing import Iterator, Sequence

from ..attendance.model import AttendanceRecord, record_id_for
from ..core.enums import AttendanceStatus, Branch, Role
from ..users.model import User

BACKFILL_DAYS = 90
PRESENT_RATE = 0.8

_STAFF = [
    ("princ_01", "P. JANAKI DEVI", Role.PRINCIPAL, "ADMIN"),
    ("hod_01", "Dr. S.N PADMAVATHI", Role.HOD, Branch.CS.value),
    ("hod_02", "Dr. CH. VIDYA SAGAR", Role.HOD, Branch.EC.value),
    ("fac_01", "ARCOT VIDYA SAGAR", Role.FACULTY, Branch.CS.value),
    ("fac_02", "J.ANAND KUMAR", Role.FACULTY, Branch.EC.value),
    ("staff_01", "G.VENKAT REDDY", Role.STAFF, "Library"),
]

_STUDENTS = [
    ("23210-EC-001", "KUMMARI VAISHNAVI"),
    ("23210-EC-002", "BAKAM CHANDU"),
    ("23210-EC-003", "TEKMAL MANIPRASAD"),
    ("23210-EC-004", "BATTA VENU"),
    ("23210-EC-005", "KAMMARI UDAY TEJA"),
    ("23210-EC-006", "BONGULURU VISHNU VARDHAN"),
    ("23210-EC-007", "JANGAM PRIYANKA"),
    ("23210-EC-008", "SUBEDAR ANISH"),
    ("23210-EC-009", "ARROLLA KAVYA"),
    ("23210-EC-010", "BANOTHU NARENDER"),
]

_PHONES = {"23210-EC-001": "919347856661", "23210-EC-002": "919347856661"}
_PIN_PREFIX = {Role.PRINCIPAL: "PRI", Role.HOD: "HOD", Role.FACULTY: "FAC", Role.STAFF: "STF"}


def _avatar(name: str) -> str:
    return f"https://api.dicebear.com/8.x/initials/svg?seed={name.replace(' ', '%20')}"


def _email_local(name: str) -> str:
    return re.sub(r"\.+", ".", re.sub(r"[^a-z0-9]", ".", name.lower()))


def demo_users(*, seed: int = 7) -> list[User]:
    rng = random.Random(seed)
    users: list[User] = []

    for user_id, name, role, branch in _STAFF:
        users.append(
            User(
                user_id=user_id,
                pin=f"{_PIN_PREFIX[role]}-{user_id.split('_')[1]}",
                name=name,
                role=role,
                branch=branch,
                email=f"{_email_local(name)}@mira.edu",
                email_verified=True,
                image_url=_avatar(name),
            )
        )

    for pin, name in _STUDENTS:
        _, branch, roll = pin.split("-")
        users.append(
            User(
                user_id=f"stud-{branch.lower()}-{roll}",
                pin=pin,
                name=name,
                role=Role.STUDENT,
                branch=branch,
                year=1,
                email=f"{_email_local(name)}@mira.edu",
                email_verified=rng.random() > 0.2,
                parent_email=f"parent.{re.sub(r'[^a-z0-9]', '', name.lower())}@email.com",
                parent_email_verified=rng.random() > 0.5,
                phone_number=_PHONES.get(pin),
                image_url=_avatar(name),
            )
        )
    return users


def backfill_history(
    users: Sequence[User],
    today: date,
    *,
    days: int = BACKFILL_DAYS,
    seed: int = 11,
) -> Iterator[AttendanceRecord]:
    """Synthetic Present/Absent history for students and faculty, excluding today."""
    rng = random.Random(seed)
    for user in users:
        if user.role not in (Role.STUDENT, Role.FACULTY):
            continue
        for offset in range(1, days + 1):
            work_date = today - timedelta(days=offset)
            status = AttendanceStatus.PRESENT if rng.random() < PRESENT_RATE else AttendanceStatus.ABSENT
            yield AttendanceRecord(
                record_id=record_id_for(user.user_id, work_date),
                user_id=user.user_id,
                work_date=work_date,
                status=status,
            )
