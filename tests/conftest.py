from __future__ import annotations

import threading
from datetime import datetime

import pytest

from src.mira_attendance.mira_attendance.attendance.geofence import Campus
from src.mira_attendance.mira_attendance.attendance.ledger import AttendanceLedger
from src.mira_attendance.mira_attendance.attendance.repository import InMemoryAttendanceRepository
from src.mira_attendance.mira_attendance.attendance.stats import StatsAggregator
from src.mira_attendance.mira_attendance.capture.devices import CAMERA_DENIED_MESSAGE
from src.mira_attendance.mira_attendance.capture.pipeline import AttendancePipeline
from src.mira_attendance.mira_attendance.capture.session import CaptureSession
from src.mira_attendance.mira_attendance.common.scheduler import ManualScheduler
from src.mira_attendance.mira_attendance.core.enums import Role
from src.mira_attendance.mira_attendance.core.exceptions import DeviceError, NotificationError
from src.mira_attendance.mira_attendance.notifications.dispatcher import NotificationDispatcher
from src.mira_attendance.mira_attendance.users.model import User
from src.mira_attendance.mira_attendance.users.repository import InMemoryUserDirectory

FIXED_NOW = datetime(2026, 3, 10, 9, 15, 42, 123456)


class FakeStream:
    def __init__(self):
        self.active = True

    def stop(self):
        self.active = False


class FakeCamera:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.streams: list[FakeStream] = []

    def acquire(self):
        if self.fail:
            raise DeviceError(CAMERA_DENIED_MESSAGE)
        stream = FakeStream()
        self.streams.append(stream)
        return stream

    @property
    def active_streams(self):
        return [s for s in self.streams if s.active]


class FakeEmail:
    def __init__(self, *, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def send(self, to, subject, body):
        if to in self.fail_for:
            raise NotificationError(f"mailbox {to} unavailable")
        with self._lock:
            self.sent.append((to, subject, body))


class FakeMessaging:
    recipient = "910000000000"

    def __init__(self, *, error: Exception | None = None):
        self.error = error
        self.sent: list[str] = []

    def send(self, text):
        if self.error is not None:
            raise self.error
        self.sent.append(text)
        return f"https://wa.me/{self.recipient}"


def make_student(roll: str, name: str, **kwargs) -> User:
    defaults = dict(
        user_id=f"stud-ec-{roll}",
        pin=f"23210-EC-{roll}",
        name=name,
        role=Role.STUDENT,
        branch="EC",
        year=1,
        email=f"{name.split()[0].lower()}@mira.edu",
        email_verified=True,
        parent_email=f"parent.{name.split()[0].lower()}@email.com",
        parent_email_verified=True,
    )
    defaults.update(kwargs)
    return User(**defaults)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def students():
    return [
        make_student("001", "KUMMARI VAISHNAVI"),
        make_student("002", "BAKAM CHANDU", parent_email_verified=False),
        make_student("003", "TEKMAL MANIPRASAD", email_verified=False, parent_email=None),
    ]


@pytest.fixture
def faculty():
    return User(
        user_id="fac_02",
        pin="FAC-02",
        name="J.ANAND KUMAR",
        role=Role.FACULTY,
        branch="EC",
        email="j.anand.kumar@mira.edu",
        email_verified=True,
    )


@pytest.fixture
def directory(students, faculty):
    return InMemoryUserDirectory([*students, faculty])


@pytest.fixture
def attendance_repo():
    return InMemoryAttendanceRepository()


@pytest.fixture
def ledger(attendance_repo):
    return AttendanceLedger(attendance_repo)


@pytest.fixture
def camera():
    return FakeCamera()


@pytest.fixture
def email():
    return FakeEmail()


@pytest.fixture
def messaging():
    return FakeMessaging()


@pytest.fixture
def dispatcher(email, messaging):
    d = NotificationDispatcher(email, messaging, max_workers=2)
    yield d
    d.close(wait=True)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def pipeline(ledger, directory, dispatcher, fixed_now):
    return AttendancePipeline(
        ledger,
        StatsAggregator(ledger, directory),
        dispatcher,
        Campus.default(),
        geolocation_timeout=0.01,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def make_session(camera, pipeline, scheduler):
    def _make(student, geolocation, **kwargs):
        kwargs.setdefault("camera", camera)
        kwargs.setdefault("pipeline", pipeline)
        return CaptureSession(
            student,
            geolocation=geolocation,
            scheduler=scheduler,
            alignment_delay=2.5,
            liveness_delay=2.0,
            **kwargs,
        )

    return _make
