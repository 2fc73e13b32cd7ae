from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from types import ModuleType
from typing import Callable, Optional

from .attendance.geofence import Campus, GeoCoordinate
from .attendance.ledger import AttendanceLedger
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository, InMemoryAttendanceRepository
from .attendance.stats import StatsAggregator
from .capture.devices import CameraDevice, NullCamera, OpenCVCamera
from .capture.pipeline import AttendancePipeline
from .capture.service import CaptureService
from .common.datetime_utils import now_local
from .common.scheduler import Scheduler, ThreadingScheduler
from .core import constants
from .core.exceptions import ValidationError
from .database.connection import DBConfig, DatabaseConnection
from .database.demo import backfill_history, demo_users
from .notifications.channels import LoggingEmailChannel, WhatsAppLinkChannel
from .notifications.dispatcher import NotificationDispatcher
from .users.mysql_user_repository import MySQLUserDirectory
from .users.repository import InMemoryUserDirectory, UserDirectory
from .users.resolver import ResolverPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserDirectory
    attendance_repo: AttendanceRepository

    campus: Campus
    ledger: AttendanceLedger
    stats: StatsAggregator
    dispatcher: NotificationDispatcher
    pipeline: AttendancePipeline
    resolvers: ResolverPool
    capture_service: CaptureService
    clock: Callable[[], datetime] = now_local

    def shutdown(self) -> None:
        self.capture_service.shutdown()
        self.dispatcher.close(wait=True)


def _setting(settings: ModuleType, name: str):
    return getattr(settings, name, getattr(constants, name, None))


def _build_camera(settings: ModuleType) -> CameraDevice:
    kind = str(getattr(settings, "CAMERA", "null")).lower()
    if kind == "opencv":
        return OpenCVCamera(int(getattr(settings, "CAMERA_INDEX", 0)))
    if kind == "null":
        return NullCamera()
    raise ValidationError(f"Unknown CAMERA setting: {kind!r}")


def _memory_stores(today) -> tuple[UserDirectory, AttendanceRepository]:
    users = demo_users()
    attendance_repo = InMemoryAttendanceRepository()
    for record in backfill_history(users, today):
        attendance_repo.append(record)
    return InMemoryUserDirectory(users), attendance_repo


def build_container(
    settings: ModuleType,
    *,
    camera: Optional[CameraDevice] = None,
    scheduler: Optional[Scheduler] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    storage = str(getattr(settings, "STORAGE", "mysql")).lower()
    conn: Optional[DatabaseConnection] = None

    if storage == "mysql":
        conn = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))
        users_repo: UserDirectory = MySQLUserDirectory(conn)
        attendance_repo: AttendanceRepository = MySQLAttendanceRepository(conn)
    elif storage == "memory":
        users_repo, attendance_repo = _memory_stores(clock().date())
    else:
        raise ValidationError(f"Unknown STORAGE setting: {storage!r}")
    logger.info("Storage backend: %s", storage)

    campus = Campus(
        center=GeoCoordinate(float(_setting(settings, "CAMPUS_LAT")), float(_setting(settings, "CAMPUS_LON"))),
        radius_km=float(_setting(settings, "CAMPUS_RADIUS_KM")),
    )

    ledger = AttendanceLedger(attendance_repo)
    stats = StatsAggregator(ledger, users_repo)
    dispatcher = NotificationDispatcher(
        LoggingEmailChannel(),
        WhatsAppLinkChannel(str(_setting(settings, "OPERATOR_WHATSAPP"))),
        max_workers=int(_setting(settings, "NOTIFY_WORKERS")),
    )
    pipeline = AttendancePipeline(
        ledger,
        stats,
        dispatcher,
        campus,
        geolocation_timeout=float(_setting(settings, "GEOLOCATION_TIMEOUT_SECONDS")),
        clock=clock,
    )
    capture_service = CaptureService(
        pipeline,
        camera=camera or _build_camera(settings),
        scheduler=scheduler or ThreadingScheduler(),
        alignment_delay=float(_setting(settings, "ALIGNMENT_DELAY_SECONDS")),
        liveness_delay=float(_setting(settings, "LIVENESS_DELAY_SECONDS")),
        retention=float(_setting(settings, "SESSION_RETENTION_SECONDS")),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        campus=campus,
        ledger=ledger,
        stats=stats,
        dispatcher=dispatcher,
        pipeline=pipeline,
        resolvers=ResolverPool(users_repo),
        capture_service=capture_service,
        clock=clock,
    )
