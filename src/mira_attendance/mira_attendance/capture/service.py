from __future__ import annotations

import logging
import threading
from typing import Callable

from ..common.scheduler import Scheduler, TimerHandle
from ..core.constants import ALIGNMENT_DELAY_SECONDS, LIVENESS_DELAY_SECONDS, SESSION_RETENTION_SECONDS
from ..core.enums import CapturePhase
from ..core.exceptions import NotFoundError
from ..users.model import User
from .devices import CameraDevice, GeolocationProvider, ReportedGeolocation
from .pipeline import AttendancePipeline
from .session import CaptureSession

logger = logging.getLogger(__name__)

_SETTLED_PHASES = (CapturePhase.RESULT, CapturePhase.IDLE)


class CaptureService:
    """Use case: run capture sessions for resolved students.

    Sessions for different students may run concurrently. A session that
    reaches its result (or is cancelled) is dropped after `retention`
    seconds unless it is retried first; failed sessions stay until retried
    or discarded. Dropping a session joins its notification dispatch.
    """

    def __init__(
        self,
        pipeline: AttendancePipeline,
        *,
        camera: CameraDevice,
        scheduler: Scheduler,
        geolocation_factory: Callable[[], GeolocationProvider] = ReportedGeolocation,
        alignment_delay: float = ALIGNMENT_DELAY_SECONDS,
        liveness_delay: float = LIVENESS_DELAY_SECONDS,
        retention: float = SESSION_RETENTION_SECONDS,
    ):
        self._pipeline = pipeline
        self._camera = camera
        self._scheduler = scheduler
        self._geolocation_factory = geolocation_factory
        self._alignment_delay = float(alignment_delay)
        self._liveness_delay = float(liveness_delay)
        self._retention = float(retention)
        self._lock = threading.Lock()
        self._sessions: dict[str, CaptureSession] = {}
        self._expiry: dict[str, TimerHandle] = {}

    def open_session(self, student: User) -> CaptureSession:
        session = CaptureSession(
            student,
            camera=self._camera,
            geolocation=self._geolocation_factory(),
            pipeline=self._pipeline,
            scheduler=self._scheduler,
            alignment_delay=self._alignment_delay,
            liveness_delay=self._liveness_delay,
            on_settle=self._on_settle,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Session %s opened for %s", session.session_id, student.pin)
        session.start()
        return session

    def get(self, session_id: str) -> CaptureSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("Capture session not found")
        return session

    def cancel(self, session_id: str) -> CaptureSession:
        session = self.get(session_id)
        session.cancel()
        return session

    def retry(self, session_id: str) -> CaptureSession:
        """Reset to idle (camera released) and start again."""
        session = self.reset(session_id)
        session.start()
        return session

    def reset(self, session_id: str) -> CaptureSession:
        session = self.get(session_id)
        self._keep(session_id)
        session.reset()
        # A provider only answers once; the next attempt needs its own.
        session.geolocation = self._geolocation_factory()
        return session

    def discard(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            handle = self._expiry.pop(session_id, None)
        if session is None:
            raise NotFoundError("Capture session not found")
        if handle is not None:
            handle.cancel()
        session.close()
        logger.info("Session %s discarded", session_id)

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def shutdown(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            handles = list(self._expiry.values())
            self._sessions.clear()
            self._expiry.clear()
        for handle in handles:
            handle.cancel()
        for session in sessions:
            session.close()

    def _keep(self, session_id: str) -> None:
        with self._lock:
            handle = self._expiry.pop(session_id, None)
        if handle is not None:
            handle.cancel()

    def _on_settle(self, session: CaptureSession) -> None:
        session_id = session.session_id
        with self._lock:
            if self._sessions.get(session_id) is not session:
                return
            previous = self._expiry.pop(session_id, None)
            self._expiry[session_id] = self._scheduler.call_later(
                self._retention, lambda: self._expire(session)
            )
        if previous is not None:
            previous.cancel()

    def _expire(self, session: CaptureSession) -> None:
        session_id = session.session_id
        with self._lock:
            if self._sessions.get(session_id) is not session or session.phase not in _SETTLED_PHASES:
                return
            del self._sessions[session_id]
            self._expiry.pop(session_id, None)
        session.close()
        logger.info("Session %s expired", session_id)
