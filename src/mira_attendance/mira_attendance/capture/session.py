from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Optional

from ..attendance.history import summary_to_dict
from ..attendance.model import record_to_dict
from ..attendance.stats import stats_to_dict
from ..common.scheduler import Scheduler, TimerHandle
from ..core.constants import ALIGNMENT_DELAY_SECONDS, LIVENESS_DELAY_SECONDS, NOTIFY_JOIN_SECONDS
from ..core.enums import CapturePhase
from ..core.exceptions import DeviceError, InvalidTransition, PersistenceError
from ..notifications.dispatcher import DispatchBatch
from ..users.model import User, user_to_dict
from .devices import CameraDevice, CameraStream, GeolocationProvider
from .pipeline import AttendancePipeline, CaptureOutcome
from .state_machine import (
    PHASE_MESSAGES,
    REASON_INTERNAL,
    AlignmentDone,
    CameraDenied,
    CameraReady,
    Cancel,
    CaptureEvent,
    CaptureState,
    CommitFailed,
    Committed,
    Failed,
    Idle,
    LivenessDone,
    Reset,
    Result,
    is_capturing,
    transition,
)

logger = logging.getLogger(__name__)


class CaptureSession:
    """One attendance attempt for one student.

    Drives the side effects (camera, timers, verifying pipeline) around the
    pure `transition` function. Cancelling or resetting bumps an epoch so
    that a timer or commit finishing afterwards cannot move the state.
    """

    def __init__(
        self,
        student: User,
        *,
        camera: CameraDevice,
        geolocation: GeolocationProvider,
        pipeline: AttendancePipeline,
        scheduler: Scheduler,
        alignment_delay: float = ALIGNMENT_DELAY_SECONDS,
        liveness_delay: float = LIVENESS_DELAY_SECONDS,
        session_id: Optional[str] = None,
        on_settle: Optional[Callable[["CaptureSession"], None]] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.student = student
        self.geolocation = geolocation
        self._camera = camera
        self._pipeline = pipeline
        self._scheduler = scheduler
        self._alignment_delay = float(alignment_delay)
        self._liveness_delay = float(liveness_delay)
        self._on_settle = on_settle

        self._lock = threading.Lock()
        self._state: CaptureState = Idle()
        self._epoch = 0
        self._stream: Optional[CameraStream] = None
        self._timer: Optional[TimerHandle] = None
        self._batches: list[DispatchBatch] = []

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def phase(self) -> CapturePhase:
        return self._state.phase

    @property
    def camera_active(self) -> bool:
        return self._stream is not None and self._stream.active

    def start(self) -> CaptureState:
        with self._lock:
            if not isinstance(self._state, Idle):
                raise InvalidTransition(f"Cannot start from phase {self.phase.value}")
            try:
                stream = self._camera.acquire()
            except DeviceError as e:
                logger.warning("Session %s: camera unavailable: %s", self.session_id, e)
                self._apply(CameraDenied(message=str(e), student=self.student))
                return self._state

            self._stream = stream
            self._apply(CameraReady(student=self.student))
            self._schedule(self._alignment_delay, self._on_alignment_done)
            return self._state

    def cancel(self) -> CaptureState:
        """Stop the camera and drop pending timers. No-op outside capturing phases."""
        with self._lock:
            if not is_capturing(self._state):
                return self._state
            self._halt()
            self._apply(Cancel())
            state = self._state
        self._settled()
        return state

    def reset(self) -> CaptureState:
        with self._lock:
            self._halt()
            self._apply(Reset())
            return self._state

    def close(self, *, timeout: float = NOTIFY_JOIN_SECONDS) -> None:
        """Cancel if still capturing and wait for notification dispatch."""
        self.cancel()
        for batch in list(self._batches):
            outcomes = batch.wait(timeout)
            failed = [o for o in outcomes if not o.ok]
            logger.info(
                "Session %s: %d/%d notifications delivered",
                self.session_id,
                len(outcomes) - len(failed),
                len(batch),
            )

    # --- internals (called with self._lock held unless noted) ---

    def _apply(self, event: CaptureEvent) -> None:
        before = self._state.phase
        self._state = transition(self._state, event)
        logger.debug("Session %s: %s -> %s", self.session_id, before.value, self._state.phase.value)

    def _halt(self) -> None:
        self._epoch += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._stop_camera()

    def _stop_camera(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None

    def _schedule(self, delay: float, callback: Callable[[int], None]) -> None:
        epoch = self._epoch
        self._timer = self._scheduler.call_later(delay, lambda: callback(epoch))

    def _on_alignment_done(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch:
                return
            self._timer = None
            self._apply(AlignmentDone())
            self._schedule(self._liveness_delay, self._on_liveness_done)

    def _on_liveness_done(self, epoch: int) -> None:
        with self._lock:
            if epoch != self._epoch:
                return
            self._timer = None
            self._apply(LivenessDone())
        # Runs without the lock: geolocation may wait, and cancel() must stay immediate.
        self._verify(epoch)

    def _verify(self, epoch: int) -> None:
        try:
            outcome = self._pipeline.commit(
                self.student,
                self.geolocation,
                proceed=lambda: epoch == self._epoch,
            )
        except PersistenceError as e:
            logger.error("Session %s: attendance commit failed: %s", self.session_id, e)
            self._fail_commit(epoch, CommitFailed(message=str(e)))
            return
        except Exception as e:
            # Escaping here would leave the session stuck in Verifying.
            logger.exception("Session %s: verification crashed", self.session_id)
            self._fail_commit(epoch, CommitFailed(message=f"Verification failed: {e}", reason=REASON_INTERNAL))
            return

        if outcome is None:
            return

        with self._lock:
            self._batches.append(outcome.notifications)
            if epoch != self._epoch:
                logger.info("Session %s: cancelled after commit, record kept", self.session_id)
                return
            self._stop_camera()
            self._apply(Committed(outcome=outcome))
        self._settled()

    def _fail_commit(self, epoch: int, event: CommitFailed) -> None:
        with self._lock:
            if epoch != self._epoch:
                return
            self._stop_camera()
            self._apply(event)

    def _settled(self) -> None:
        # Called without the lock; the callback may close or discard this session.
        if self._on_settle is not None:
            self._on_settle(self)


def outcome_to_dict(outcome: CaptureOutcome) -> dict:
    return {
        "record": record_to_dict(outcome.record),
        "history": [record_to_dict(r) for r in outcome.history],
        "summary": summary_to_dict(outcome.summary),
        "stats": stats_to_dict(outcome.stats),
        "warning": outcome.warning,
        "distance_km": round(outcome.distance_km, 3) if outcome.distance_km is not None else None,
        "notifications_queued": len(outcome.notifications),
    }


def session_to_dict(session: CaptureSession) -> dict:
    state = session.state
    student = getattr(state, "student", None) or session.student
    body = {
        "id": session.session_id,
        "phase": state.phase.value,
        "message": PHASE_MESSAGES.get(state.phase),
        "camera_active": session.camera_active,
        "student": user_to_dict(student),
        "error": None,
        "result": None,
    }
    if isinstance(state, Failed):
        body["error"] = {"reason": state.reason, "message": state.message}
    elif isinstance(state, Result):
        body["result"] = outcome_to_dict(state.outcome)
    return body
