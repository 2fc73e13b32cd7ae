"""Capture flow as an explicit tagged-variant state machine.

    Idle -> Aligning -> Liveness -> Verifying -> Result
      \\________________________________________/-> Failed

`transition` is pure: it never touches devices or timers. `CaptureSession`
performs the side effects and feeds events into it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Optional, Union

from ..core.enums import CapturePhase
from ..core.exceptions import InvalidTransition
from ..users.model import User

if TYPE_CHECKING:
    from .pipeline import CaptureOutcome

REASON_DEVICE = "device"
REASON_PERSISTENCE = "persistence"
REASON_INTERNAL = "internal"


PHASE_MESSAGES = {
    CapturePhase.ALIGNING: "Align your face in the circle.",
    CapturePhase.LIVENESS: "Great! Now, blink your eyes.",
    CapturePhase.VERIFYING: "Verifying, please hold on...",
}


# --- states ---


@dataclass(frozen=True)
class Idle:
    phase: ClassVar[CapturePhase] = CapturePhase.IDLE


@dataclass(frozen=True)
class Aligning:
    student: User
    phase: ClassVar[CapturePhase] = CapturePhase.ALIGNING


@dataclass(frozen=True)
class Liveness:
    student: User
    phase: ClassVar[CapturePhase] = CapturePhase.LIVENESS


@dataclass(frozen=True)
class Verifying:
    student: User
    phase: ClassVar[CapturePhase] = CapturePhase.VERIFYING


@dataclass(frozen=True)
class Result:
    student: User
    outcome: "CaptureOutcome"
    phase: ClassVar[CapturePhase] = CapturePhase.RESULT


@dataclass(frozen=True)
class Failed:
    """Terminal until reset."""

    reason: str
    message: str
    student: Optional[User] = None
    phase: ClassVar[CapturePhase] = CapturePhase.ERROR


CaptureState = Union[Idle, Aligning, Liveness, Verifying, Result, Failed]
CAPTURING = (Aligning, Liveness, Verifying)


def is_capturing(state: CaptureState) -> bool:
    return isinstance(state, CAPTURING)


# --- events ---


@dataclass(frozen=True)
class CameraReady:
    student: User


@dataclass(frozen=True)
class CameraDenied:
    message: str
    student: Optional[User] = None


@dataclass(frozen=True)
class AlignmentDone:
    pass


@dataclass(frozen=True)
class LivenessDone:
    pass


@dataclass(frozen=True)
class Committed:
    outcome: "CaptureOutcome"


@dataclass(frozen=True)
class CommitFailed:
    message: str
    reason: str = REASON_PERSISTENCE


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Reset:
    pass


CaptureEvent = Union[CameraReady, CameraDenied, AlignmentDone, LivenessDone, Committed, CommitFailed, Cancel, Reset]

def transition(state: CaptureState, event: CaptureEvent) -> CaptureState:
    if isinstance(event, Reset):
        return Idle()

    if isinstance(event, Cancel) and is_capturing(state):
        return Idle()

    if isinstance(state, Idle):
        if isinstance(event, CameraReady):
            return Aligning(student=event.student)
        if isinstance(event, CameraDenied):
            return Failed(reason=REASON_DEVICE, message=event.message, student=event.student)

    elif isinstance(state, Aligning):
        if isinstance(event, AlignmentDone):
            return Liveness(student=state.student)

    elif isinstance(state, Liveness):
        if isinstance(event, LivenessDone):
            return Verifying(student=state.student)

    elif isinstance(state, Verifying):
        if isinstance(event, Committed):
            return Result(student=state.student, outcome=event.outcome)
        if isinstance(event, CommitFailed):
            return Failed(reason=event.reason, message=event.message, student=state.student)

    raise InvalidTransition(f"{type(event).__name__} is not allowed in phase {state.phase.value}")
