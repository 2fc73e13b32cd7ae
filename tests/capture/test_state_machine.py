import pytest

from src.mira_attendance.mira_attendance.capture.state_machine import (
    REASON_DEVICE,
    REASON_PERSISTENCE,
    AlignmentDone,
    Aligning,
    CameraDenied,
    CameraReady,
    Cancel,
    CommitFailed,
    Committed,
    Failed,
    Idle,
    Liveness,
    LivenessDone,
    Reset,
    Result,
    Verifying,
    is_capturing,
    transition,
)
from src.mira_attendance.mira_attendance.core.enums import CapturePhase
from src.mira_attendance.mira_attendance.core.exceptions import InvalidTransition


def test_happy_path(students):
    student = students[0]
    outcome = object()

    state = transition(Idle(), CameraReady(student))
    assert state == Aligning(student)
    state = transition(state, AlignmentDone())
    assert state == Liveness(student)
    state = transition(state, LivenessDone())
    assert state == Verifying(student)
    state = transition(state, Committed(outcome))

    assert isinstance(state, Result)
    assert state.outcome is outcome
    assert state.phase == CapturePhase.RESULT


def test_camera_denied_fails_with_device_reason(students):
    state = transition(Idle(), CameraDenied("denied", students[0]))

    assert state == Failed(reason=REASON_DEVICE, message="denied", student=students[0])
    assert state.phase == CapturePhase.ERROR


def test_commit_failure_fails_with_persistence_reason(students):
    state = transition(Verifying(students[0]), CommitFailed("db down"))

    assert state.reason == REASON_PERSISTENCE


@pytest.mark.parametrize("state_cls", [Aligning, Liveness, Verifying])
def test_cancel_from_capturing_phase_goes_idle(students, state_cls):
    state = state_cls(students[0])

    assert is_capturing(state)
    assert transition(state, Cancel()) == Idle()


@pytest.mark.parametrize(
    "state",
    [Idle(), Failed(reason=REASON_DEVICE, message="x")],
)
def test_cancel_outside_capture_is_rejected(state):
    with pytest.raises(InvalidTransition):
        transition(state, Cancel())


def test_reset_from_anywhere(students):
    states = [
        Idle(),
        Aligning(students[0]),
        Verifying(students[0]),
        Result(students[0], outcome=object()),
        Failed(reason=REASON_DEVICE, message="x"),
    ]
    for state in states:
        assert transition(state, Reset()) == Idle()


@pytest.mark.parametrize(
    "state_factory, event",
    [
        (lambda s: Idle(), AlignmentDone()),
        (lambda s: Aligning(s), LivenessDone()),
        (lambda s: Liveness(s), AlignmentDone()),
        (lambda s: Aligning(s), CameraReady(None)),
        (lambda s: Result(s, outcome=None), Committed(None)),
    ],
)
def test_out_of_order_events_are_rejected(students, state_factory, event):
    with pytest.raises(InvalidTransition):
        transition(state_factory(students[0]), event)
