"""Example: one capture session driven without Flask.

Uses the in-memory demo roster and a virtual clock, so it runs instantly:
the student is resolved, the capture phases are advanced, and the result
screen data is printed.
"""

import importlib

from src.mira_attendance.mira_attendance.attendance.geofence import GeoCoordinate
from src.mira_attendance.mira_attendance.capture.devices import FixedGeolocation, NullCamera
from src.mira_attendance.mira_attendance.capture.session import CaptureSession
from src.mira_attendance.mira_attendance.common.scheduler import ManualScheduler
from src.mira_attendance.mira_attendance.container import build_container
from src.mira_attendance.mira_attendance.users.model import PinQuery


def main():
    settings = importlib.import_module("config.testing")
    container = build_container(settings)

    student = container.resolvers.get("example").resolve(PinQuery("23210", "EC", "001"))
    print("Resolved:", student.name, student.pin)

    scheduler = ManualScheduler()
    session = CaptureSession(
        student,
        camera=NullCamera(),
        geolocation=FixedGeolocation(GeoCoordinate(18.4551, 79.5218)),
        pipeline=container.pipeline,
        scheduler=scheduler,
        alignment_delay=2.5,
        liveness_delay=2.0,
    )
    session.start()
    scheduler.advance(2.5)
    print("Phase:", session.phase.value)
    scheduler.advance(2.0)
    print("Phase:", session.phase.value)

    outcome = session.state.outcome
    print("Record:", outcome.record)
    print("Today:", outcome.stats)
    print("Summary:", outcome.summary)

    session.close()
    container.shutdown()


if __name__ == "__main__":
    main()
