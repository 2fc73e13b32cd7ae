import importlib

import pytest

from src.mira_attendance.mira_attendance.capture.devices import NullCamera
from src.mira_attendance.mira_attendance.common.scheduler import ManualScheduler
from src.mira_attendance.mira_attendance.container import build_container
from src.mira_attendance.mira_attendance.core.exceptions import DeviceError
from src.mira_attendance.mira_attendance.main import create_app


class SwitchableCamera:
    def __init__(self):
        self.fail = False

    def acquire(self):
        if self.fail:
            raise DeviceError("Camera access denied.")
        return NullCamera().acquire()


@pytest.fixture
def kiosk(monkeypatch, fixed_now):
    monkeypatch.setenv("APP_ENV", "testing")
    settings = importlib.import_module("config.testing")
    scheduler = ManualScheduler()
    camera = SwitchableCamera()
    container = build_container(settings, camera=camera, scheduler=scheduler, clock=lambda: fixed_now)
    app = create_app(container=container)
    yield app.test_client(), scheduler, camera
    container.shutdown()


def _open(client, roll="001"):
    return client.post("/api/capture/sessions", json={"branch": "EC", "roll": roll})


def test_resolve_student(kiosk):
    client, _, _ = kiosk

    partial = client.get("/api/students/resolve?branch=EC&roll=00").get_json()
    full = client.get("/api/students/resolve?branch=ec&roll=001").get_json()
    missing = client.get("/api/students/resolve?branch=EC&roll=999").get_json()

    assert partial["data"] is None
    assert full["data"]["name"] == "KUMMARI VAISHNAVI"
    assert full["pin"] == "23210-EC-001"
    assert missing["success"] is True
    assert missing["data"] is None


def test_resolve_echoes_the_normalized_pin(kiosk):
    client, _, _ = kiosk

    body = client.get("/api/students/resolve?branch=%20ec%20&roll=0a01").get_json()

    assert body["pin"] == "23210-EC-001"
    assert body["data"]["pin"] == "23210-EC-001"


def test_kiosk_identifier_feed(kiosk):
    client, _, _ = kiosk

    client.post("/api/kiosks/gate-1/identifier", json={"branch": "EC", "roll": "0"})
    body = client.post("/api/kiosks/gate-1/identifier", json={"roll": "002"}).get_json()

    assert body["data"]["pin"] == "23210-EC-002"
    assert body["stale"] is False

    body = client.post("/api/kiosks/gate-1/identifier", json={"branch": "CS", "roll": ""}).get_json()
    assert body["pin"] == "23210-CS-"
    assert body["data"] is None


def test_capture_flow_over_http(kiosk, fixed_now):
    client, scheduler, _ = kiosk

    opened = _open(client)
    assert opened.status_code == 201
    session = opened.get_json()["data"]
    assert session["phase"] == "aligning"

    located = client.post(
        f"/api/capture/sessions/{session['id']}/location",
        json={"latitude": 18.4551, "longitude": 79.5218},
    )
    assert located.status_code == 200

    scheduler.advance(1)
    body = client.get(f"/api/capture/sessions/{session['id']}").get_json()["data"]

    assert body["phase"] == "result"
    assert body["result"]["record"]["status"] == "Present"
    assert body["result"]["record"]["location"]["status"] == "On-Campus"
    assert body["result"]["stats"]["present_count"] == 1

    stats = client.get("/api/attendance/stats?date=2026-03-10").get_json()["data"]
    assert stats == {
        "date": "2026-03-10",
        "total_students": 10,
        "present_count": 1,
        "absent_count": 9,
        "present_percentage": 10,
    }

    history = client.get("/api/attendance/users/stud-ec-001/history").get_json()["data"]
    assert history["records"][0]["date"] == "2026-03-10"
    assert history["summary"]["working_days"] == len(history["records"])

    roster = client.get("/api/attendance/dates/2026-03-10").get_json()["data"]
    assert [row["status"] for row in roster if row["pin"] == "23210-EC-001"] == ["Present"]
    assert sum(1 for row in roster if row["status"] == "Absent") == 9

    assert client.delete(f"/api/capture/sessions/{session['id']}").status_code == 200
    assert client.get(f"/api/capture/sessions/{session['id']}").status_code == 404


def test_location_error_is_reported_as_warning(kiosk):
    client, scheduler, _ = kiosk
    session = _open(client, "003").get_json()["data"]

    client.post(f"/api/capture/sessions/{session['id']}/location", json={"error": "denied"})
    scheduler.advance(1)
    result = client.get(f"/api/capture/sessions/{session['id']}").get_json()["data"]["result"]

    assert result["record"]["location"] == {"status": "Off-Campus", "coordinates": None}
    assert result["warning"].startswith("Location access was denied")


def test_unknown_student_is_404(kiosk):
    client, _, _ = kiosk

    response = _open(client, "999")

    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_missing_fields_are_400(kiosk):
    client, _, _ = kiosk

    assert client.post("/api/capture/sessions", json={"roll": "001"}).status_code == 400
    assert client.get("/api/attendance/stats?date=10-03-2026").status_code == 400


def test_bad_coordinates_are_400(kiosk):
    client, _, _ = kiosk
    session = _open(client).get_json()["data"]

    url = f"/api/capture/sessions/{session['id']}/location"

    assert client.post(url, json={"latitude": "north"}).status_code == 400
    assert client.post(url, json={"latitude": "nan", "longitude": "1"}).status_code == 400
    assert client.post(url, json={"latitude": "95", "longitude": "79.5"}).status_code == 400
    assert client.post(url, json={"latitude": "18.45", "longitude": "-200"}).status_code == 400


def test_camera_failure_then_retry(kiosk):
    client, scheduler, camera = kiosk
    camera.fail = True

    denied = _open(client)
    assert denied.status_code == 409
    session = denied.get_json()["data"]
    assert session["phase"] == "error"
    assert session["error"]["reason"] == "device"

    camera.fail = False
    retried = client.post(f"/api/capture/sessions/{session['id']}/retry")
    assert retried.status_code == 200
    assert retried.get_json()["data"]["phase"] == "aligning"


def test_cancel_then_reset(kiosk, fixed_now):
    client, scheduler, _ = kiosk
    session = _open(client).get_json()["data"]

    cancelled = client.post(f"/api/capture/sessions/{session['id']}/cancel").get_json()["data"]
    scheduler.advance(1)

    assert cancelled["phase"] == "idle"
    assert cancelled["camera_active"] is False
    assert client.get("/api/attendance/stats?date=2026-03-10").get_json()["data"]["present_count"] == 0
    assert client.post(f"/api/capture/sessions/{session['id']}/reset").get_json()["data"]["phase"] == "idle"


def test_unknown_user_history_is_404(kiosk):
    client, _, _ = kiosk

    assert client.get("/api/attendance/users/nobody/history").status_code == 404
