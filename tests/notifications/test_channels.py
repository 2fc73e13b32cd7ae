from datetime import date, time

import pytest

from src.mira_attendance.mira_attendance.attendance.model import AttendanceRecord, LocationStamp
from src.mira_attendance.mira_attendance.core.enums import LocationStatus
from src.mira_attendance.mira_attendance.core.exceptions import NotificationError
from src.mira_attendance.mira_attendance.notifications import templates
from src.mira_attendance.mira_attendance.notifications.channels import LoggingEmailChannel, WhatsAppLinkChannel


def test_whatsapp_link_encodes_text_like_a_uri_component():
    channel = WhatsAppLinkChannel("919347856661")

    url = channel.build_url("Hi (A) & B's 100%!")

    assert url == "https://wa.me/919347856661?text=Hi%20(A)%20%26%20B's%20100%25!"


def test_whatsapp_send_hands_link_to_opener():
    opened = []
    channel = WhatsAppLinkChannel("919347856661", opener=opened.append)

    url = channel.send("hello world")

    assert opened == [url]
    assert url.endswith("?text=hello%20world")


def test_email_channel_rejects_invalid_address():
    with pytest.raises(NotificationError):
        LoggingEmailChannel().send("not-an-address", "subject", "body")


def test_email_channel_accepts_valid_address(caplog):
    caplog.set_level("INFO")

    LoggingEmailChannel().send("kummari@mira.edu", "Your Attendance has been Marked", "body")

    assert "kummari@mira.edu" in caplog.text


def test_presence_body_mentions_student_and_location(students):
    student = students[0]
    record = AttendanceRecord.present(
        user_id=student.user_id,
        work_date=date(2026, 3, 10),
        timestamp=time(9, 15, 42),
        location=LocationStamp(LocationStatus.ON_CAMPUS, "18.4551, 79.5218"),
    )

    body = templates.presence_body(student, record)

    assert body.startswith("Dear Parent/Student,")
    assert "KUMMARI VAISHNAVI (PIN: 23210-EC-001)" in body
    assert "Timestamp: 09:15:42" in body
    assert "Location Status: On-Campus (18.4551, 79.5218)" in body
    assert body.endswith("Mira Attendance System")
    assert templates.parent_subject(student) == "Attendance Marked for KUMMARI VAISHNAVI"


def test_presence_body_without_coordinates(students):
    record = AttendanceRecord.present(
        user_id=students[0].user_id,
        work_date=date(2026, 3, 10),
        timestamp=time(9, 15, 42),
        location=LocationStamp(LocationStatus.OFF_CAMPUS),
    )

    assert "Location Status: Off-Campus (not captured)" in templates.presence_body(students[0], record)
