"""Device ports used by a capture session: camera and geolocation."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

import cv2

from ..attendance.geofence import GeoCoordinate
from ..core.enums import LocationErrorKind
from ..core.exceptions import DeviceError, LocationError

logger = logging.getLogger(__name__)

CAMERA_DENIED_MESSAGE = "Camera access denied. Please enable camera permissions in your browser settings."

LOCATION_WARNINGS = {
    LocationErrorKind.PERMISSION_DENIED: "Location access was denied. Marking attendance without location.",
    LocationErrorKind.POSITION_UNAVAILABLE: "Location information is unavailable. Marking attendance without location.",
    LocationErrorKind.TIMEOUT: "The request to get user location timed out. Marking attendance without location.",
    LocationErrorKind.UNKNOWN: "Could not get location. Marking attendance without it.",
}


def location_warning(kind: LocationErrorKind) -> str:
    return LOCATION_WARNINGS.get(kind, LOCATION_WARNINGS[LocationErrorKind.UNKNOWN])


class CameraStream(Protocol):
    @property
    def active(self) -> bool:
        raise NotImplementedError

    def stop(self) -> None:
        """Release the device. Safe to call more than once."""

        raise NotImplementedError


class CameraDevice(Protocol):
    def acquire(self) -> CameraStream:
        """Open the camera or raise DeviceError."""

        raise NotImplementedError


class _OpenCVStream(CameraStream):
    def __init__(self, capture):
        self._capture = capture
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def stop(self) -> None:
        if self._active:
            self._active = False
            self._capture.release()


class OpenCVCamera(CameraDevice):
    """Kiosk webcam opened through OpenCV."""

    def __init__(self, index: int = 0, *, width: int = 480, height: int = 480):
        self._index = int(index)
        self._width = int(width)
        self._height = int(height)

    def acquire(self) -> CameraStream:
        capture = cv2.VideoCapture(self._index)
        if not capture.isOpened():
            capture.release()
            raise DeviceError(CAMERA_DENIED_MESSAGE)
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        logger.debug("Camera %s opened", self._index)
        return _OpenCVStream(capture)


class _NullStream(CameraStream):
    def __init__(self):
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def stop(self) -> None:
        self._active = False


class NullCamera(CameraDevice):
    """Headless deployments: the preview lives in the kiosk browser."""

    def acquire(self) -> CameraStream:
        return _NullStream()


class GeolocationProvider(Protocol):
    def request(self, timeout: float) -> GeoCoordinate:
        """Return the device position or raise LocationError."""

        raise NotImplementedError


class FixedGeolocation(GeolocationProvider):
    """A kiosk installed at known coordinates."""

    def __init__(self, coordinate: GeoCoordinate):
        self._coordinate = coordinate

    def request(self, timeout: float) -> GeoCoordinate:
        return self._coordinate


class ReportedGeolocation(GeolocationProvider):
    """Position reported by the kiosk browser for one session.

    `request` waits up to `timeout` seconds for `report()` or `fail()`.
    """

    def __init__(self):
        self._event = threading.Event()
        self._coordinate: Optional[GeoCoordinate] = None
        self._error: Optional[LocationError] = None

    def report(self, coordinate: GeoCoordinate) -> None:
        self._coordinate = coordinate
        self._event.set()

    def fail(self, kind: LocationErrorKind, message: str = "") -> None:
        self._error = LocationError(kind, message)
        self._event.set()

    def request(self, timeout: float) -> GeoCoordinate:
        if not self._event.wait(timeout):
            raise LocationError(LocationErrorKind.TIMEOUT, f"No position reported within {timeout:g}s")
        if self._error is not None:
            raise self._error
        return self._coordinate
