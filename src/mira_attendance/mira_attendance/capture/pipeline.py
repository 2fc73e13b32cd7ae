from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..attendance.geofence import Campus, GeoCoordinate, classify, format_coordinates
from ..attendance.history import HistorySummary, summarize_history
from ..attendance.ledger import AttendanceLedger
from ..attendance.model import AttendanceRecord, LocationStamp
from ..attendance.stats import DailyStats, StatsAggregator
from ..common.datetime_utils import now_local
from ..core.constants import GEOLOCATION_TIMEOUT_SECONDS
from ..core.exceptions import LocationError
from ..notifications.dispatcher import DispatchBatch, NotificationDispatcher
from ..users.model import User
from .devices import GeolocationProvider, location_warning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureOutcome:
    """Everything the result screen shows after a capture."""

    record: AttendanceRecord
    history: Sequence[AttendanceRecord]
    summary: HistorySummary
    stats: DailyStats
    notifications: DispatchBatch
    warning: Optional[str] = None
    distance_km: Optional[float] = None


class AttendancePipeline:
    """The verifying step: locate, geofence, commit, notify, refresh stats.

    The ledger write is the point of no return. Location problems and
    notification failures are absorbed; a PersistenceError propagates.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        stats: StatsAggregator,
        dispatcher: NotificationDispatcher,
        campus: Campus,
        *,
        geolocation_timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._ledger = ledger
        self._stats = stats
        self._dispatcher = dispatcher
        self._campus = campus
        self._geolocation_timeout = float(geolocation_timeout)
        self._clock = clock

    def locate(self, geolocation: GeolocationProvider) -> tuple[Optional[GeoCoordinate], Optional[str]]:
        try:
            return geolocation.request(self._geolocation_timeout), None
        except LocationError as e:
            logger.warning("Could not get location: %s (code: %s)", e, e.kind.value)
            return None, location_warning(e.kind)

    def commit(
        self,
        student: User,
        geolocation: GeolocationProvider,
        *,
        proceed: Optional[Callable[[], bool]] = None,
    ) -> Optional[CaptureOutcome]:
        """Run the verifying step. Returns None if `proceed` says the session was cancelled."""

        coordinate, warning = self.locate(geolocation)
        fence = classify(coordinate, self._campus.center, self._campus.radius_km)
        location = LocationStamp(
            status=fence.status,
            coordinates=format_coordinates(coordinate) if coordinate else None,
        )

        if proceed is not None and not proceed():
            logger.info("Capture for %s cancelled before commit", student.pin)
            return None

        now = self._clock()
        record = self._ledger.mark_present(student.user_id, now.date(), now.time(), location)

        notifications = self._dispatcher.dispatch(record, student)
        stats = self._stats.daily_stats(now.date())
        history = self._ledger.query_history(student.user_id)

        return CaptureOutcome(
            record=record,
            history=history,
            summary=summarize_history(history, now.date()),
            stats=stats,
            notifications=notifications,
            warning=warning,
            distance_km=fence.distance_km,
        )
