"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Settings modules may override the campus and timing values.
"""

EARTH_RADIUS_KM = 6371.0

CAMPUS_LAT = 18.4550
CAMPUS_LON = 79.5217
CAMPUS_RADIUS_KM = 0.5

DEFAULT_YEAR_PREFIX = "23210"
ROLL_LENGTH = 3

ALIGNMENT_DELAY_SECONDS = 2.5
LIVENESS_DELAY_SECONDS = 2.0
GEOLOCATION_TIMEOUT_SECONDS = 10.0

OPERATOR_WHATSAPP = "919347856661"
NOTIFY_WORKERS = 4
NOTIFY_JOIN_SECONDS = 30.0
SESSION_RETENTION_SECONDS = 120.0

RECENT_HISTORY_DAYS = 7
