SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "mira_attendance_test",
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORAGE = "memory"
AUTO_INIT_DB = False
AUTO_SEED_DB = False

CAMPUS_LAT = 18.4550
CAMPUS_LON = 79.5217
CAMPUS_RADIUS_KM = 0.5

OPERATOR_WHATSAPP = "919347856661"

CAMERA = "null"
CAMERA_INDEX = 0

# Short real-time delays so HTTP tests can wait for the result phase.
ALIGNMENT_DELAY_SECONDS = 0.01
LIVENESS_DELAY_SECONDS = 0.01
GEOLOCATION_TIMEOUT_SECONDS = 0.05
SESSION_RETENTION_SECONDS = 30.0

NOTIFY_WORKERS = 2
