import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "mira_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORAGE = "mysql"
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

CAMPUS_LAT = float(os.getenv("CAMPUS_LAT", "18.4550"))
CAMPUS_LON = float(os.getenv("CAMPUS_LON", "79.5217"))
CAMPUS_RADIUS_KM = float(os.getenv("CAMPUS_RADIUS_KM", "0.5"))

OPERATOR_WHATSAPP = os.getenv("OPERATOR_WHATSAPP", "919347856661")

CAMERA = os.getenv("CAMERA", "opencv")
CAMERA_INDEX = int(os.getenv("CAMERA_INDEX", "0"))

ALIGNMENT_DELAY_SECONDS = float(os.getenv("ALIGNMENT_DELAY_SECONDS", "2.5"))
LIVENESS_DELAY_SECONDS = float(os.getenv("LIVENESS_DELAY_SECONDS", "2.0"))
GEOLOCATION_TIMEOUT_SECONDS = float(os.getenv("GEOLOCATION_TIMEOUT_SECONDS", "10"))
SESSION_RETENTION_SECONDS = float(os.getenv("SESSION_RETENTION_SECONDS", "120"))

NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "4"))
