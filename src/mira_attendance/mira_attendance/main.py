from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .capture.controller import register as register_capture
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables, seed_demo_data
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    storage = str(getattr(settings, "STORAGE", "mysql")).lower()
    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s storage=%s db=%s@%s:%s/%s",
        settings_module,
        storage,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None and storage == "mysql":
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            inserted = seed_demo_data(db_config)
            logger.info("Demo seed ready (%d history rows added)", inserted)

    if container is None:
        container = build_container(settings)
        atexit.register(container.shutdown)
    app.extensions["mira_container"] = container

    register_users(app, container)
    register_capture(app, container)
    register_attendance(app, container)

    return app
