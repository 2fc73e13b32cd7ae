"""Seed the demo roster and backfill synthetic attendance history.

Today is never backfilled; it is left for live captures.

    python scripts/seed_db.py [--today YYYY-MM-DD]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.mira_attendance.mira_attendance.common.datetime_utils import parse_iso_date
from src.mira_attendance.mira_attendance.database.bootstrap import seed_demo_data


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--today", type=parse_iso_date, default=None, help="reference date (default: today)")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    inserted = seed_demo_data(db_config, today=args.today)
    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"({inserted} history rows added)"
    )


if __name__ == "__main__":
    main()
