from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable

import mysql.connector

from .demo import backfill_history, demo_users


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "mira_attendance")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable whatever the configured DB name is.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter: ';' ends a statement unless it sits inside quotes.
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def seed_demo_data(db_config: dict, *, today: date | None = None) -> int:
    """Upsert the demo roster and backfill its history. Returns inserted history rows."""
    today = today or date.today()
    users = demo_users()

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for u in users:
            cur.execute(
                """
                INSERT INTO users(user_id, pin, name, role, branch, year,
                                  email, email_verified, parent_email, parent_email_verified,
                                  phone_number, image_url)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), role=VALUES(role), branch=VALUES(branch), year=VALUES(year),
                    email=VALUES(email), email_verified=VALUES(email_verified),
                    parent_email=VALUES(parent_email), parent_email_verified=VALUES(parent_email_verified),
                    phone_number=VALUES(phone_number), image_url=VALUES(image_url)
                """,
                (
                    u.user_id, u.pin, u.name, u.role.value, u.branch, u.year,
                    u.email, int(u.email_verified), u.parent_email, int(u.parent_email_verified),
                    u.phone_number, u.image_url,
                ),
            )

        inserted = 0
        for r in backfill_history(users, today):
            # INSERT IGNORE keeps rows already captured for those days.
            cur.execute(
                """
                INSERT IGNORE INTO attendance_records(record_id, user_id, work_date, status)
                VALUES(%s,%s,%s,%s)
                """,
                (r.record_id, r.user_id, r.work_date, r.status.value),
            )
            inserted += cur.rowcount
        conn.commit()
        return inserted
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
