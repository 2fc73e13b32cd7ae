from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserDirectory

_COLUMNS = """
    user_id, pin, name, role, branch, year,
    email, email_verified, parent_email, parent_email_verified,
    phone_number, image_url
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        pin=row["pin"],
        name=row["name"],
        role=Role(row["role"]),
        branch=row["branch"],
        year=int(row["year"]) if row.get("year") is not None else None,
        email=row.get("email"),
        email_verified=bool(row.get("email_verified")),
        parent_email=row.get("parent_email"),
        parent_email_verified=bool(row.get("parent_email_verified")),
        phone_number=row.get("phone_number"),
        image_url=row.get("image_url"),
    )


class MySQLUserDirectory(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_pin(self, pin: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE UPPER(pin)=UPPER(%s)", (pin,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE role=%s ORDER BY pin", (role.value,))
            return [_row_to_user(r) for r in fetchall(cur)]
