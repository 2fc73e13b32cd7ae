from pathlib import Path

from src.mira_attendance.mira_attendance.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_schema_splits_into_table_statements():
    sql = _strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))

    statements = list(_iter_sql_statements(sql))

    assert len(statements) == 2
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS users")
    assert "UNIQUE KEY uq_attendance_user_date (user_id, work_date)" in statements[1]


def test_semicolon_inside_quotes_does_not_split():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"

    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
    ]
