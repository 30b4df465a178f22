from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes, skips -- comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for line in sql.splitlines(keepends=True):
        if not in_single and not in_double and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                buf.append(ch)
                escape = False
                continue

            if ch == "\\":
                buf.append(ch)
                escape = True
                continue

            if ch == "'" and not in_double:
                in_single = not in_single
            elif ch == '"' and not in_single:
                in_double = not in_double
            elif ch == ";" and not in_single and not in_double:
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue

            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection, database: str) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, database: str, *, schema_path: str | Path) -> int:
    """Apply schema.sql (idempotent: CREATE TABLE IF NOT EXISTS); return statement count."""
    ensure_database_exists(conn_factory, database)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied to %s (%s statements)", database, count)
    return count


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


_DEMO_EMPLOYEES = (
    # employee_id, full_name, department, job_title, role, grade, hire_date
    ("00000000-0000-0000-0000-000000000001", "王總", "管理部", "總經理", "employee", "general_manager", "2010-03-01"),
    ("00000000-0000-0000-0000-000000000002", "李經理", "業務部", "業務經理", "employee", "manager", "2015-07-15"),
    ("00000000-0000-0000-0000-000000000003", "陳課長", "業務部", "業務課長", "employee", "chief", "2018-01-02"),
    ("00000000-0000-0000-0000-000000000004", "林專員", "業務部", "業務專員", "employee", "ic", "2023-09-01"),
    ("00000000-0000-0000-0000-000000000005", "系統管理員", "資訊部", "管理員", "admin", "ic", None),
)

_DEMO_VEHICLES = (("公務車 A", "ABC-1234"), ("公務車 B", "XYZ-5678"))


def ensure_demo_data(conn_factory: DatabaseConnection) -> None:
    """Upsert a small org chart and two company cars for local trials."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)
        for emp_id, name, dept, title, role, grade, hire in _DEMO_EMPLOYEES:
            cur.execute(
                """
                INSERT INTO employees(employee_id, full_name, department, job_title, role, grade, hire_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), department=VALUES(department),
                    job_title=VALUES(job_title), role=VALUES(role), grade=VALUES(grade)
                """,
                (emp_id, name, dept, title, role, grade, hire),
            )

        for name, plate in _DEMO_VEHICLES:
            cur.execute("SELECT vehicle_id FROM vehicles WHERE plate_number=%s", (plate,))
            if not cur.fetchone():
                cur.execute("INSERT INTO vehicles(name, plate_number) VALUES(%s,%s)", (name, plate))
        conn.commit()
    finally:
        conn.close()
    logger.info("demo data ready (%s employees, %s vehicles)", len(_DEMO_EMPLOYEES), len(_DEMO_VEHICLES))
