from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

DEMO_STAFF = (
    # (name, username, password, reg_no, pin)
    ("Lt. Suresh Kumar", "suresh", "staff123", "ANO-01", "4321"),
    ("Capt. Divya Iyer", "divya", "staff123", "ANO-02", "8765"),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside quoted literals. Backslash escapes the next char."""

    start = 0
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if ch == "\\":
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(_strip_line_comments(sql)):
        cur.execute(stmt)


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    target = DBConfig.from_mapping(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
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
    _run_sql_file(db_config, schema_path)
    logger.info("Applied schema %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)
    logger.info("Applied seed %s", seed_path)


def ensure_demo_staff(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor(dictionary=True)
        for name, username, password, reg_no, pin in DEMO_STAFF:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT staff_id FROM staff WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE staff
                    SET name=%s, password_hash=%s, reg_no=%s, pin=%s
                    WHERE username=%s
                    """,
                    (name, password_hash, reg_no, pin, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO staff (name, username, password_hash, reg_no, pin)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (name, username, password_hash, reg_no, pin),
                )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
