from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(exc: BaseException) -> bool:
    """True only for unique-index collisions (ER_DUP_ENTRY)."""
    return isinstance(exc, IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def in_clause(values) -> str:
    return ", ".join(["%s"] * len(values))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns arrive as ``time``, ``timedelta`` or "HH:MM[:SS]" depending on the connector."""

    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        minutes, seconds = divmod(int(value.total_seconds()) % 86400, 60)
        hours, minutes = divmod(minutes, 60)
        return time(hours, minutes, seconds)

    if isinstance(value, str):
        fields = [int(p) if p else 0 for p in value.strip().split(":")]
        if len(fields) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*fields[:3])

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def normalize_mysql_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")
