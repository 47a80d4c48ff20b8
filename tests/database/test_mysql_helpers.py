from __future__ import annotations

from datetime import date, datetime, time, timedelta

import mysql.connector
import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError, OperationalError

from src.class_attendance.class_attendance.database.bootstrap import (
    _iter_sql_statements,
    _strip_create_db_and_use,
    _strip_line_comments,
    ensure_database_exists,
)
from src.class_attendance.class_attendance.database.connection import DBConfig
from src.class_attendance.class_attendance.database.mysql_base import (
    in_clause,
    is_duplicate_key,
    normalize_mysql_date,
    normalize_mysql_time,
)
from src.class_attendance.class_attendance.schedules.model import ScheduleHistory


@pytest.mark.parametrize(
    "value, expected",
    [
        (time(9, 30), time(9, 30)),
        (timedelta(hours=9, minutes=30, seconds=5), time(9, 30, 5)),
        ("08:15", time(8, 15)),
        ("08:15:20", time(8, 15, 20)),
        (None, None),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_normalize_mysql_time_rejects_garbage():
    with pytest.raises(ValueError):
        normalize_mysql_time("0830")
    with pytest.raises(TypeError):
        normalize_mysql_time(830)


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2024, 3, 1), date(2024, 3, 1)),
        (datetime(2024, 3, 1, 23, 59), date(2024, 3, 1)),
        ("2024-03-01", date(2024, 3, 1)),
        ("2024-03-01 10:00:00", date(2024, 3, 1)),
        (None, None),
    ],
)
def test_normalize_mysql_date(value, expected):
    assert normalize_mysql_date(value) == expected


def test_duplicate_key_detection_is_narrow():
    assert is_duplicate_key(IntegrityError(msg="dup", errno=errorcode.ER_DUP_ENTRY))
    assert not is_duplicate_key(IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    assert not is_duplicate_key(OperationalError(msg="gone", errno=errorcode.CR_SERVER_LOST))
    assert not is_duplicate_key(ValueError("x"))


def test_in_clause():
    assert in_clause([1, 2, 3]) == "%s, %s, %s"


def test_db_config_from_mapping_defaults_port():
    cfg = DBConfig.from_mapping({"host": "db", "user": "u", "password": "p", "database": "d"})
    assert cfg.port == 3306
    assert cfg.database == "d"


def test_sql_splitter_handles_quotes_and_comments():
    sql = """
    CREATE DATABASE IF NOT EXISTS attendance;
    USE attendance;
    -- students first
    CREATE TABLE a (x INT);
    INSERT INTO a VALUES ('semi;colon'), ("it\\'s");
    """

    statements = list(_iter_sql_statements(_strip_line_comments(_strip_create_db_and_use(sql))))

    assert statements == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('semi;colon'), (\"it\\'s\")",
    ]


class _RecordingConnection:
    def __init__(self):
        self.executed = []
        self.committed = False

    def cursor(self, **kwargs):
        return self

    def execute(self, stmt, params=None):
        self.executed.append(stmt)

    def commit(self):
        self.committed = True

    def close(self):
        pass


def test_bootstrap_connects_through_connection_factory(monkeypatch):
    calls = []
    conn = _RecordingConnection()

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return conn

    monkeypatch.setattr(mysql.connector, "connect", fake_connect)

    ensure_database_exists({"host": "db", "user": "u", "password": "p", "database": "roll"})

    assert calls == [{"host": "db", "port": 3306, "user": "u", "password": "p"}]
    assert "CREATE DATABASE IF NOT EXISTS `roll`" in conn.executed[0]
    assert conn.committed


def test_history_row_serializes_with_shared_formatters():
    row = ScheduleHistory(
        history_id=1,
        schedule_id=4,
        class_date=date(2024, 3, 1),
        staff_id=None,
        start_time=time(9, 5),
        end_time=None,
    )

    assert row.to_dict() == {
        "id": 1,
        "scheduleId": 4,
        "classDate": "2024-03-01",
        "staffId": None,
        "startTime": "09:05",
        "endTime": None,
        "attendanceTaken": False,
        "totalPresent": 0,
    }
