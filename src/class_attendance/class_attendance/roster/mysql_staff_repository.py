from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Staff
from .repository import StaffRepository


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT staff_id, name, username, reg_no, pin
                FROM staff
                WHERE staff_id=%s
                """,
                (int(staff_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Staff(
                staff_id=int(row["staff_id"]),
                name=row["name"],
                username=row["username"],
                pin=str(row["pin"]),
                reg_no=row.get("reg_no") or "",
            )

    def list_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT staff_id FROM staff ORDER BY staff_id")
            return [int(r["staff_id"]) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM staff")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def names_by_id(self) -> dict[int, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT staff_id, name FROM staff")
            return {int(r["staff_id"]): r["name"] for r in fetchall(cur)}
