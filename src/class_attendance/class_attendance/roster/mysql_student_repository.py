from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, name, `rank`, roll_no, reg_no, gender, year, class_section"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        name=r.get("name") or "",
        rank=r.get("rank") or "",
        roll_no=r.get("roll_no") or "",
        reg_no=r.get("reg_no") or "",
        gender=r.get("gender") or "",
        year=str(r.get("year") or ""),
        class_section=r.get("class_section") or "",
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_id FROM students ORDER BY student_id")
            return [int(r["student_id"]) for r in fetchall(cur)]

    def list_students(self, *, class_section: Optional[str] = None) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            if class_section:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM students WHERE LOWER(class_section)=LOWER(%s) ORDER BY name ASC",
                    (class_section,),
                )
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY name ASC")
            return [_to_student(r) for r in fetchall(cur)]

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        ids = [int(i) for i in student_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE student_id IN ({in_clause(ids)}) ORDER BY name ASC",
                tuple(ids),
            )
            return [_to_student(r) for r in fetchall(cur)]
