from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Student:
    """Roster entry as seen by the attendance core (read-only)."""

    student_id: int
    name: str
    rank: str = ""
    roll_no: str = ""
    reg_no: str = ""
    gender: str = ""
    year: str = ""
    class_section: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.student_id,
            "name": self.name,
            "rank": self.rank,
            "rollNo": self.roll_no,
            "regNo": self.reg_no,
            "gender": self.gender,
            "year": self.year,
            "classSection": self.class_section,
        }


@dataclass(frozen=True)
class Staff:
    """Staff member; the core only reads ``staff_id`` and ``pin``."""

    staff_id: int
    name: str
    username: str
    pin: str
    reg_no: str = ""
