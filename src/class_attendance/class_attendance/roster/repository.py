from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Staff, Student


class StudentRepository(Protocol):
    """Read side of the student roster.

    The roster itself (CRUD, spreadsheet import) lives outside this service.
    """

    def list_ids(self) -> Sequence[int]:
        raise NotImplementedError

    def list_students(self, *, class_section: Optional[str] = None) -> Sequence[Student]:
        """Students ordered by name; ``class_section`` matches case-insensitively."""

        raise NotImplementedError

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        raise NotImplementedError


class StaffRepository(Protocol):
    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        raise NotImplementedError

    def list_ids(self) -> Sequence[int]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def names_by_id(self) -> dict[int, str]:
        raise NotImplementedError
