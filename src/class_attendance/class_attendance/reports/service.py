from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import fmt_date
from ..core.constants import NOT_AVAILABLE
from ..core.enums import AttendanceStatus, GenderGroup
from ..roster.model import Student
from ..roster.repository import StudentRepository
from ..schedules.repository import HistoryRepository, ScheduleRepository
from .ranks import gender_group, rank_precedence, year_key, year_label, year_sort_key

UNKNOWN_CLASS = "Unknown Class"


@dataclass(frozen=True)
class StudentHistory:
    student: Student
    history: list[dict]
    percentage: str

    def to_dict(self) -> dict:
        return {"student": self.student.to_dict(), "history": self.history, "percentage": self.percentage}


@dataclass(frozen=True)
class AttendanceMatrix:
    """Per-student status across every known class date."""

    records: list[StudentHistory]
    all_dates: list[date]
    schedule_dates: list[date]

    def to_dict(self) -> dict:
        return {
            "records": [r.to_dict() for r in self.records],
            "allDates": [fmt_date(d) for d in self.all_dates],
            "scheduleDates": [fmt_date(d) for d in self.schedule_dates],
        }


@dataclass
class GenderBucket:
    gender: GenderGroup
    students: list[Student] = field(default_factory=list)


@dataclass
class YearGroup:
    label: str
    genders: list[GenderBucket] = field(default_factory=list)


@dataclass
class ClassGroup:
    class_section: str
    years: list[YearGroup] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=dict)


@dataclass
class RollCallSummary:
    class_date: date
    classes: list[ClassGroup] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "classDate": fmt_date(self.class_date),
            "classes": [
                {
                    "classSection": c.class_section,
                    "years": [
                        {
                            "label": y.label,
                            "genders": [
                                {
                                    "gender": g.gender.value,
                                    "students": [
                                        {"id": s.student_id, "name": s.name, "rank": s.rank} for s in g.students
                                    ],
                                }
                                for g in y.genders
                            ],
                        }
                        for y in c.years
                    ],
                    "totals": c.totals,
                }
                for c in self.classes
            ],
            "totals": self.totals,
        }

    def as_text(self) -> str:
        lines = [f"Attendance for {fmt_date(self.class_date)}", ""]
        for c in self.classes:
            lines.append(c.class_section)
            for y in c.years:
                lines.append(f"  {y.label}")
                for g in y.genders:
                    for s in g.students:
                        lines.append(f"    {s.rank or '-'} {s.name}")
            lines.append(f"Totals for {c.class_section}:")
            lines.extend(f"  {k}: {v}" for k, v in c.totals.items())
            lines.append("")
        lines.extend(f"OVERALL {k.upper()}: {v}" for k, v in self.totals.items())
        return "\n".join(lines).strip()


def _percent(present: int, counted: int) -> str:
    """One decimal place, halves rounded up ("6.3" for 1 of 16)."""
    if not counted:
        return "0.0"
    value = Decimal(present * 100) / Decimal(counted)
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _tally(students: Iterable[Student]) -> dict[str, int]:
    counts = {GenderGroup.BOYS.value: 0, GenderGroup.GIRLS.value: 0}
    total = 0
    for s in students:
        g = gender_group(s.gender).value
        counts[g] = counts.get(g, 0) + 1
        total += 1
    counts["Total"] = total
    return counts


def build_roll_call(class_date: date, students: Sequence[Student]) -> RollCallSummary:
    """Group present students: class -> year (3rd, 2nd, 1st, unassigned) -> gender -> rank."""

    by_class: dict[str, list[Student]] = defaultdict(list)
    for s in students:
        by_class[s.class_section or UNKNOWN_CLASS].append(s)

    summary = RollCallSummary(class_date=class_date)
    for class_section in sorted(by_class):
        members = by_class[class_section]
        group = ClassGroup(class_section=class_section, totals=_tally(members))

        by_year: dict[Optional[int], list[Student]] = defaultdict(list)
        for s in members:
            by_year[year_key(s.year)].append(s)

        for year in sorted(by_year, key=year_sort_key):
            yg = YearGroup(label=year_label(year))
            for gender in GenderGroup:
                bucket = [s for s in by_year[year] if gender_group(s.gender) is gender]
                if bucket:
                    # sorted() is stable: unknown ranks keep their incoming order.
                    bucket = sorted(bucket, key=lambda s: rank_precedence(s.rank))
                    yg.genders.append(GenderBucket(gender=gender, students=bucket))
            group.years.append(yg)

        summary.classes.append(group)

    summary.totals = _tally(students)
    return summary


class ReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        history: HistoryRepository,
        students: StudentRepository,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._history = history
        self._students = students

    def student_history(self, class_section: Optional[str] = None) -> AttendanceMatrix:
        if class_section and class_section.strip().lower() == "all":
            class_section = None

        students = self._students.list_students(class_section=class_section or None)
        records = self._attendance.list_all()

        ledger_dates = sorted({r.class_date for r in records})
        dates = sorted(
            set(ledger_dates)
            | {s.class_date for s in self._schedules.list_all()}
            | set(self._history.distinct_dates())
        )

        statuses: dict[tuple[int, date], set[AttendanceStatus]] = defaultdict(set)
        for r in records:
            statuses[(r.student_id, r.class_date)].add(r.status)

        rows: list[StudentHistory] = []
        for student in students:
            history = []
            present = counted = 0
            for d in dates:
                seen = statuses.get((student.student_id, d))
                if not seen:
                    status = NOT_AVAILABLE
                elif AttendanceStatus.PRESENT in seen:
                    status = AttendanceStatus.PRESENT.value
                else:
                    status = AttendanceStatus.ABSENT.value

                if status != NOT_AVAILABLE:
                    counted += 1
                    if status == AttendanceStatus.PRESENT.value:
                        present += 1
                history.append({"classDate": fmt_date(d), "status": status})

            percentage = _percent(present, counted)
            rows.append(StudentHistory(student=student, history=history, percentage=percentage))

        return AttendanceMatrix(records=rows, all_dates=ledger_dates, schedule_dates=dates)

    def roll_call(
        self,
        class_date: date,
        *,
        staff_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
    ) -> RollCallSummary:
        ids = self._attendance.present_student_ids(class_date, staff_id=staff_id, schedule_id=schedule_id)
        return build_roll_call(class_date, self._students.get_many(sorted(ids)))

    def roll_call_report(self, *, staff_id: Optional[int] = None) -> list[RollCallSummary]:
        """One roll-call summary per date with any present student, newest first."""

        present_by_date: dict[date, set[int]] = defaultdict(set)
        for r in self._attendance.list_all():
            if r.status is not AttendanceStatus.PRESENT:
                continue
            if staff_id is not None and r.staff_id != staff_id:
                continue
            present_by_date[r.class_date].add(r.student_id)

        if not present_by_date:
            return []

        all_ids = set().union(*present_by_date.values())
        by_id = {s.student_id: s for s in self._students.get_many(sorted(all_ids))}

        out = []
        for d in sorted(present_by_date, reverse=True):
            students = sorted(
                (by_id[i] for i in present_by_date[d] if i in by_id),
                key=lambda s: s.name,
            )
            out.append(build_roll_call(d, students))
        return out
