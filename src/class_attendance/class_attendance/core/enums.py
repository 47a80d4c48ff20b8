from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status stored on each ledger row."""

    PRESENT = "Present"
    ABSENT = "Absent"


class WindowState(str, Enum):
    """Where "now" falls relative to a schedule's start/end instants."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    EXPIRED = "expired"


class GenderGroup(str, Enum):
    BOYS = "Boys"
    GIRLS = "Girls"
    UNSPECIFIED = "Unspecified"
