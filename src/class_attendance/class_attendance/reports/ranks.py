from __future__ import annotations

import re

from ..core.constants import RANK_ORDER, UNASSIGNED_YEAR
from ..core.enums import GenderGroup


def normalize_rank(value) -> str:
    """Uppercase, drop dots, collapse whitespace ("l/cpl." -> "L/CPL")."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value).upper().replace(".", "")).strip()


_PRECEDENCE = {normalize_rank(r): i for i, r in enumerate(RANK_ORDER)}


def rank_precedence(value) -> int:
    """Position in the rank table; unrecognized ranks sort after all known ones."""
    return _PRECEDENCE.get(normalize_rank(value), len(RANK_ORDER))


def year_key(value) -> int | None:
    v = str(value or "").strip()
    digits = re.match(r"^(\d+)", v)
    return int(digits.group(1)) if digits else None


def year_label(year: int | None) -> str:
    if year is None:
        return UNASSIGNED_YEAR
    if 10 <= year % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(year % 10, "th")
    return f"{year}{suffix} Year"


def year_sort_key(year: int | None) -> tuple[int, int]:
    # Descending by year, unassigned last.
    return (1, 0) if year is None else (0, -year)


def gender_group(value) -> GenderGroup:
    v = str(value or "").strip().lower()
    if v in {"male", "m", "boy", "boys"}:
        return GenderGroup.BOYS
    if v in {"female", "f", "girl", "girls"}:
        return GenderGroup.GIRLS
    return GenderGroup.UNSPECIFIED
