"""Approximate Hijri dates.

Arithmetic (tabular) conversion through the Julian day number. It can differ
from a sighting-based calendar by a day or two, which is fine for labelling
saved calculations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

HIJRI_MONTHS = (
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Awwal",
    "Jumada al-Thani",
    "Rajab",
    "Shaban",
    "Ramadan",
    "Shawwal",
    "Dhul Qadah",
    "Dhul Hijjah",
)


@dataclass(frozen=True)
class HijriDate:
    year: int
    month: int
    day: int

    @property
    def month_name(self) -> str:
        return HIJRI_MONTHS[self.month - 1]

    def __str__(self) -> str:
        return f"{self.day} {self.month_name} {self.year} AH"


def julian_day(d: date) -> int:
    a = (14 - d.month) // 12
    y = d.year + 4800 - a
    m = d.month + 12 * a - 3
    return d.day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def to_hijri(value: date | datetime | None = None) -> HijriDate:
    """Convert a Gregorian date (default: today) to the tabular Hijri calendar."""
    if value is None:
        value = date.today()
    elif isinstance(value, datetime):
        value = value.date()

    l = julian_day(value) - 1948440 + 10632  # noqa: E741
    n = (l - 1) // 10631
    l = l - 10631 * n + 354  # noqa: E741
    j = ((10985 - l) // 5316) * ((50 * l) // 17719) + (l // 5670) * ((43 * l) // 15238)
    l = l - ((30 - j) // 15) * ((17719 * j) // 50) - (j // 16) * ((15238 * j) // 43) + 29  # noqa: E741
    month = (24 * l) // 709
    day = l - (709 * month) // 24
    year = 30 * n + j - 30
    return HijriDate(year=year, month=month, day=day)
