"""Hawl (lunar year) tracking.

All arithmetic is done on calendar dates; datetimes are truncated to their
date. A start date from a past cycle is carried forward in whole 354-day
steps, so the anniversary itself opens a fresh countdown of 354 days.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

from barakah.zakat.models import HawlInfo
from barakah.zakat.nisab import meets_nisab

HAWL_DAYS = 354


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _today(now: date | datetime | str | None) -> date:
    return _as_date(now) if now is not None else date.today()


def next_hawl_end(start_date: date | datetime | str, now: date | datetime | str | None = None) -> date:
    """The next anniversary strictly after ``now``.

    Equivalent to advancing ``start + 354 days`` one cycle at a time while it
    is not in the future, without looping over every elapsed cycle.
    """
    start = _as_date(start_date)
    today = _today(now)
    end = start + timedelta(days=HAWL_DAYS)
    if end <= today:
        cycles = (today - start).days // HAWL_DAYS
        end = start + timedelta(days=HAWL_DAYS * (cycles + 1))
    return end


def days_until_hawl(start_date: date | datetime | str, now: date | datetime | str | None = None) -> int:
    today = _today(now)
    return (next_hawl_end(start_date, today) - today).days


def hawl_progress(start_date: date | datetime | str, now: date | datetime | str | None = None) -> float:
    """Share of the current cycle already elapsed, clamped to 0..1."""
    days = days_until_hawl(start_date, now)
    return min(1.0, max(0.0, (HAWL_DAYS - days) / HAWL_DAYS))


def hawl_completed(start_date: date | datetime | str, now: date | datetime | str | None = None) -> bool:
    """True once at least one full lunar year has passed since ``start_date``."""
    return (_today(now) - _as_date(start_date)).days >= HAWL_DAYS


def is_due(
    start_date: date | datetime | str,
    net_wealth: Decimal,
    threshold: Decimal,
    now: date | datetime | str | None = None,
) -> bool:
    return hawl_completed(start_date, now) and meets_nisab(net_wealth, threshold)


class HawlTracker:
    """Hawl window for one entity, anchored on the date its wealth first reached nisab."""

    def __init__(self, start_date: date | datetime | str):
        self.start_date = _as_date(start_date)

    def info(self, now: date | datetime | str | None = None) -> HawlInfo:
        return HawlInfo(start_date=self.start_date, end_date=next_hawl_end(self.start_date, now))

    def days_remaining(self, now: date | datetime | str | None = None) -> int:
        return days_until_hawl(self.start_date, now)

    def progress(self, now: date | datetime | str | None = None) -> float:
        return hawl_progress(self.start_date, now)

    def is_due(self, net_wealth: Decimal, threshold: Decimal, now: date | datetime | str | None = None) -> bool:
        return is_due(self.start_date, net_wealth, threshold, now)
