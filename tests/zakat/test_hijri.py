"""Tests for barakah.zakat.hijri."""

from datetime import date, datetime, timedelta

from barakah.zakat.hijri import HIJRI_MONTHS, HijriDate, to_hijri


def test_start_of_ramadan_1445():
    assert to_hijri(date(2024, 3, 11)) == HijriDate(1445, 9, 1)


def test_string_form():
    hijri = to_hijri(date(2024, 3, 11))
    assert hijri.month_name == "Ramadan"
    assert str(hijri) == "1 Ramadan 1445 AH"


def test_accepts_datetime():
    assert to_hijri(datetime(2024, 3, 11, 22, 15)) == to_hijri(date(2024, 3, 11))


def test_consecutive_days():
    first = to_hijri(date(2024, 3, 11))
    second = to_hijri(date(2024, 3, 11) + timedelta(days=1))
    assert (second.year, second.month, second.day) == (first.year, first.month, first.day + 1)


def test_defaults_to_today():
    hijri = to_hijri()
    assert 1 <= hijri.month <= len(HIJRI_MONTHS)
    assert 1 <= hijri.day <= 30
    assert hijri.year >= 1445
