"""Zakat due on aggregated net wealth.

Below nisab the amount due is exactly zero. At or above nisab the full net
wealth is charged at the calendar's rate; the Gregorian rate is higher to
make up for the solar year being about eleven days longer than the lunar one.
Amounts are rounded to cents with ROUND_HALF_UP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Any, assert_never

from loguru import logger

from barakah.zakat.aggregator import ZakatTotals
from barakah.zakat.models import CalendarType, to_decimal
from barakah.zakat.nisab import NisabTracker, meets_nisab, nisab_status

CENTS = Decimal("0.01")

ZAKAT_RATES: dict[CalendarType, Decimal] = {
    CalendarType.ISLAMIC: Decimal("0.025"),
    CalendarType.WESTERN: Decimal("0.02577"),
}


class DueMethod(StrEnum):
    """How the rate is applied once nisab is met.

    FULL_NET_WEALTH is the default and the one used for every saved
    calculation. EXCESS_OVER_NISAB charges only the part above the threshold
    and exists for distribution planning; it is never chosen implicitly.
    """

    FULL_NET_WEALTH = "full_net_wealth"
    EXCESS_OVER_NISAB = "excess_over_nisab"


def zakat_rate(calendar_type: CalendarType | str = CalendarType.ISLAMIC) -> Decimal:
    return ZAKAT_RATES[CalendarType(calendar_type)]


def calculate_zakat_due(
    net_wealth: Decimal | int | float | str,
    nisab_threshold: Decimal | int | float | str,
    calendar_type: CalendarType | str = CalendarType.ISLAMIC,
    method: DueMethod = DueMethod.FULL_NET_WEALTH,
) -> Decimal:
    """Zakat due, quantized to cents."""
    net_wealth = to_decimal(net_wealth, "net_wealth", allow_negative=True)
    threshold = to_decimal(nisab_threshold, "nisab_threshold")
    if not meets_nisab(net_wealth, threshold):
        logger.debug(f"Net wealth {net_wealth} below nisab {threshold}, no zakat due")
        return Decimal("0.00")

    match DueMethod(method):
        case DueMethod.FULL_NET_WEALTH:
            base = net_wealth
        case DueMethod.EXCESS_OVER_NISAB:
            base = net_wealth - threshold
        case _ as unreachable:
            assert_never(unreachable)

    return (base * zakat_rate(calendar_type)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class ZakatResult:
    """Complete result of a zakat calculation."""

    totals: ZakatTotals
    nisab_threshold: Decimal
    meets_nisab: bool
    calendar_type: CalendarType
    rate: Decimal
    zakat_due: Decimal
    method: DueMethod = DueMethod.FULL_NET_WEALTH
    calculation_date: date = field(default_factory=date.today)

    @property
    def currency(self) -> str:
        return self.totals.currency

    @property
    def net_wealth(self) -> Decimal:
        return self.totals.net_wealth

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        status = nisab_status(self.net_wealth, self.nisab_threshold)
        return {
            "calculation_date": self.calculation_date.isoformat(),
            "currency": self.currency,
            "totals": self.totals.to_dict(),
            "nisab": {
                "threshold": str(self.nisab_threshold.quantize(CENTS, rounding=ROUND_HALF_UP)),
                "meets_nisab": self.meets_nisab,
                "status": status.status.value,
                "ratio": str(status.ratio.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)),
            },
            "zakat": {
                "calendar_type": self.calendar_type.value,
                "rate": str(self.rate),
                "method": self.method.value,
                "due": str(self.zakat_due),
            },
        }


class ZakatDueCalculator:
    """Applies the nisab gate and rate to aggregated totals."""

    def __init__(self, tracker: NisabTracker, method: DueMethod = DueMethod.FULL_NET_WEALTH):
        self.tracker = tracker
        self.method = DueMethod(method)

    def calculate(self, totals: ZakatTotals, threshold: Decimal | None = None) -> ZakatResult:
        """Compute the result for ``totals``.

        Args:
            totals: Aggregated totals in the base currency.
            threshold: Nisab in the same currency as ``totals``. Defaults to
                the tracker's threshold, which must then be in that currency.
        """
        threshold = self.tracker.threshold if threshold is None else threshold
        calendar_type = self.tracker.calendar_type
        meets = meets_nisab(totals.net_wealth, threshold)
        due = calculate_zakat_due(totals.net_wealth, threshold, calendar_type, self.method)
        if meets:
            logger.info(f"Zakat due: {due} {totals.currency} ({calendar_type.value}, {self.method.value})")
        return ZakatResult(
            totals=totals,
            nisab_threshold=threshold,
            meets_nisab=meets,
            calendar_type=calendar_type,
            rate=zakat_rate(calendar_type),
            zakat_due=due,
            method=self.method,
        )
