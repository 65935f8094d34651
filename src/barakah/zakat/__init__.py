"""Zakat classification and computation engine."""

from .aggregator import ZakatTotals, aggregate, aggregate_categories, aggregate_company
from .calculator import ZAKAT_RATES, DueMethod, ZakatDueCalculator, ZakatResult, calculate_zakat_due, zakat_rate
from .clarification import ClarificationAnswer, ClarificationWorkflow, QuestionType
from .classifier import COMMON_LINE_ITEMS, classify_line_item, create_gold_item, create_line_item
from .currency import CurrencyNormalizer, RateQuote, StaticRateTable
from .hawl import HAWL_DAYS, HawlTracker, days_until_hawl, next_hawl_end
from .models import (
    BusinessCategory,
    CalculationRecord,
    CalendarType,
    CategoryEntry,
    Classification,
    Company,
    GoldKarat,
    LineItem,
    NisabBasis,
    NisabConfig,
    Portfolio,
    PortfolioType,
)
from .nisab import NisabTracker, compute_nisab, meets_nisab
from .portfolio import PortfolioBook, PortfolioRepository
from .session import ZakatSession

__all__ = [
    "COMMON_LINE_ITEMS",
    "HAWL_DAYS",
    "ZAKAT_RATES",
    "BusinessCategory",
    "CalculationRecord",
    "CalendarType",
    "CategoryEntry",
    "ClarificationAnswer",
    "ClarificationWorkflow",
    "Classification",
    "Company",
    "CurrencyNormalizer",
    "DueMethod",
    "GoldKarat",
    "HawlTracker",
    "LineItem",
    "NisabBasis",
    "NisabConfig",
    "NisabTracker",
    "Portfolio",
    "PortfolioBook",
    "PortfolioRepository",
    "PortfolioType",
    "QuestionType",
    "RateQuote",
    "StaticRateTable",
    "ZakatDueCalculator",
    "ZakatResult",
    "ZakatSession",
    "ZakatTotals",
    "aggregate",
    "aggregate_categories",
    "aggregate_company",
    "calculate_zakat_due",
    "classify_line_item",
    "compute_nisab",
    "create_gold_item",
    "create_line_item",
    "days_until_hawl",
    "meets_nisab",
    "next_hawl_end",
    "zakat_rate",
]
