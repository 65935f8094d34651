"""Keyword classifier for balance-sheet line items.

Names are matched first against a small table of exact archetypes, then
against keyword rules grouped by outcome (AAOIFI FAS 9 aligned). Anything
unrecognized is flagged for clarification with a generic question instead of
guessing a ruling in either direction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from loguru import logger

from barakah.core.exceptions import InvalidInputError
from barakah.zakat.models import (
    BusinessCategory,
    CategoryEntry,
    Classification,
    GoldKarat,
    LineItem,
    TermType,
    to_decimal,
)

if TYPE_CHECKING:
    from barakah.zakat.currency import CurrencyNormalizer

GENERIC_QUESTION = "How should this item be treated for Zakat purposes?"
ASSET_USE_QUESTION = "Is this {noun} for trading/selling OR for business operations?"
FINANCING_QUESTION = "Is this Islamic financing OR conventional interest-based?"
DEPOSIT_QUESTION = "Did you pay this deposit OR are you holding it from customers?"
TERM_QUESTION = "Is this investment for trading OR long-term strategic holding?"

GOLD_RULING = "Gold and silver held as wealth are zakatable at the value of their pure metal content."


@dataclass(frozen=True)
class ClassificationResult:
    classification: Classification
    islamic_ruling: str | None = None
    clarification_question: str | None = None


@dataclass(frozen=True)
class _Rule:
    keywords: tuple[str, ...]
    result: ClassificationResult


def _rule(classification: Classification, keywords: tuple[str, ...], ruling=None, question=None) -> _Rule:
    return _Rule(keywords, ClassificationResult(classification, ruling, question))


def normalize_name(name: str) -> str:
    """Lowercase, turn hyphens/underscores into spaces and collapse whitespace."""
    return " ".join(re.sub(r"[-_/]+", " ", name.lower()).split())


_Z = Classification.ZAKATABLE
_D = Classification.DEDUCTIBLE
_E = Classification.EXEMPT
_ND = Classification.NOT_DEDUCTIBLE
_NC = Classification.NEEDS_CLARIFICATION

ARCHETYPES: dict[str, ClassificationResult] = {
    "cash on hand": ClassificationResult(
        _Z, "Cash and bank balances are always zakatable as they represent liquid assets."
    ),
    "short term investments": ClassificationResult(
        _NC,
        "Investments held for trading are zakatable at market value; long-term strategic holdings are exempt.",
        TERM_QUESTION,
    ),
    "accounts payable": ClassificationResult(
        _NC,
        "Only obligations under Islamic financing reduce the zakat base.",
        FINANCING_QUESTION,
    ),
    "security deposits": ClassificationResult(
        _NC,
        "Deposits you paid remain your wealth; deposits you hold belong to others.",
        DEPOSIT_QUESTION,
    ),
    "bank loan": ClassificationResult(
        _ND, "Interest-based loans cannot reduce the zakat base per Islamic principles."
    ),
    "zakat already paid": ClassificationResult(
        _D, "Zakat already paid toward this year's obligation is deducted from the zakat base."
    ),
    "urgent debts": ClassificationResult(
        _D, "Debts due now reduce the wealth on which zakat is assessed."
    ),
}

# Evaluated in order; the first matching keyword wins.
RULES: tuple[_Rule, ...] = (
    # zakatable
    _rule(_Z, ("cash", "petty cash", "cash in bank", "bank balance"),
          "Cash and bank balances are always zakatable as they represent liquid assets."),
    _rule(_Z, ("gold", "silver", "bullion"), GOLD_RULING),
    _rule(_Z, ("accounts receivable", "receivable", "trade receivables", "customer receivables", "debtor"),
          "Receivables expected to be collected are zakatable at their recoverable value."),
    _rule(_Z, ("inventory", "stock", "merchandise", "goods for sale", "trading goods", "finished goods"),
          "Inventory held for sale is zakatable at market value."),
    _rule(_Z, ("raw materials", "work in progress", "wip"),
          "Raw materials and WIP are zakatable as they will become tradeable goods."),
    _rule(_Z, ("short term investment", "marketable securities", "trading securities", "quoted shares"),
          "Short-term investments held for trading are zakatable at market value."),
    _rule(_Z, ("sukuk", "islamic bond", "mudaraba", "musharaka investment"),
          "Islamic financial instruments are zakatable at their current value."),
    _rule(_Z, ("prepaid expense", "prepayment", "advance payment"),
          "Prepaid expenses that can be recovered are zakatable."),
    # deductible
    _rule(_D, ("accounts payable", "payables", "trade payables", "supplier payable", "creditor"),
          "Amounts owed to suppliers reduce the zakat base as they are current liabilities."),
    _rule(_D, ("wages payable", "salary payable", "employee payable", "accrued wages", "accrued salary"),
          "Owed wages are deductible as they are obligations to employees."),
    _rule(_D, ("accrued expense", "accrued liability", "expenses payable"),
          "Accrued expenses represent current obligations and are deductible."),
    _rule(_D, ("customer deposit", "advance from customer", "unearned revenue", "deferred revenue"),
          "Deposits held from customers are liabilities and reduce the zakat base."),
    _rule(_D, ("zakat payable", "zakat provision", "zakat liability"),
          "Previously calculated zakat not yet paid is deductible."),
    _rule(_D, ("tax payable", "income tax payable", "vat payable", "sales tax payable"),
          "Taxes owed to government are deductible current liabilities."),
    _rule(_D, ("islamic financing", "murabaha payable", "ijara payable", "ijarah payable", "islamic loan"),
          "Islamic financing obligations are deductible from the zakat base."),
    # exempt
    _rule(_E, ("fixed asset", "property plant equipment", "ppe", "building", "land", "machinery"),
          "Fixed assets used in business operations are exempt from zakat."),
    _rule(_E, ("furniture", "fixture", "office equipment", "computer equipment"),
          "Office equipment and furniture used for operations are exempt."),
    _rule(_E, ("vehicle", "motor vehicle", "company car", "delivery truck"),
          "Vehicles used for business operations are exempt from zakat."),
    _rule(_E, ("accumulated depreciation", "depreciation", "amortization"),
          "Depreciation is an accounting entry and is exempt."),
    _rule(_E, ("goodwill", "intangible asset", "trademark", "patent", "copyright"),
          "Intangible assets not held for sale are exempt from zakat."),
    _rule(_E, ("retained earnings", "accumulated profit", "reserve", "share capital", "equity"),
          "Equity items are not directly zakatable; the underlying assets are assessed instead."),
    _rule(_E, ("deferred tax", "deferred expense"),
          "Deferred items are accounting entries and exempt from direct zakat assessment."),
    # not deductible
    _rule(_ND, ("bank loan", "conventional loan", "interest loan", "mortgage", "bank borrowing"),
          "Interest-based loans cannot reduce the zakat base per Islamic principles."),
    _rule(_ND, ("long term debt", "long term loan", "bond payable", "debenture"),
          "Long-term debts generally do not reduce current zakat obligations."),
    _rule(_ND, ("interest payable", "finance charge", "bank charge"),
          "Interest-related charges are not deductible under Islamic principles."),
    # needs clarification
    _rule(_NC, ("equipment", "plant", "machine"), question=ASSET_USE_QUESTION.format(noun="equipment")),
    _rule(_NC, ("real estate", "property"), question=ASSET_USE_QUESTION.format(noun="property")),
    _rule(_NC, ("car", "truck", "fleet"), question=ASSET_USE_QUESTION.format(noun="vehicle")),
    _rule(_NC, ("short term loan", "current loan", "borrowing", "loan"), question=FINANCING_QUESTION),
    _rule(_NC, ("security deposit", "deposit", "refundable deposit"), question=DEPOSIT_QUESTION),
    _rule(_NC, ("investment", "investment in subsidiary", "investment in associate"), question=TERM_QUESTION),
)

_PATTERNS: tuple[tuple[re.Pattern, _Rule], ...] = tuple(
    (re.compile(r"\b" + re.escape(keyword)), rule) for rule in RULES for keyword in rule.keywords
)

UNRECOGNIZED = ClassificationResult(_NC, None, GENERIC_QUESTION)


def classify_line_item(name: str) -> ClassificationResult:
    """Classify a line item by its name.

    Exact archetypes ("Cash on Hand", "Bank Loan", ...) win over keyword
    rules. A keyword must start at a word boundary, so "ppe" matches
    "PPE - net" but not "shipper".
    """
    normalized = normalize_name(name)
    if normalized in ARCHETYPES:
        return ARCHETYPES[normalized]

    for pattern, rule in _PATTERNS:
        if pattern.search(normalized):
            return rule.result

    logger.debug(f"No classification rule for {name!r}; flagging for clarification")
    return UNRECOGNIZED


LIABILITY_RULINGS = {
    "islamic": "Islamic financing obligations due within the year are deductible from the zakat base.",
    "conventional": "Interest-based liabilities cannot reduce the zakat base per Islamic principles.",
    "long_term": "Long-term liabilities do not reduce the current zakat base.",
}


def classify_category_entry(
    name: str,
    category: BusinessCategory,
    is_islamic_financing: bool = False,
    term_type: TermType | None = None,
) -> ClassificationResult:
    """Classify an entry made under a business balance-sheet category.

    Liabilities are settled by the financing flag alone: only Islamic
    financing in current liabilities is deductible. Assets start from the
    keyword rules; a known term type settles investments directly.
    """
    category = BusinessCategory(category)
    match category:
        case BusinessCategory.CURRENT_LIABILITIES:
            if is_islamic_financing:
                return ClassificationResult(_D, LIABILITY_RULINGS["islamic"])
            return ClassificationResult(_ND, LIABILITY_RULINGS["conventional"])
        case BusinessCategory.LONG_TERM_LIABILITIES:
            ruling = LIABILITY_RULINGS["long_term"] if is_islamic_financing else LIABILITY_RULINGS["conventional"]
            return ClassificationResult(_ND, ruling)
        case BusinessCategory.CURRENT_ASSETS | BusinessCategory.FIXED_ASSETS:
            pass
        case _:
            raise AssertionError(f"Unhandled business category: {category}")

    if term_type is not None:
        if TermType(term_type) is TermType.SHORT:
            return ClassificationResult(_Z, "Short-term holdings are zakatable at market value.")
        return ClassificationResult(_E, "Long-term strategic holdings are exempt from zakat.")

    result = classify_line_item(name)
    if category is BusinessCategory.FIXED_ASSETS:
        if result.classification is _NC and result.clarification_question != GENERIC_QUESTION:
            return result
        return ClassificationResult(_E, "Fixed assets used in business operations are exempt from zakat.")

    if result.classification in (_D, _ND):
        # A liability keyword under current assets is contradictory; ask.
        return UNRECOGNIZED
    return result


def create_line_item(
    name: str,
    amount: Decimal | int | float | str,
    currency: str = "USD",
    normalizer: CurrencyNormalizer | None = None,
    market_value: Decimal | int | float | str | None = None,
) -> LineItem:
    """Build a classified LineItem, converted into the normalizer's base currency when one is given."""
    result = classify_line_item(name)
    item = LineItem(
        name=name,
        amount=amount,
        currency=currency,
        classification=result.classification,
        islamic_ruling=result.islamic_ruling,
        clarification_question=result.clarification_question,
        market_value=market_value,
    )
    if normalizer is not None:
        normalizer.normalize(item)
    return item


def create_gold_item(
    weight_grams: Decimal | int | float | str,
    karat: GoldKarat | str,
    price_per_gram: Decimal | int | float | str,
    currency: str = "USD",
    name: str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> LineItem:
    """Gold valued by its pure content: weight x price per gram x karat purity.

    ``price_per_gram`` is the price of pure (24k) gold in ``currency``.

    Raises:
        InvalidInputError: For an unknown karat or a negative weight or price.
    """
    try:
        karat = GoldKarat(karat)
    except ValueError as e:
        raise InvalidInputError(f"Unknown gold karat {karat!r}") from e
    weight = to_decimal(weight_grams, "gold weight")
    price = to_decimal(price_per_gram, "gold price per gram")
    item = LineItem(
        name=name or f"Gold ({karat.value})",
        amount=weight * price * karat.purity,
        currency=currency,
        classification=_Z,
        islamic_ruling=GOLD_RULING,
    )
    if normalizer is not None:
        normalizer.normalize(item)
    return item


def create_category_entry(
    name: str,
    amount: Decimal | int | float | str,
    category: BusinessCategory | str,
    currency: str = "USD",
    is_islamic_financing: bool = False,
    description: str = "",
    term_type: TermType | str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> CategoryEntry:
    entry = CategoryEntry(
        name=name,
        amount=amount,
        currency=currency,
        category=category,
        is_islamic_financing=is_islamic_financing,
        description=description,
        term_type=term_type,
    )
    result = classify_category_entry(entry.name, entry.category, entry.is_islamic_financing, entry.term_type)
    entry.classification = result.classification
    entry.islamic_ruling = result.islamic_ruling
    entry.clarification_question = result.clarification_question
    if normalizer is not None:
        normalizer.normalize(entry)
    return entry


# Template for manual entry mode: (name, side).
COMMON_LINE_ITEMS: tuple[tuple[str, str], ...] = (
    ("Cash on Hand", "asset"),
    ("Bank Balance", "asset"),
    ("Accounts Receivable", "asset"),
    ("Inventory", "asset"),
    ("Prepaid Expenses", "asset"),
    ("Fixed Assets", "asset"),
    ("Equipment", "asset"),
    ("Vehicles", "asset"),
    ("Land", "asset"),
    ("Building", "asset"),
    ("Short-term Investments", "asset"),
    ("Security Deposits", "asset"),
    ("Accounts Payable", "liability"),
    ("Wages Payable", "liability"),
    ("Accrued Expenses", "liability"),
    ("Customer Deposits", "liability"),
    ("Short-term Loan", "liability"),
    ("Bank Loan", "liability"),
    ("Tax Payable", "liability"),
    ("Zakat Payable", "liability"),
)


def create_common_items(currency: str = "USD", normalizer: CurrencyNormalizer | None = None) -> list[LineItem]:
    """Zero-amount, pre-classified items for every entry in COMMON_LINE_ITEMS."""
    return [create_line_item(name, 0, currency, normalizer) for name, _side in COMMON_LINE_ITEMS]
