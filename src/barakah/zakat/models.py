"""Zakat data models.

Line items, business category entries, nisab configuration, hawl windows,
saved calculation records and the portfolios that own them. All monetary
values are ``Decimal``; anything numeric handed in is coerced in
``__post_init__`` and rejected when it is negative or not a number.
Every persisted type round-trips through ``to_dict`` / ``from_dict`` with
Decimals written as strings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from barakah.core.exceptions import InvalidInputError, NisabConfigurationError
from barakah.zakat.currencies import is_supported_currency


class Classification(StrEnum):
    """Zakat treatment of a single line item. The set is closed."""

    ZAKATABLE = "zakatable"
    DEDUCTIBLE = "deductible"
    EXEMPT = "exempt"
    NOT_DEDUCTIBLE = "not_deductible"
    NEEDS_CLARIFICATION = "needs_clarification"


class BusinessCategory(StrEnum):
    CURRENT_ASSETS = "current_assets"
    FIXED_ASSETS = "fixed_assets"
    CURRENT_LIABILITIES = "current_liabilities"
    LONG_TERM_LIABILITIES = "long_term_liabilities"

    @property
    def is_liability(self) -> bool:
        return self in (BusinessCategory.CURRENT_LIABILITIES, BusinessCategory.LONG_TERM_LIABILITIES)


class TermType(StrEnum):
    SHORT = "short"
    LONG = "long"


class NisabBasis(StrEnum):
    """Metal the nisab threshold is measured against."""

    GOLD = "gold"
    SILVER = "silver"

    @property
    def grams(self) -> Decimal:
        return NISAB_GRAMS[self]


NISAB_GRAMS: dict[NisabBasis, Decimal] = {
    NisabBasis.GOLD: Decimal("85"),
    NisabBasis.SILVER: Decimal("595"),
}


class GoldKarat(StrEnum):
    K24 = "24k"
    K21 = "21k"
    K18 = "18k"

    @property
    def purity(self) -> Decimal:
        return GOLD_PURITY[self]


GOLD_PURITY: dict[GoldKarat, Decimal] = {
    GoldKarat.K24: Decimal("1"),
    GoldKarat.K21: Decimal("0.875"),
    GoldKarat.K18: Decimal("0.75"),
}


class CalendarType(StrEnum):
    ISLAMIC = "islamic"
    WESTERN = "western"


class PortfolioType(StrEnum):
    PERSONAL = "personal"
    BUSINESS = "business"


class EntityType(StrEnum):
    """Who a saved calculation was made for."""

    PERSONAL = "personal"
    BUSINESS = "business"
    COMPANY = "company"


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def to_decimal(value: Any, field_name: str, *, allow_negative: bool = False) -> Decimal:
    """Coerce ``value`` to a finite Decimal, raising InvalidInputError otherwise."""
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise InvalidInputError(f"{field_name} must be a number, got {value!r}") from e
    if not result.is_finite():
        raise InvalidInputError(f"{field_name} must be finite, got {value!r}")
    if not allow_negative and result < 0:
        raise InvalidInputError(f"{field_name} cannot be negative: {result}")
    return result


def normalize_currency(code: Any) -> str:
    if not is_supported_currency(code):
        raise InvalidInputError(f"Unsupported currency code: {code!r}")
    return code.strip().upper()


def _optional_decimal(value: Any, field_name: str) -> Decimal | None:
    if value is None or value == "":
        return None
    return to_decimal(value, field_name)


def _str_or_none(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass
class LineItem:
    """A single balance entered by the user.

    Attributes:
        name: Free-text label, used for keyword classification.
        amount: Book amount in ``currency``.
        currency: ISO code the amount was entered in.
        classification: Zakat treatment.
        converted_amount: ``amount`` expressed in the session's base currency.
        islamic_ruling: Short AAOIFI-style justification for the classification.
        clarification_question: Question shown when the item needs clarification.
        clarification_answer: The answer that resolved it, if any.
        market_value: Optional current market value in ``currency``. When set it
            replaces ``amount`` in the zakatable total.
        converted_market_value: ``market_value`` in the base currency.
    """

    name: str
    amount: Decimal
    currency: str = "USD"
    classification: Classification = Classification.NEEDS_CLARIFICATION
    converted_amount: Decimal | None = None
    islamic_ruling: str | None = None
    clarification_question: str | None = None
    clarification_answer: str | None = None
    market_value: Decimal | None = None
    converted_market_value: Decimal | None = None
    id: str = field(default_factory=lambda: new_id("item"))

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidInputError("Line item name cannot be empty")
        self.name = self.name.strip()
        self.amount = to_decimal(self.amount, f"{self.name} amount")
        self.currency = normalize_currency(self.currency)
        try:
            self.classification = Classification(self.classification)
        except ValueError as e:
            raise InvalidInputError(f"Unknown classification: {self.classification!r}") from e

        if self.converted_amount is None:
            self.converted_amount = self.amount
        else:
            self.converted_amount = to_decimal(self.converted_amount, f"{self.name} converted amount")

        self.market_value = _optional_decimal(self.market_value, f"{self.name} market value")
        if self.market_value is None:
            self.converted_market_value = None
        elif self.converted_market_value is None:
            self.converted_market_value = self.market_value
        else:
            self.converted_market_value = to_decimal(self.converted_market_value, f"{self.name} converted market value")

    @property
    def is_resolved(self) -> bool:
        return self.classification != Classification.NEEDS_CLARIFICATION

    @property
    def zakatable_value(self) -> Decimal:
        """Base-currency value counted when the item is zakatable."""
        if self.converted_market_value is not None:
            return self.converted_market_value
        return self.converted_amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "amount": str(self.amount),
            "currency": self.currency,
            "classification": self.classification.value,
            "converted_amount": str(self.converted_amount),
            "islamic_ruling": self.islamic_ruling,
            "clarification_question": self.clarification_question,
            "clarification_answer": self.clarification_answer,
            "market_value": _str_or_none(self.market_value),
            "converted_market_value": _str_or_none(self.converted_market_value),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        return cls(
            id=data.get("id") or new_id("item"),
            name=data["name"],
            amount=data["amount"],
            currency=data.get("currency", "USD"),
            classification=data.get("classification", Classification.NEEDS_CLARIFICATION),
            converted_amount=data.get("converted_amount"),
            islamic_ruling=data.get("islamic_ruling"),
            clarification_question=data.get("clarification_question"),
            clarification_answer=data.get("clarification_answer"),
            market_value=data.get("market_value"),
            converted_market_value=data.get("converted_market_value"),
        )


@dataclass
class CategoryEntry(LineItem):
    """A line item entered under a business balance-sheet category.

    Liabilities carry an ``is_islamic_financing`` flag; only those flagged as
    Islamic financing can ever be deductible.
    """

    category: BusinessCategory = BusinessCategory.CURRENT_ASSETS
    is_islamic_financing: bool = False
    description: str = ""
    term_type: TermType | None = None

    def __post_init__(self):
        super().__post_init__()
        try:
            self.category = BusinessCategory(self.category)
            self.term_type = TermType(self.term_type) if self.term_type else None
        except ValueError as e:
            raise InvalidInputError(f"Invalid category entry for {self.name}: {e}") from e
        self.is_islamic_financing = bool(self.is_islamic_financing)

    @property
    def is_conventional_liability(self) -> bool:
        return self.category.is_liability and not self.is_islamic_financing

    @property
    def can_be_deductible(self) -> bool:
        return self.category is BusinessCategory.CURRENT_LIABILITIES and self.is_islamic_financing

    def restrict(self, classification: Classification) -> Classification:
        """Downgrade outcomes ruled out by the category and financing flag."""
        if self.is_conventional_liability:
            return Classification.NOT_DEDUCTIBLE
        if classification is Classification.DEDUCTIBLE and not self.can_be_deductible:
            return Classification.NOT_DEDUCTIBLE
        return classification

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "category": self.category.value,
                "is_islamic_financing": self.is_islamic_financing,
                "description": self.description,
                "term_type": self.term_type.value if self.term_type else None,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CategoryEntry:
        base = LineItem.from_dict(data)
        return cls(
            **{k: getattr(base, k) for k in _LINE_ITEM_FIELDS},
            category=data["category"],
            is_islamic_financing=data.get("is_islamic_financing", False),
            description=data.get("description", ""),
            term_type=data.get("term_type"),
        )


_LINE_ITEM_FIELDS = (
    "id",
    "name",
    "amount",
    "currency",
    "classification",
    "converted_amount",
    "islamic_ruling",
    "clarification_question",
    "clarification_answer",
    "market_value",
    "converted_market_value",
)


def item_from_dict(data: dict[str, Any]) -> LineItem:
    """Rebuild a LineItem or CategoryEntry from its dict form."""
    if "category" in data:
        return CategoryEntry.from_dict(data)
    return LineItem.from_dict(data)


@dataclass
class NisabConfig:
    """Inputs for the nisab threshold. The threshold is derived on every read."""

    price_per_gram: Decimal
    basis: NisabBasis = NisabBasis.GOLD
    calendar_type: CalendarType = CalendarType.ISLAMIC
    currency: str = "USD"

    def __post_init__(self):
        try:
            price = to_decimal(self.price_per_gram, "price_per_gram", allow_negative=True)
        except InvalidInputError as e:
            raise NisabConfigurationError(str(e)) from e
        if price <= 0:
            raise NisabConfigurationError(f"Metal price per gram must be positive, got {price}")
        self.price_per_gram = price
        self.basis = NisabBasis(self.basis)
        self.calendar_type = CalendarType(self.calendar_type)
        self.currency = normalize_currency(self.currency)

    @property
    def threshold(self) -> Decimal:
        return self.price_per_gram * self.basis.grams

    def to_dict(self) -> dict[str, Any]:
        return {
            "price_per_gram": str(self.price_per_gram),
            "basis": self.basis.value,
            "calendar_type": self.calendar_type.value,
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NisabConfig:
        return cls(
            price_per_gram=data["price_per_gram"],
            basis=data.get("basis", NisabBasis.GOLD),
            calendar_type=data.get("calendar_type", CalendarType.ISLAMIC),
            currency=data.get("currency", "USD"),
        )


@dataclass(frozen=True)
class HawlInfo:
    """The current lunar-year window for an entity."""

    start_date: date
    end_date: date

    def days_remaining(self, today: date) -> int:
        return max(0, (self.end_date - today).days)


@dataclass(frozen=True)
class CalculationRecord:
    """Immutable snapshot of a finalized calculation.

    Only ``paid`` may change after creation, and only by building a new
    record through ``mark_paid``.
    """

    entity_name: str
    total_assets: Decimal
    total_deductions: Decimal
    net_wealth: Decimal
    nisab_threshold: Decimal
    zakat_due: Decimal
    currency: str
    calendar_type: CalendarType
    meets_nisab: bool
    line_items_snapshot: tuple[dict[str, Any], ...] = ()
    entity_type: EntityType = EntityType.PERSONAL
    date: datetime = field(default_factory=datetime.now)
    hijri_date: str | None = None
    paid: bool = False
    id: str = field(default_factory=lambda: new_id("rec"))

    def __post_init__(self):
        for name in ("total_assets", "total_deductions", "net_wealth", "nisab_threshold", "zakat_due"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name, allow_negative=True))
        object.__setattr__(self, "calendar_type", CalendarType(self.calendar_type))
        object.__setattr__(self, "entity_type", EntityType(self.entity_type))
        object.__setattr__(self, "line_items_snapshot", tuple(dict(d) for d in self.line_items_snapshot))

    def mark_paid(self, paid: bool = True) -> CalculationRecord:
        return replace(self, paid=paid)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "entity_name": self.entity_name,
            "entity_type": self.entity_type.value,
            "total_assets": str(self.total_assets),
            "total_deductions": str(self.total_deductions),
            "net_wealth": str(self.net_wealth),
            "nisab_threshold": str(self.nisab_threshold),
            "zakat_due": str(self.zakat_due),
            "currency": self.currency,
            "calendar_type": self.calendar_type.value,
            "meets_nisab": self.meets_nisab,
            "line_items_snapshot": [dict(d) for d in self.line_items_snapshot],
            "hijri_date": self.hijri_date,
            "paid": self.paid,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalculationRecord:
        return cls(
            id=data["id"],
            date=_parse_datetime(data["date"]),
            entity_name=data["entity_name"],
            entity_type=data.get("entity_type", EntityType.PERSONAL),
            total_assets=data["total_assets"],
            total_deductions=data["total_deductions"],
            net_wealth=data["net_wealth"],
            nisab_threshold=data["nisab_threshold"],
            zakat_due=data["zakat_due"],
            currency=data["currency"],
            calendar_type=data["calendar_type"],
            meets_nisab=data["meets_nisab"],
            line_items_snapshot=tuple(data.get("line_items_snapshot", ())),
            hijri_date=data.get("hijri_date"),
            paid=data.get("paid", False),
        )


@dataclass
class Company:
    """Lightweight company balance sheet owned by a personal account."""

    name: str
    cash: Decimal = Decimal("0")
    receivables: Decimal = Decimal("0")
    inventory: Decimal = Decimal("0")
    investments: Decimal = Decimal("0")
    other_current_assets: Decimal = Decimal("0")
    current_liabilities: Decimal = Decimal("0")
    islamic_financing: Decimal = Decimal("0")
    conventional_debt: Decimal = Decimal("0")
    currency: str = "USD"
    hawl_start_date: date | None = None
    id: str = field(default_factory=lambda: new_id("co"))

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidInputError("Company name cannot be empty")
        self.name = self.name.strip()
        for name in _COMPANY_AMOUNTS:
            setattr(self, name, to_decimal(getattr(self, name), f"{self.name} {name}"))
        self.currency = normalize_currency(self.currency)
        if self.hawl_start_date is not None:
            self.hawl_start_date = _parse_date(self.hawl_start_date)

    @property
    def total_assets(self) -> Decimal:
        return self.cash + self.receivables + self.inventory + self.investments + self.other_current_assets

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "currency": self.currency}
        data.update({name: str(getattr(self, name)) for name in _COMPANY_AMOUNTS})
        data["hawl_start_date"] = self.hawl_start_date.isoformat() if self.hawl_start_date else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Company:
        return cls(
            id=data.get("id") or new_id("co"),
            name=data["name"],
            currency=data.get("currency", "USD"),
            hawl_start_date=data.get("hawl_start_date"),
            **{name: data.get(name, "0") for name in _COMPANY_AMOUNTS},
        )


_COMPANY_AMOUNTS = (
    "cash",
    "receivables",
    "inventory",
    "investments",
    "other_current_assets",
    "current_liabilities",
    "islamic_financing",
    "conventional_debt",
)


@dataclass
class Portfolio:
    """Named container owning saved calculation records.

    Personal portfolios may also own lightweight ``Company`` records.
    """

    name: str
    type: PortfolioType = PortfolioType.PERSONAL
    company_name: str | None = None
    industry_type: str | None = None
    records: list[CalculationRecord] = field(default_factory=list)
    companies: list[Company] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: new_id("pf"))

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidInputError("Portfolio name cannot be empty")
        self.name = self.name.strip()
        self.type = PortfolioType(self.type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "company_name": self.company_name,
            "industry_type": self.industry_type,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "records": [r.to_dict() for r in self.records],
            "companies": [c.to_dict() for c in self.companies],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Portfolio:
        return cls(
            id=data["id"],
            name=data["name"],
            type=data.get("type", PortfolioType.PERSONAL),
            company_name=data.get("company_name"),
            industry_type=data.get("industry_type"),
            created_at=_parse_datetime(data["created_at"]),
            updated_at=_parse_datetime(data["updated_at"]),
            records=[CalculationRecord.from_dict(r) for r in data.get("records", [])],
            companies=[Company.from_dict(c) for c in data.get("companies", [])],
        )
