"""Supported currencies and the static fallback exchange-rate table.

Rates are expressed in units of the currency per one US dollar. They are the
offline fallback used whenever no live provider is configured or reachable,
so they are deliberately approximate.
"""

from decimal import Decimal

# code -> (units per USD, symbol, name)
_CURRENCY_TABLE: dict[str, tuple[str, str, str]] = {
    "USD": ("1", "$", "US Dollar"),
    "EUR": ("0.92", "€", "Euro"),
    "GBP": ("0.79", "£", "British Pound"),
    "JPY": ("149.50", "¥", "Japanese Yen"),
    "AUD": ("1.53", "A$", "Australian Dollar"),
    "CAD": ("1.36", "C$", "Canadian Dollar"),
    "CHF": ("0.88", "Fr", "Swiss Franc"),
    "CNY": ("7.24", "¥", "Chinese Yuan"),
    "HKD": ("7.82", "HK$", "Hong Kong Dollar"),
    "NZD": ("1.64", "NZ$", "New Zealand Dollar"),
    "SEK": ("10.42", "kr", "Swedish Krona"),
    "KRW": ("1320", "₩", "South Korean Won"),
    "SGD": ("1.34", "S$", "Singapore Dollar"),
    "NOK": ("10.85", "kr", "Norwegian Krone"),
    "MXN": ("17.15", "$", "Mexican Peso"),
    "INR": ("83.12", "₹", "Indian Rupee"),
    "RUB": ("92.50", "₽", "Russian Ruble"),
    "ZAR": ("18.65", "R", "South African Rand"),
    "TRY": ("32.15", "₺", "Turkish Lira"),
    "BRL": ("4.97", "R$", "Brazilian Real"),
    "TWD": ("31.50", "NT$", "Taiwan Dollar"),
    "DKK": ("6.88", "kr", "Danish Krone"),
    "PLN": ("4.02", "zł", "Polish Zloty"),
    "THB": ("35.50", "฿", "Thai Baht"),
    "IDR": ("15750", "Rp", "Indonesian Rupiah"),
    "HUF": ("358", "Ft", "Hungarian Forint"),
    "CZK": ("23.25", "Kč", "Czech Koruna"),
    "ILS": ("3.65", "₪", "Israeli Shekel"),
    "CLP": ("920", "$", "Chilean Peso"),
    "PHP": ("56.50", "₱", "Philippine Peso"),
    "AED": ("3.67", "د.إ", "UAE Dirham"),
    "SAR": ("3.75", "ر.س", "Saudi Riyal"),
    "MYR": ("4.72", "RM", "Malaysian Ringgit"),
    "RON": ("4.58", "lei", "Romanian Leu"),
    "PKR": ("278", "₨", "Pakistani Rupee"),
    "EGP": ("30.90", "ج.م", "Egyptian Pound"),
    "QAR": ("3.64", "ر.ق", "Qatari Riyal"),
    "KWD": ("0.31", "د.ك", "Kuwaiti Dinar"),
    "BHD": ("0.38", "د.ب", "Bahraini Dinar"),
    "OMR": ("0.38", "ر.ع", "Omani Rial"),
    "NGN": ("1550", "₦", "Nigerian Naira"),
    "BDT": ("110", "৳", "Bangladeshi Taka"),
    "VND": ("24500", "₫", "Vietnamese Dong"),
    "COP": ("4050", "$", "Colombian Peso"),
    "ARS": ("850", "$", "Argentine Peso"),
    "UAH": ("37.50", "₴", "Ukrainian Hryvnia"),
    "PEN": ("3.75", "S/", "Peruvian Sol"),
    "MAD": ("10.05", "د.م", "Moroccan Dirham"),
    "JOD": ("0.71", "د.أ", "Jordanian Dinar"),
    "LBP": ("89500", "ل.ل", "Lebanese Pound"),
}

STATIC_USD_RATES: dict[str, Decimal] = {code: Decimal(row[0]) for code, row in _CURRENCY_TABLE.items()}

SUPPORTED_CURRENCIES: tuple[str, ...] = tuple(_CURRENCY_TABLE)


def is_supported_currency(code: str) -> bool:
    """Check whether a currency code is in the supported table (case-insensitive)."""
    return isinstance(code, str) and code.strip().upper() in _CURRENCY_TABLE


def currency_symbol(code: str) -> str:
    row = _CURRENCY_TABLE.get(code.upper())
    return row[1] if row else code


def currency_name(code: str) -> str:
    row = _CURRENCY_TABLE.get(code.upper())
    return row[2] if row else code
