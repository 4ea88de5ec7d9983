from __future__ import annotations

import enum
from dataclasses import dataclass


class TextDirection(enum.Enum):
    LTR = "ltr"
    RTL = "rtl"


@dataclass(frozen=True)
class CurrencyOption:
    code: str
    symbol: str
    label: str


@dataclass(frozen=True)
class LanguageOption:
    code: str
    name: str
    flag: str
    direction: TextDirection = TextDirection.LTR


@dataclass(frozen=True)
class BudgetCategory:
    id: str
    name: str
    icon: str


CURRENCIES: tuple[CurrencyOption, ...] = (
    CurrencyOption("USD", "$", "US Dollar"),
    CurrencyOption("EUR", "€", "Euro"),
    CurrencyOption("GBP", "£", "British Pound"),
    CurrencyOption("JPY", "¥", "Japanese Yen"),
    CurrencyOption("AUD", "A$", "Australian Dollar"),
    CurrencyOption("CAD", "C$", "Canadian Dollar"),
    CurrencyOption("CHF", "Fr", "Swiss Franc"),
    CurrencyOption("INR", "₹", "Indian Rupee"),
    CurrencyOption("CNY", "¥", "Chinese Yuan"),
    CurrencyOption("BRL", "R$", "Brazilian Real"),
)

LANGUAGES: tuple[LanguageOption, ...] = (
    LanguageOption("es", "Español", "🇪🇸"),
    LanguageOption("en", "English", "🇺🇸"),
    LanguageOption("fr", "Français", "🇫🇷"),
    LanguageOption("de", "Deutsch", "🇩🇪"),
    LanguageOption("zh", "中文", "🇨🇳"),
    LanguageOption("ja", "日本語", "🇯🇵"),
    LanguageOption("pt", "Português", "🇧🇷"),
    LanguageOption("it", "Italiano", "🇮🇹"),
    LanguageOption("hi", "हिन्दी", "🇮🇳"),
    LanguageOption("ar", "العربية", "🇸🇦", TextDirection.RTL),
)

BUDGET_CATEGORIES: tuple[BudgetCategory, ...] = (
    BudgetCategory("housing", "Housing & Rent", "🏠"),
    BudgetCategory("groceries", "Groceries & Food", "🛒"),
    BudgetCategory("transport", "Transportation", "🚗"),
    BudgetCategory("utilities", "Utilities & Bills", "⚡"),
    BudgetCategory("leisure", "Dining & Leisure", "☕"),
    BudgetCategory("health", "Health & Fitness", "💪"),
    BudgetCategory("medical_insurance", "Medical Insurance", "🏥"),
    BudgetCategory("education", "Education", "🎓"),
    BudgetCategory("clothing", "Clothing", "👕"),
    BudgetCategory("personal_care", "Personal Care", "🧴"),
)

_CURRENCY_BY_CODE: dict[str, CurrencyOption] = {c.code: c for c in CURRENCIES}
_LANGUAGE_BY_CODE: dict[str, LanguageOption] = {lang.code: lang for lang in LANGUAGES}


def find_currency(code: str | None) -> CurrencyOption:
    """Look up a currency by ISO code, falling back to the first entry."""
    if code is None:
        return CURRENCIES[0]
    return _CURRENCY_BY_CODE.get(code.upper(), CURRENCIES[0])


def find_language(code: str | None) -> LanguageOption:
    """Look up a display language by code, falling back to the first entry."""
    if code is None:
        return LANGUAGES[0]
    return _LANGUAGE_BY_CODE.get(code.lower(), LANGUAGES[0])
