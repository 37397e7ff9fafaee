"""Locale-aware money and number formatting.

Formatters are built on first use and kept in a ``FormatterCache`` owned by
this module, keyed by (kind, currency, locale).
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from finanzas.services.currencies import CURRENCIES

# (group separator, decimal separator)
_SEPARATORS: dict[str, tuple[str, str]] = {
    "es-MX": (",", "."),
    "es-DO": (",", "."),
    "en-US": (",", "."),
    "es-ES": (".", ","),
}
_LANGUAGE_DEFAULTS: dict[str, str] = {"es": "es-MX", "en": "en-US"}

_ZERO_DECIMAL_CURRENCIES = frozenset({"CLP", "PYG"})

DEFAULT_LOCALE = "es-MX"


def normalize_locale(locale: str | None) -> str:
    if not locale:
        return DEFAULT_LOCALE
    locale = locale.replace("_", "-")
    if locale in _SEPARATORS:
        return locale
    return _LANGUAGE_DEFAULTS.get(locale.split("-")[0].lower(), DEFAULT_LOCALE)


@dataclass(frozen=True)
class NumberFormatter:
    group: str
    decimal: str
    places: int = 2
    prefix: str = ""

    def format(self, value: Decimal | float | int) -> str:
        quantum = Decimal(1).scaleb(-self.places)
        amount = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if amount < 0 else ""
        whole, _, frac = f"{abs(amount):f}".partition(".")

        groups = []
        while len(whole) > 3:
            groups.insert(0, whole[-3:])
            whole = whole[:-3]
        groups.insert(0, whole)

        text = self.group.join(groups)
        if self.places:
            text = f"{text}{self.decimal}{frac}"
        return f"{sign}{self.prefix}{text}"


class FormatterCache:
    """Lazily filled cache of formatters."""

    def __init__(self) -> None:
        self._formatters: dict[tuple[str, str, str], NumberFormatter] = {}

    def __len__(self) -> int:
        return len(self._formatters)

    def clear(self) -> None:
        self._formatters.clear()

    def currency(self, currency: str, locale: str | None = None) -> NumberFormatter:
        locale = normalize_locale(locale)
        key = ("currency", currency, locale)
        formatter = self._formatters.get(key)
        if formatter is None:
            group, decimal = _SEPARATORS[locale]
            info = CURRENCIES.get(currency)
            formatter = NumberFormatter(
                group=group,
                decimal=decimal,
                places=0 if currency in _ZERO_DECIMAL_CURRENCIES else 2,
                prefix=info.symbol if info else f"{currency} ",
            )
            self._formatters[key] = formatter
        return formatter

    def number(self, locale: str | None = None, places: int = 0) -> NumberFormatter:
        locale = normalize_locale(locale)
        key = ("number", str(places), locale)
        formatter = self._formatters.get(key)
        if formatter is None:
            group, decimal = _SEPARATORS[locale]
            formatter = NumberFormatter(group=group, decimal=decimal, places=places)
            self._formatters[key] = formatter
        return formatter


formatters = FormatterCache()


def format_currency(amount: Decimal | float | int, currency: str = "MXN", locale: str | None = None) -> str:
    return formatters.currency(currency, locale).format(amount)


def format_number(value: Decimal | float | int, locale: str | None = None) -> str:
    return formatters.number(locale).format(value)
