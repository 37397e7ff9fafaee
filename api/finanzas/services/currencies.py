"""Supported currencies and the approximate USD-pivot rates used for net worth."""
from decimal import Decimal
from typing import NamedTuple


class CurrencyInfo(NamedTuple):
    code: str
    name: str
    symbol: str
    region: str


CURRENCIES: dict[str, CurrencyInfo] = {
    c.code: c
    for c in [
        # North America
        CurrencyInfo("USD", "US dollar",           "$",    "north_america"),
        CurrencyInfo("MXN", "Mexican peso",        "$",    "north_america"),
        CurrencyInfo("CAD", "Canadian dollar",     "C$",   "north_america"),
        # Caribbean
        CurrencyInfo("DOP", "Dominican peso",      "RD$",  "caribbean"),
        CurrencyInfo("HTG", "Haitian gourde",      "G",    "caribbean"),
        CurrencyInfo("JMD", "Jamaican dollar",     "J$",   "caribbean"),
        CurrencyInfo("TTD", "Trinidad dollar",     "TT$",  "caribbean"),
        CurrencyInfo("BBD", "Barbadian dollar",    "Bds$", "caribbean"),
        CurrencyInfo("BSD", "Bahamian dollar",     "B$",   "caribbean"),
        CurrencyInfo("CUP", "Cuban peso",          "₱",    "caribbean"),
        # Central America
        CurrencyInfo("GTQ", "Guatemalan quetzal",  "Q",    "central_america"),
        CurrencyInfo("HNL", "Honduran lempira",    "L",    "central_america"),
        CurrencyInfo("NIO", "Nicaraguan córdoba",  "C$",   "central_america"),
        CurrencyInfo("CRC", "Costa Rican colón",   "₡",    "central_america"),
        CurrencyInfo("PAB", "Panamanian balboa",   "B/.",  "central_america"),
        # South America
        CurrencyInfo("COP", "Colombian peso",      "$",    "south_america"),
        CurrencyInfo("VES", "Venezuelan bolívar",  "Bs.",  "south_america"),
        CurrencyInfo("PEN", "Peruvian sol",        "S/",   "south_america"),
        CurrencyInfo("CLP", "Chilean peso",        "$",    "south_america"),
        CurrencyInfo("ARS", "Argentine peso",      "$",    "south_america"),
        CurrencyInfo("BRL", "Brazilian real",      "R$",   "south_america"),
        CurrencyInfo("UYU", "Uruguayan peso",      "$U",   "south_america"),
        CurrencyInfo("PYG", "Paraguayan guaraní",  "₲",    "south_america"),
        CurrencyInfo("BOB", "Bolivian boliviano",  "Bs",   "south_america"),
        # Europe
        CurrencyInfo("EUR", "Euro",                "€",    "europe"),
        CurrencyInfo("GBP", "Pound sterling",      "£",    "europe"),
        CurrencyInfo("CHF", "Swiss franc",         "CHF",  "europe"),
    ]
}

SUPPORTED_CURRENCIES = frozenset(CURRENCIES)

# Units of each currency per 1 USD. Approximate on purpose: net worth is a trend, not a ledger.
USD_RATES: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "MXN": Decimal("17"),
    "DOP": Decimal("58"),
    "CAD": Decimal("1.36"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "CHF": Decimal("0.88"),
    "COP": Decimal("4200"),
    "BRL": Decimal("5.1"),
    "ARS": Decimal("900"),
    "CLP": Decimal("950"),
    "PEN": Decimal("3.7"),
    "UYU": Decimal("40"),
    "PYG": Decimal("7500"),
    "BOB": Decimal("6.9"),
    "VES": Decimal("36"),
    "CRC": Decimal("510"),
    "GTQ": Decimal("7.8"),
    "HNL": Decimal("25"),
    "NIO": Decimal("37"),
    "PAB": Decimal("1"),
    "HTG": Decimal("132"),
    "JMD": Decimal("156"),
    "TTD": Decimal("6.8"),
    "BBD": Decimal("2"),
    "BSD": Decimal("1"),
    "CUP": Decimal("24"),
}


def usd_rate(currency: str) -> Decimal:
    return USD_RATES.get(currency, Decimal("1"))


def convert(amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
    """Convert through USD. Unknown currencies are treated as USD-pegged."""
    if from_currency == to_currency:
        return amount
    return amount / usd_rate(from_currency) * usd_rate(to_currency)
