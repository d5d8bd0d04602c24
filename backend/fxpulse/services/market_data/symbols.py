"""
Instrument Universe

Fixed currency universe and the symbol batch requested from the provider.
"""

from typing import Optional

CURRENCIES = ("USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CHF", "NZD")

# All 28 pairs of the 8 currencies, one direction each
FOREX_PAIRS = (
    # USD
    "EUR/USD", "GBP/USD", "AUD/USD", "NZD/USD", "USD/JPY", "USD/CAD", "USD/CHF",
    # EUR crosses
    "EUR/GBP", "EUR/JPY", "EUR/AUD", "EUR/CAD", "EUR/CHF", "EUR/NZD",
    # GBP crosses
    "GBP/JPY", "GBP/AUD", "GBP/CAD", "GBP/CHF", "GBP/NZD",
    # JPY crosses
    "AUD/JPY", "CAD/JPY", "CHF/JPY", "NZD/JPY",
    # Remaining crosses
    "AUD/CAD", "AUD/CHF", "AUD/NZD", "CAD/CHF", "CAD/NZD", "CHF/NZD",
)

# The one non-currency instrument; kept out of strength and matrix
GOLD_SYMBOL = "XAU/USD"

SYMBOL_BATCH = FOREX_PAIRS + (GOLD_SYMBOL,)


def split_symbol(symbol: str) -> Optional[tuple[str, str]]:
    """Split 'EUR/USD' into ('EUR', 'USD'). Returns None if not a pair."""
    parts = symbol.upper().split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


def is_gold(symbol: str) -> bool:
    return symbol.upper() == GOLD_SYMBOL
