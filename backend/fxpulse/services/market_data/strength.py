"""
Currency Strength Index

Each pair adds its percent change to the base currency and subtracts it
from the quote currency, so the raw strengths always sum to zero.
Raw values are then rescaled to [-100, 100].
"""

from typing import Iterable

import numpy as np

from fxpulse.schemas.market import CurrencyStrength, Quote
from fxpulse.services.market_data.symbols import CURRENCIES, split_symbol


def calculate_currency_strength(
    pairs: Iterable[Quote],
    currencies: tuple[str, ...] = CURRENCIES,
) -> list[CurrencyStrength]:
    """
    Derive the strength index from pair changes.

    Currencies outside the universe are ignored. The result is sorted
    descending by raw strength.
    """
    raw = dict.fromkeys(currencies, 0.0)

    for quote in pairs:
        legs = split_symbol(quote.symbol)
        if legs is None:
            continue
        base, counter = legs
        if base in raw:
            raw[base] += quote.percent_change
        if counter in raw:
            raw[counter] -= quote.percent_change

    values = np.array([raw[c] for c in currencies], dtype=float)
    normalized = _normalize(values)

    strengths = [
        CurrencyStrength(
            currency=currency,
            strength=float(values[i]),
            normalized_strength=float(normalized[i]),
        )
        for i, currency in enumerate(currencies)
    ]
    # sorted() is stable, so ties keep universe order
    return sorted(strengths, key=lambda s: s.strength, reverse=True)


def _normalize(values: np.ndarray) -> np.ndarray:
    """Min-max rescale to [-100, 100]; all zeros when the range is empty."""
    if values.size == 0:
        return values
    low = values.min()
    spread = values.max() - low
    if spread <= 0:
        return np.zeros_like(values)
    scaled = (values - low) / spread * 200 - 100
    return np.clip(scaled, -100.0, 100.0)
