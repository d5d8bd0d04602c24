"""
Pair Matrix Synthesizer

Builds the full currency x currency matrix. Pairs that were not fetched
directly are inferred by inverting the fetched direction.
"""

from typing import Iterable

from fxpulse.schemas.market import MatrixCell, PairMatrix, Quote
from fxpulse.services.market_data.symbols import CURRENCIES, split_symbol


def empty_matrix(currencies: tuple[str, ...] = CURRENCIES) -> PairMatrix:
    return {base: {quote: None for quote in currencies} for base in currencies}


def invert_cell(cell: MatrixCell) -> MatrixCell:
    """Reverse direction of a cell; a zero price stays zero."""
    return MatrixCell(
        price=1 / cell.price if cell.price > 0 else 0.0,
        change=-cell.change,
    )


def build_pair_matrix(
    pairs: Iterable[Quote],
    currencies: tuple[str, ...] = CURRENCIES,
) -> PairMatrix:
    """
    Fill matrix[base][quote] from each fetched pair.

    The reverse cell is only synthesized while it is still empty, so a
    directly fetched reverse pair is never overwritten by an inferred one.
    Cells for which neither direction was supplied remain None, and the
    diagonal is never populated.
    """
    matrix = empty_matrix(currencies)

    for quote in pairs:
        legs = split_symbol(quote.symbol)
        if legs is None:
            continue
        base, counter = legs
        if base == counter or base not in matrix or counter not in matrix:
            continue

        direct = MatrixCell(price=quote.price, change=quote.percent_change)
        matrix[base][counter] = direct
        if matrix[counter][base] is None:
            matrix[counter][base] = invert_cell(direct)

    return matrix
