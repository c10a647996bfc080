"""
Monetary value helpers.

All amounts in the ledger are ``Decimal`` quantized to two places with
ROUND_HALF_UP.  Floats are accepted at the edge only and converted through
their string form so binary artefacts never reach the journal.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a value to a two-place Decimal amount."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator * 100 to two places; 0 when denominator is 0."""
    if denominator == 0:
        return ZERO
    return money(numerator / denominator * 100)
