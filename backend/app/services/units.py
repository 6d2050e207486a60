"""
Coleta Backend — Weight Unit Normalization
============================================

What:  Converts between the grams the API speaks and the kilograms the ledger stores.
Why:   Clients send and display grams; measurements.weight_kg is NUMERIC kilograms.
How:   All arithmetic is done with decimal.Decimal. Floats are converted through
       their shortest repr (Decimal(str(x))), never through binary arithmetic.

Round-trip guarantee:
    kilograms_to_grams(grams_to_kilograms(g)) == g for every positive integer g.
    Fractional grams are rounded half-up to the gram on the way in; weights
    under half a gram are rejected because they would be stored as 0.000 kg.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

GRAMS_PER_KILOGRAM = Decimal(1000)

_ONE_GRAM = Decimal(1)
# measurements.weight_kg is NUMERIC(10, 3)
STORAGE_SCALE = Decimal("0.001")
_CENTS = Decimal("0.01")

Number = Union[int, float, Decimal]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("weight must be a number, not a boolean")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"weight must be finite, got {value!r}")
        return Decimal(repr(value))
    return Decimal(value)


def grams_to_kilograms(grams: Number) -> Decimal:
    """
    Inbound conversion: grams from the client → kilograms for storage.

    The result is rounded half-up to the ledger's scale (whole grams in
    thousandths of a kilogram), so what is returned is exactly what
    measurements.weight_kg will hold.

    Raises:
        ValueError: weight is not finite, or is not strictly positive once
            rounded to the storage scale (anything below half a gram).
            Validation rejects these before this point; the normalizer
            never clamps.
    """
    value = _to_decimal(grams)
    if not value.is_finite() or value <= 0:
        raise ValueError(f"weight must be greater than zero, got {grams!r}")
    kilograms = (value / GRAMS_PER_KILOGRAM).quantize(STORAGE_SCALE, rounding=ROUND_HALF_UP)
    if kilograms <= 0:
        raise ValueError(f"weight rounds to zero at the storage scale, got {grams!r}")
    return kilograms


def kilograms_to_grams(kilograms: Number) -> int:
    """Outbound conversion: stored kilograms → nearest integer gram (half-up)."""
    grams = _to_decimal(kilograms) * GRAMS_PER_KILOGRAM
    return int(grams.quantize(_ONE_GRAM, rounding=ROUND_HALF_UP))


def round_kilograms(kilograms: Number) -> float:
    """Two-decimal kilogram total for display (leaderboard)."""
    return float(_to_decimal(kilograms).quantize(_CENTS, rounding=ROUND_HALF_UP))
