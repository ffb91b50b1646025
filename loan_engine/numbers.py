"""Numeric helpers shared by the calculators and the roll-up aggregator.

Every currency amount in the engine goes through :func:`round2`, and every
value arriving from a form or a REST payload goes through
:func:`to_finite_number` before it reaches the arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Callable

from loan_engine.exceptions import InvalidInputError

Rounder = Callable[[Decimal], Decimal]

ZERO = Decimal("0")
CENT = Decimal("0.01")


def make_rounder(places: int = 2) -> Rounder:
    """Build a round-half-up rounder for the given number of places.

    Parameters
    ----------
    places : int
        Decimal places to keep.

    Returns
    -------
    Rounder
        Callable quantizing a ``Decimal``.
    """
    if places < 0:
        raise ValueError(f"places must be >= 0, got {places}")
    quantum = Decimal(1).scaleb(-places)

    def _round(value: Decimal) -> Decimal:
        return _quantize(to_decimal(value), quantum)

    return _round


def round2(value: Any) -> Decimal:
    """Round to 2 places, half-up (``2.345 -> 2.35``, ``-2.345 -> -2.35``)."""
    return _quantize(to_decimal(value), CENT)


def _quantize(number: Decimal, quantum: Decimal) -> Decimal:
    # The result needs every integer digit plus the kept places
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() - quantum.as_tuple().exponent + 2)
        return number.quantize(quantum, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Convert ``value`` to ``Decimal`` without going through binary floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_finite_number(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a raw input value to a finite ``Decimal``.

    ``None``, blank strings, unparseable strings, NaN and infinities all
    become ``default``. Values of other types (lists, dicts, ...) cannot be
    read as a number at all and are rejected.

    Parameters
    ----------
    value : Any
        Raw value from a form field or a REST payload.
    default : Decimal
        Fallback for missing or non-finite values.

    Returns
    -------
    Decimal
        Finite number.

    Raises
    ------
    InvalidInputError
        If ``value`` is of a type that has no numeric reading.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return default
        try:
            number = Decimal(text)
        except InvalidOperation:
            return default
    elif isinstance(value, (int, float, Decimal)):
        number = to_decimal(value)
    else:
        raise InvalidInputError(f"Cannot read {type(value).__name__} value {value!r} as a number")

    if not number.is_finite():
        return default
    return number
