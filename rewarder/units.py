"""
Conversion between human readable decimal amounts and integer base units.

Token amounts never touch a float here. Decimal strings are parsed as strings
and base units are handled as python ints, which are arbitrary precision.

    to_base_units("12.345", 18)  -> "12345000000000000000"
    from_base_units("12345000000000000000", 18)  -> "12.345"
"""

import re
from typing import Iterable, Union

from rewarder.errors import ConversionError
from rewarder.models.types import BigNumber

MAX_UINT256 = 2**256 - 1

# 10**77 is the largest power of ten below 2**256
MAX_PRECISION = 77

DECIMAL_PATTERN = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<fraction>[0-9]*))?")
BASE_UNITS_PATTERN = re.compile(r"[0-9]+")


def _check_precision(precision: int) -> None:
    if not isinstance(precision, int) or precision < 0 or precision > MAX_PRECISION:
        raise ConversionError(f"Invalid decimals: {precision}")


def _parse_base_units(amount: BigNumber) -> int:
    if not isinstance(amount, str) or not BASE_UNITS_PATTERN.fullmatch(amount):
        raise ConversionError(f"Invalid base units: {amount}")
    return int(amount)


def to_base_units(decimal_amount: str, precision: int) -> BigNumber:
    """
    Convert a decimal string to base units.

    Fractional digits beyond `precision` are dropped, not rounded:
    to_base_units("1.23456789", 4) == "12345"

    :param `decimal_amount`: eg "12.345", ".5" or "7."
    :param `precision`: token decimals, 0 to 77
    """
    if not isinstance(decimal_amount, str) or not decimal_amount:
        raise ConversionError(f"Invalid decimal amount: {decimal_amount}")
    _check_precision(precision)

    match = DECIMAL_PATTERN.fullmatch(decimal_amount)
    if not match or not (match["whole"] or match["fraction"]):
        raise ConversionError(f"Invalid decimal amount: {decimal_amount}")

    whole = match["whole"]
    fraction = (match["fraction"] or "").ljust(precision, "0")[:precision]

    result = (whole + fraction).lstrip("0") or "0"
    if not BASE_UNITS_PATTERN.fullmatch(result):
        raise ConversionError(
            f"Failed to convert {decimal_amount} to base units with {precision} decimals"
        )
    return result


def from_base_units(base_units: BigNumber, precision: int) -> str:
    """
    Convert base units back to a decimal string, trimming trailing zeros.
    from_base_units("1500000", 6) == "1.5"
    """
    if not isinstance(base_units, str) or not BASE_UNITS_PATTERN.fullmatch(base_units):
        raise ConversionError(f"Invalid base units: {base_units}")
    _check_precision(precision)

    if precision == 0:
        return base_units

    padded = base_units.zfill(precision + 1)
    split = len(padded) - precision
    whole = padded[:split].lstrip("0") or "0"
    fraction = padded[split:].rstrip("0")

    if not fraction:
        return whole
    return f"{whole}.{fraction}"


def add_base_units(a: BigNumber, b: BigNumber) -> BigNumber:
    return str(_parse_base_units(a) + _parse_base_units(b))


def subtract_base_units(a: BigNumber, b: BigNumber) -> BigNumber:
    """a - b, floored at zero. Base units are never negative."""
    result = _parse_base_units(a) - _parse_base_units(b)
    return "0" if result < 0 else str(result)


def compare_base_units(a: BigNumber, b: BigNumber) -> int:
    """-1 if a < b, 0 if equal, 1 if a > b"""
    x, y = _parse_base_units(a), _parse_base_units(b)
    return (x > y) - (x < y)


def sum_base_units(amounts: Iterable[BigNumber]) -> BigNumber:
    total = "0"
    for amount in amounts:
        total = add_base_units(total, amount)
    return total


def _parse_integer(amount: Union[str, int]) -> int:
    if isinstance(amount, bool):
        raise ValueError(amount)
    if isinstance(amount, int):
        return amount
    if not isinstance(amount, str) or not re.fullmatch(r"-?[0-9]+", amount):
        raise ValueError(amount)
    return int(amount)


def validate_amounts_for_on_chain(amounts: Iterable[Union[str, int]]) -> bool:
    """
    True only if every amount is an integer in [0, 2**256 - 1].
    A single bad amount rejects the whole set.
    """
    try:
        values = [_parse_integer(a) for a in amounts]
    except ValueError:
        return False
    return all(0 <= v <= MAX_UINT256 for v in values)
