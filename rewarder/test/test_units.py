import pytest

from rewarder.errors import ConversionError
from rewarder.units import (
    MAX_UINT256,
    add_base_units,
    compare_base_units,
    from_base_units,
    subtract_base_units,
    sum_base_units,
    to_base_units,
    validate_amounts_for_on_chain,
)


@pytest.mark.parametrize(
    "amount, precision, expected",
    [
        ("12.345", 18, "12345000000000000000"),
        ("1.5", 6, "1500000"),
        ("100", 0, "100"),
        (".5", 6, "500000"),
        ("7.", 2, "700"),
        ("0", 6, "0"),
        ("0.000001", 6, "1"),
        ("000123.4", 1, "1234"),
    ],
)
def test_to_base_units(amount, precision, expected):
    assert to_base_units(amount, precision) == expected


def test_to_base_units_truncates_extra_decimals():
    assert to_base_units("1.23456789", 4) == "12345"
    assert to_base_units("0.0000009", 6) == "0"
    assert to_base_units("1.99", 0) == "1"


@pytest.mark.parametrize(
    "amount", ["", ".", "abc", "-1", "1.2.3", "1e18", " 1", "1,000", None]
)
def test_to_base_units_rejects_malformed(amount):
    with pytest.raises(ConversionError):
        to_base_units(amount, 18)


@pytest.mark.parametrize("precision", [-1, 78, 1.5])
def test_invalid_precision(precision):
    with pytest.raises(ConversionError):
        to_base_units("1", precision)
    with pytest.raises(ConversionError):
        from_base_units("1", precision)


@pytest.mark.parametrize(
    "base_units, precision, expected",
    [
        ("1500000", 6, "1.5"),
        ("1000000", 6, "1"),
        ("1", 18, "0.000000000000000001"),
        ("0", 6, "0"),
        ("123", 0, "123"),
        ("12345000000000000000", 18, "12.345"),
    ],
)
def test_from_base_units(base_units, precision, expected):
    assert from_base_units(base_units, precision) == expected


@pytest.mark.parametrize("base_units", ["", "1.5", "-1", "0x10", None])
def test_from_base_units_rejects_malformed(base_units):
    with pytest.raises(ConversionError):
        from_base_units(base_units, 6)


@pytest.mark.parametrize(
    "amount, precision",
    [("12.345", 18), ("0.5", 6), ("99999999.12345678", 8), ("42", 0), ("1.000001", 6)],
)
def test_round_trip(amount, precision):
    assert from_base_units(to_base_units(amount, precision), precision) == amount


def test_round_trip_keeps_base_units():
    # uint256 max with 18 decimals
    base = str(MAX_UINT256)
    assert to_base_units(from_base_units(base, 18), 18) == base


def test_arithmetic():
    a = "100000000000000000000000000000000000000"
    b = "1"
    assert add_base_units(a, b) == "100000000000000000000000000000000000001"
    assert subtract_base_units(add_base_units(a, b), b) == a
    assert subtract_base_units("3", "5") == "0"
    assert subtract_base_units("5", "5") == "0"
    assert sum_base_units([]) == "0"
    assert sum_base_units(["1", "2", "3"]) == "6"


def test_compare_is_a_total_order():
    assert compare_base_units("1", "2") == -1
    assert compare_base_units("2", "1") == 1
    assert compare_base_units("2", "2") == 0
    # numeric, not lexicographic
    assert compare_base_units("10", "9") == 1


@pytest.mark.parametrize("bad", ["1.5", "-1", "", "abc"])
def test_arithmetic_rejects_non_integers(bad):
    with pytest.raises(ConversionError):
        add_base_units("1", bad)
    with pytest.raises(ConversionError):
        compare_base_units(bad, "1")


@pytest.mark.parametrize(
    "amounts, expected",
    [
        (["0"], True),
        (["1", "2", 3], True),
        ([str(MAX_UINT256)], True),
        ([MAX_UINT256], True),
        ([str(2**256)], False),
        (["-1"], False),
        (["1", "-1"], False),
        (["1.5"], False),
        (["abc"], False),
        ([True], False),
        ([], True),
    ],
)
def test_validate_amounts_for_on_chain(amounts, expected):
    assert validate_amounts_for_on_chain(amounts) is expected
