from decimal import Decimal

import pytest

from wohngeld_prefill.exceptions import MalformedValueError
from wohngeld_prefill.formatting import (
    compact,
    format_currency,
    format_integer,
    normalize_frequency,
    parse_amount,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (463.25, "463,25"),
        (61.5, "61,50"),
        (0, "0,00"),
        (1234.5, "1234,50"),
        ("1.234,56", "1234,56"),
        ("463,25", "463,25"),
        ("463.25", "463,25"),
        ("855,42 €", "855,42"),
        (Decimal("2.005"), "2,01"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


def test_format_currency_none():
    assert format_currency(None) is None


@pytest.mark.parametrize("value", ["abc", float("nan"), float("inf"), True])
def test_malformed_amounts(value):
    with pytest.raises(MalformedValueError):
        parse_amount(value)


def test_malformed_value_is_a_value_error():
    with pytest.raises(ValueError):
        format_currency("zwölf")


def test_format_integer():
    assert format_integer(3) == "3"
    assert format_integer("3,0") == "3"
    assert format_integer(None) is None
    with pytest.raises(MalformedValueError):
        format_integer(2.5)


def test_compact():
    assert compact("DE89 3704 0044 0532 0130 00") == "DE89370400440532013000"
    assert compact(None) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "monatlich"),
        ("", "monatlich"),
        ("Monatlich", "monatlich"),
        ("monthly", "monatlich"),
        ("jährlich", "jährlich"),
        ("yearly", "jährlich"),
        ("täglich", "täglich"),
        ("wöchentlich", "monatlich"),
    ],
)
def test_normalize_frequency(value, expected):
    assert normalize_frequency(value) == expected
