"""Value formatting following German form conventions."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from .exceptions import MalformedValueError
from .normalizer import normalize

Number = Union[int, float, Decimal, str]

_CENT = Decimal("0.01")
_GERMAN_AMOUNT = re.compile(r"^-?\d{1,3}(\.\d{3})*(,\d+)?$|^-?\d+(,\d+)?$")


def parse_amount(value: Number) -> Decimal:
    """
    Convert a number or a German/English formatted amount string to Decimal.

    Accepts "1.234,56", "463,25", "463.25" and plain numbers.
    """
    if isinstance(value, bool):
        raise MalformedValueError(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = str(value).strip().replace("€", "").replace(" ", "")
        if _GERMAN_AMOUNT.match(text):
            text = text.replace(".", "").replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise MalformedValueError(f"Not an amount: {value!r}") from exc
    if not amount.is_finite():
        raise MalformedValueError(f"Not a finite amount: {value!r}")
    return amount


def format_currency(value: Optional[Number]) -> Optional[str]:
    """463.25 -> "463,25"; two fraction digits, no thousands separator."""
    if value is None:
        return None
    amount = parse_amount(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{amount:.2f}".replace(".", ",")


format_decimal = format_currency


def format_integer(value: Optional[Number]) -> Optional[str]:
    if value is None:
        return None
    amount = parse_amount(value)
    if amount != amount.to_integral_value():
        raise MalformedValueError(f"Not an integer: {value!r}")
    return str(int(amount))


def compact(value: Optional[str]) -> Optional[str]:
    """Remove all whitespace ("DE89 3704" -> "DE893704")."""
    if value is None:
        return None
    return re.sub(r"\s+", "", str(value))


def normalize_frequency(value: Optional[str]) -> str:
    """Map free-form payment frequencies onto the form's vocabulary."""
    if not value:
        return "monatlich"
    key = normalize(value)
    if "monat" in key or "month" in key:
        return "monatlich"
    if "jahr" in key or "jaehr" in key or "annual" in key or "year" in key:
        return "jährlich"
    if "tag" in key or "taeg" in key or "daily" in key:
        return "täglich"
    return "monatlich"
