"""
app/normalizers/numeric.py

Token coercion for seller export cells.

Handles the formats marketplaces actually export: ``$1,234.56``,
``1,234``, ``12%``, accounting negatives ``(123.45)`` and the usual
"no value" placeholders.  Anything that is not clearly a number is kept as
the original, untouched string.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Mapping

NumericOrText = float | str

NULL_PLACEHOLDERS: frozenset[str] = frozenset({"NA", "N/A", "null", "NULL", "-"})

_PAREN_NEGATIVE = re.compile(r"^\((.*)\)$", re.DOTALL)
_FORMATTING_CHARS = re.compile(r"[\s$,]")
_TRAILING_PERCENT = re.compile(r"%$")
_PLAIN_NUMBER = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def coerce_token(token: Any) -> NumericOrText:
    """
    Return ``token`` as a float when it matches the numeric grammar,
    ``""`` for empty/placeholder values, and the original string otherwise.

    Never raises.
    """
    if isinstance(token, bool):
        return str(token)
    if isinstance(token, (int, float)):
        number = float(token)
        return number if math.isfinite(number) else ""
    if token is None:
        return ""
    if not isinstance(token, str):
        return str(token)

    text = token.strip()
    if text == "" or text in NULL_PLACEHOLDERS:
        return ""

    paren = _PAREN_NEGATIVE.match(text)
    if paren:
        text = f"-{paren.group(1)}"

    text = _FORMATTING_CHARS.sub("", text)
    text = _TRAILING_PERCENT.sub("", text)

    if _PLAIN_NUMBER.match(text):
        number = float(text)
        if math.isfinite(number):
            return number
    return token


def format_number(value: float) -> str:
    """
    Fixed-point text for ``value`` that :func:`coerce_token` reads back as
    the same float.

    ``str(1e20)`` is ``"1e+20"``, which the export grammar treats as text;
    this returns ``"100000000000000000000"`` instead.  Non-finite values
    give ``""``.
    """
    number = float(value)
    if not math.isfinite(number):
        return ""
    return format(Decimal(repr(number)), "f")


def normalize_row(record: Mapping[str, Any]) -> dict[str, NumericOrText]:
    """
    Coerce every field of one raw record into a new dict.
    """

    return {column: coerce_token(value) for column, value in record.items()}
