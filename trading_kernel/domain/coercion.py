"""
Lenient value coercion (``trading_kernel.domain.coercion``).

Responsibility:
    Turn loosely typed form or wire values (strings typed by a user, numbers
    decoded from JSON, ``None``) into ``Decimal``, ``int`` and ``date``.
    Numeric parsing follows the browser rules the contract screens were built
    on: the longest numeric prefix wins (``"12.5kg"`` -> 12.5) and anything
    without a numeric prefix falls back to a default.

Architecture position:
    Kernel > Domain -- pure functions, ZERO I/O.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

_DECIMAL_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^[+-]?\d+")

ZERO = Decimal("0")


def parse_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce ``value`` to Decimal; ``default`` when it has no numeric prefix."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        result = Decimal(str(value))
        return result if result.is_finite() else default

    match = _DECIMAL_PREFIX.match(str(value).strip())
    if match is None:
        return default
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return default


def parse_int(value: Any) -> int | None:
    """Coerce ``value`` to int (truncating); None when it has no integer prefix."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (Decimal, float)):
        try:
            return int(value)
        except (ValueError, OverflowError, InvalidOperation):
            return None

    match = _INT_PREFIX.match(str(value).strip())
    if match is None:
        return None
    return int(match.group(0))


def parse_date(value: Any) -> date | None:
    """Coerce an ISO date or datetime string to ``date``.

    Blank values give None.  Anything else that is not an ISO date raises
    ``ValueError``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def as_text(value: Any) -> str:
    """Stringify an optional reference; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip()
