"""
Rate line operations (``trading_modules.contracts.rate_lines``).

Pure functions over ``RateLine``: create a default row, replace one field,
and decide whether a row is usable on a contract.  Setting the rate type to
``free`` forces the contract rate to zero, whatever was typed before.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any
from uuid import uuid4

from trading_kernel.domain.coercion import ZERO, as_text, parse_decimal
from trading_kernel.exceptions import UnknownFieldError
from trading_modules.contracts.models import RateLine
from trading_modules.contracts.rate_types import PaymentDirection, RateType

TEMP_ID_PREFIX = "new-"

_DECIMAL_FIELDS = frozenset({
    "contract_rate",
    "discount_percentage",
    "minimum_price",
    "minimum_quantity",
    "maximum_quantity",
})
_TEXT_FIELDS = frozenset({"material_id", "unit", "description"})

# Form and wire payloads name fields in camelCase.
_FIELD_ALIASES = {
    "materialId": "material_id",
    "rateType": "rate_type",
    "contractRate": "contract_rate",
    "discountPercentage": "discount_percentage",
    "minimumPrice": "minimum_price",
    "paymentDirection": "payment_direction",
    "minimumQuantity": "minimum_quantity",
    "maximumQuantity": "maximum_quantity",
}


def new_rate_line_id() -> str:
    """Locally unique id for a row that has not been saved yet."""
    return f"{TEMP_ID_PREFIX}{uuid4().hex[:12]}"


def create_rate_line(default_unit: str = "") -> RateLine:
    """A blank fixed-rate row: zero amounts, we receive payment."""
    return RateLine(
        id=new_rate_line_id(),
        unit=default_unit,
        rate_type=RateType.FIXED_RATE,
        payment_direction=PaymentDirection.WE_RECEIVE,
    )


def update_rate_line(line: RateLine, field: str, value: Any) -> RateLine:
    """Return ``line`` with ``field`` replaced by ``value``.

    Raises:
        UnknownFieldError: ``field`` is not an editable rate line field.
        ValueError: ``value`` is not a valid rate type / payment direction.
    """
    name = _FIELD_ALIASES.get(field, field)

    if name in _DECIMAL_FIELDS:
        return replace(line, **{name: parse_decimal(value)})
    if name in _TEXT_FIELDS:
        return replace(line, **{name: as_text(value)})
    if name == "payment_direction":
        return replace(line, payment_direction=PaymentDirection(value))
    if name == "rate_type":
        rate_type = RateType(value)
        if rate_type == RateType.FREE:
            return replace(line, rate_type=rate_type, contract_rate=ZERO)
        return replace(line, rate_type=rate_type)

    raise UnknownFieldError("RateLine", field)


def is_complete(line: RateLine) -> bool:
    """A line is usable once it names a material and unit and carries a price."""
    if not line.material_id.strip() or not line.unit.strip():
        return False
    return line.rate_type == RateType.FREE or line.contract_rate > 0


def normalize_rate_line(line: RateLine) -> RateLine:
    """Re-apply the free-rate rule to a line built by any path."""
    if line.rate_type == RateType.FREE and line.contract_rate != ZERO:
        return replace(line, contract_rate=ZERO)
    return line
