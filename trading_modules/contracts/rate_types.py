"""
Contract Rate Types (``trading_modules.contracts.rate_types``).

Responsibility
--------------
Enumerations for material pricing on a supplier contract, and the pure
pricing helpers that turn a contract rate line plus a market (standard)
price into the effective price and the savings it represents.

Architecture position
---------------------
**Modules layer** -- pure definitions with ZERO I/O.  Consumed by the
rate-line model, the validator, and the payload mapping.

Invariants enforced
-------------------
* ``FREE`` lines always price at zero.
* All rate/monetary values are ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trading_modules.contracts.models import RateLine


class RateType(str, Enum):
    """Pricing mode for a material on a contract."""
    FIXED_RATE = "fixed_rate"
    DISCOUNT_PERCENTAGE = "discount_percentage"
    MINIMUM_PRICE_GUARANTEE = "minimum_price_guarantee"
    FREE = "free"
    WE_PAY = "we_pay"  # reverse direction: we pay the supplier to take it


class PaymentDirection(str, Enum):
    """Which party pays for the material."""
    WE_RECEIVE = "we_receive"
    WE_PAY = "we_pay"


_HUNDRED = Decimal("100")


def calculate_actual_rate(line: RateLine | None, standard_rate: Decimal) -> Decimal:
    """Effective unit price of ``line`` given the market ``standard_rate``.

    Lines without a rate (``None``) and ``WE_PAY`` lines fall back to the
    standard rate; ``MINIMUM_PRICE_GUARANTEE`` never prices above market.
    """
    if line is None:
        return standard_rate

    if line.rate_type == RateType.FIXED_RATE:
        return line.contract_rate
    if line.rate_type == RateType.DISCOUNT_PERCENTAGE:
        return standard_rate * (1 - line.discount_percentage / _HUNDRED)
    if line.rate_type == RateType.MINIMUM_PRICE_GUARANTEE:
        if line.contract_rate <= 0:
            return standard_rate
        return min(standard_rate, line.contract_rate)
    if line.rate_type == RateType.FREE:
        return Decimal("0")
    return standard_rate


def calculate_savings(standard_rate: Decimal, contract_rate: Decimal) -> Decimal:
    """Savings against the standard rate, in percent to one decimal place."""
    if standard_rate <= 0:
        return Decimal("0.0")
    savings = (standard_rate - contract_rate) / standard_rate * _HUNDRED
    return savings.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
