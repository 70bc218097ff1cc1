"""
Pure domain layer.

Value objects shared by the trading modules, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (except SystemClock)
"""

from trading_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from trading_kernel.domain.coercion import ZERO, as_text, parse_date, parse_decimal, parse_int
from trading_kernel.domain.dtos import ValidationError, ValidationResult
from trading_kernel.domain.workflow import Guard, Transition, Workflow, find_transition

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Coercion
    "ZERO",
    "as_text",
    "parse_date",
    "parse_decimal",
    "parse_int",
    # DTOs
    "ValidationError",
    "ValidationResult",
    # Workflow
    "Guard",
    "Transition",
    "Workflow",
    "find_transition",
]
