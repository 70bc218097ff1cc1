"""
Trading Kernel

Shared foundations for the trading ERP contract tooling:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock and workflow value objects
- SQLAlchemy declarative base and engine management
"""

__version__ = "0.1.0"
