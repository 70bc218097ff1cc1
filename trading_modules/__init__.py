"""
Trading Modules.

Thin orchestration layers over the Trading Kernel.  Each module contains:
- Domain models (the nouns)
- Pure operations over them
- Workflows (state machines)
- Configuration schemas
- Repository ports and their SQL adapters

Modules:
- Contracts: supplier contracts, per-location material rates, the
  contract editor session
"""

from trading_modules import contracts

__all__ = ["contracts"]
