"""
Module ORM Registry (``trading_modules._orm_registry``).

Responsibility
--------------
Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created.  ``create_tables()`` in the kernel only runs ``create_all`` and
never imports modules itself, so ``create_all_tables()`` is the way to get
a complete schema.

Architecture position
---------------------
**Modules layer** -- utility.  Imports from sibling ``trading_modules``
packages and from ``trading_kernel.db.engine`` (allowed: modules -> kernel).
MUST NOT be imported by ``trading_kernel``.

Usage
-----
Entrypoints and ``tests/conftest.py`` call ``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ``trading_modules.*.orm`` module to register ORM models.

    This function is idempotent -- repeated calls are harmless.
    """
    import trading_modules.contracts.orm  # noqa: F401


def create_all_tables() -> None:
    """Create all module ORM tables.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from trading_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
