"""
Shared fixtures for module tests.

Provides seeded reference rows (supplier, locations, materials) needed by
the contract ORM FK constraints, and the SQL-backed repositories.
All IDs are deterministic so tests can import and use them directly.

DESIGN RULE: Every fixture is opt-in.  No autouse.
"""

from decimal import Decimal

import pytest

from trading_kernel.db.engine import session_scope
from trading_modules.contracts.orm import (
    MaterialModel,
    SupplierLocationModel,
    SupplierModel,
)
from trading_modules.contracts.repository import (
    SqlContractRepository,
    SqlMaterialRepository,
    SqlSupplierLocationRepository,
    SqlSupplierRepository,
)

# ---------------------------------------------------------------------------
# Deterministic reference ids
# ---------------------------------------------------------------------------

TEST_SUPPLIER_ID = 7
TEST_OTHER_SUPPLIER_ID = 8
TEST_LOCATION_A_ID = 11
TEST_LOCATION_B_ID = 12
TEST_INACTIVE_LOCATION_ID = 13
TEST_COPPER_ID = 3
TEST_ALUMINIUM_ID = 4


@pytest.fixture
def reference_data(session_factory):
    """Supplier 7 with yards A/B (plus an inactive one), supplier 8, two materials."""
    with session_scope(session_factory) as session:
        session.add_all([
            SupplierModel(id=TEST_SUPPLIER_ID, name="Gulf Metals", code="GM"),
            SupplierModel(id=TEST_OTHER_SUPPLIER_ID, name="Coastal Scrap", code="CS"),
        ])
        session.flush()
        session.add_all([
            SupplierLocationModel(
                id=TEST_LOCATION_A_ID, supplier_id=TEST_SUPPLIER_ID,
                location_name="Yard A", location_code="LOC-11",
            ),
            SupplierLocationModel(
                id=TEST_LOCATION_B_ID, supplier_id=TEST_SUPPLIER_ID,
                location_name="Yard B", location_code="LOC-12",
            ),
            SupplierLocationModel(
                id=TEST_INACTIVE_LOCATION_ID, supplier_id=TEST_SUPPLIER_ID,
                location_name="Old Yard", location_code="LOC-13", is_active=False,
            ),
            MaterialModel(
                id=TEST_COPPER_ID, name="Copper", unit="kg", standard_price=Decimal("4.2500"),
            ),
            MaterialModel(
                id=TEST_ALUMINIUM_ID, name="Aluminium", unit="kg", standard_price=Decimal("1.1000"),
            ),
        ])


@pytest.fixture
def sql_contracts(session_factory, deterministic_clock, contracts_config):
    return SqlContractRepository(
        session_factory, clock=deterministic_clock, config=contracts_config,
    )


@pytest.fixture
def sql_suppliers(session_factory):
    return SqlSupplierRepository(session_factory)


@pytest.fixture
def sql_materials(session_factory):
    return SqlMaterialRepository(session_factory)


@pytest.fixture
def sql_supplier_locations(session_factory):
    return SqlSupplierLocationRepository(session_factory)
