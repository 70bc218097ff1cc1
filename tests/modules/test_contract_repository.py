"""
Tests for the SQL-backed contract repositories (SQLite).

Validates:
- create/get_by_id round trip through the ORM
- update applies staged deletions, in-place updates and inserts atomically
- next contract number sequence per year
- failures come back as envelopes, never as exceptions
- a full edit session against the real repository
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.mapping import to_submit_payload
from trading_modules.contracts.models import ContractDraft, LocationEntry, RateLine
from trading_modules.contracts.rate_types import RateType
from trading_modules.contracts.repository import SqlContractRepository
from trading_modules.contracts.service import ContractsService
from tests.modules.conftest import (
    TEST_ALUMINIUM_ID,
    TEST_COPPER_ID,
    TEST_LOCATION_A_ID,
    TEST_LOCATION_B_ID,
    TEST_SUPPLIER_ID,
)


def _draft(number="CON-2024-001") -> ContractDraft:
    return ContractDraft(
        contract_number=number,
        supplier_id=str(TEST_SUPPLIER_ID),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        locations=(
            LocationEntry(
                id=str(TEST_LOCATION_A_ID),
                location_name="Yard A",
                rate_lines=(
                    RateLine(id="new-1", material_id=str(TEST_COPPER_ID), unit="kg",
                             contract_rate=Decimal("4.1")),
                    RateLine(id="new-2", material_id=str(TEST_ALUMINIUM_ID), unit="kg",
                             rate_type=RateType.FREE, contract_rate=Decimal("9")),
                ),
            ),
            LocationEntry(
                id=str(TEST_LOCATION_B_ID),
                location_name="Yard B",
                rate_lines=(
                    RateLine(id="new-3", material_id=str(TEST_COPPER_ID), unit="ton",
                             contract_rate=Decimal("3900")),
                ),
            ),
        ),
    )


@pytest.fixture
def saved_contract(sql_contracts, reference_data) -> dict:
    result = sql_contracts.create(to_submit_payload(_draft(), created_by="user-42"))
    assert result.success, result.error
    return result.data


class TestCreateAndFetch:

    def test_create_returns_flat_rates(self, saved_contract):
        assert saved_contract["contractNumber"] == "CON-2024-001"
        assert saved_contract["title"] == "Contract CON-2024-001"
        assert saved_contract["createdBy"] == "user-42"
        assert len(saved_contract["rates"]) == 3
        first = saved_contract["rates"][0]
        assert first["locationId"] == TEST_LOCATION_A_ID
        assert first["locationName"] == "Yard A"
        assert first["materialName"] == "Copper"

    def test_free_rate_stored_as_zero(self, saved_contract):
        free = [r for r in saved_contract["rates"] if r["rateType"] == "free"]
        assert free[0]["contractRate"] == Decimal("0")

    def test_get_by_id(self, sql_contracts, saved_contract):
        result = sql_contracts.get_by_id(str(saved_contract["id"]))
        assert result.success
        assert result.data["startDate"] == "2024-01-01"
        assert [r["id"] for r in result.data["rates"]] == [r["id"] for r in saved_contract["rates"]]

    def test_get_by_id_missing(self, sql_contracts, reference_data):
        result = sql_contracts.get_by_id("404")
        assert not result.success
        assert result.error == "Contract not found: 404"

    def test_duplicate_number_rejected(self, sql_contracts, saved_contract):
        result = sql_contracts.create(to_submit_payload(_draft()))
        assert not result.success
        assert "already exists" in result.error

    def test_database_error_becomes_envelope(self, sql_contracts, reference_data, captured_logs):
        payload = to_submit_payload(_draft("CON-2024-009"))
        payload["supplierId"] = None
        result = sql_contracts.create(payload)
        assert not result.success
        assert result.error == "Failed to create"
        assert any(r["message"] == "repository_operation_failed" for r in captured_logs())

    def test_get_all_without_rates(self, sql_contracts, saved_contract):
        rows = sql_contracts.get_all().data
        assert len(rows) == 1
        assert "rates" not in rows[0]
        assert rows[0]["supplierName"] == "Gulf Metals"


class TestNextContractNumber:

    def test_first_number_of_year(self, sql_contracts, reference_data):
        assert sql_contracts.get_next_contract_number().data == "CON-2024-001"

    def test_follows_highest(self, sql_contracts, reference_data):
        sql_contracts.create(to_submit_payload(_draft("CON-2024-001")))
        sql_contracts.create(to_submit_payload(_draft("CON-2024-007")))
        sql_contracts.create(to_submit_payload(_draft("CON-2023-050")))
        assert sql_contracts.get_next_contract_number().data == "CON-2024-008"

    def test_prefix_comes_from_config(self, session_factory, deterministic_clock, reference_data):
        repo = SqlContractRepository(
            session_factory,
            clock=deterministic_clock,
            config=ContractsConfig(contract_number_prefix="SC"),
        )
        repo.create(to_submit_payload(_draft("CON-2024-004")))
        assert repo.get_next_contract_number().data == "SC-2024-001"


class TestUpdate:

    def test_staged_location_deletion_removes_its_rates(self, sql_contracts, saved_contract):
        contract_id = str(saved_contract["id"])
        payload = {
            **{k: v for k, v in saved_contract.items() if k != "rates"},
            "locations": [],
            "pendingDeletions": {"locations": [TEST_LOCATION_B_ID], "materials": []},
        }
        result = sql_contracts.update(contract_id, payload)
        assert result.success
        assert {r["locationId"] for r in result.data["rates"]} == {TEST_LOCATION_A_ID}

    def test_update_insert_and_material_deletion(self, sql_contracts, saved_contract):
        rates = saved_contract["rates"]
        keep, drop = rates[0], rates[1]
        payload = {
            **{k: v for k, v in saved_contract.items() if k != "rates"},
            "title": "Renegotiated",
            "locations": [
                {
                    "id": TEST_LOCATION_A_ID,
                    "materials": [
                        {**keep, "contractRate": Decimal("4.6")},
                        {"materialId": TEST_ALUMINIUM_ID, "unit": "kg",
                         "rateType": "fixed_rate", "contractRate": "1.05"},
                    ],
                },
            ],
            "pendingDeletions": {"locations": [], "materials": [drop["id"]]},
        }
        result = sql_contracts.update(str(saved_contract["id"]), payload)
        assert result.success, result.error
        data = result.data
        assert data["title"] == "Renegotiated"
        by_id = {r["id"]: r for r in data["rates"]}
        assert drop["id"] not in by_id
        assert by_id[keep["id"]]["contractRate"] == Decimal("4.6")
        assert len(data["rates"]) == 3

    def test_stale_rate_id_rolls_back(self, sql_contracts, saved_contract):
        payload = {
            **{k: v for k, v in saved_contract.items() if k != "rates"},
            "title": "Should not stick",
            "locations": [{"id": TEST_LOCATION_A_ID, "materials": [{"id": 9999, "materialId": 3, "unit": "kg"}]}],
        }
        result = sql_contracts.update(str(saved_contract["id"]), payload)
        assert not result.success
        assert "9999" in result.error
        assert sql_contracts.get_by_id(str(saved_contract["id"])).data["title"] == "Contract CON-2024-001"

    def test_status_and_renew(self, sql_contracts, saved_contract):
        contract_id = str(saved_contract["id"])
        assert sql_contracts.update_status(contract_id, "expired").data["status"] == "expired"
        assert not sql_contracts.update_status(contract_id, "archived").success

        renewed = sql_contracts.renew(contract_id, {"startDate": "2025-01-01", "endDate": "2025-12-31"})
        assert renewed.data["status"] == "active"
        assert renewed.data["endDate"] == "2025-12-31"

    def test_delete(self, sql_contracts, saved_contract):
        contract_id = str(saved_contract["id"])
        assert sql_contracts.delete(contract_id).success
        assert not sql_contracts.get_by_id(contract_id).success
        assert not sql_contracts.delete(contract_id).success


class TestReferenceRepositories:

    def test_suppliers_and_materials(self, sql_suppliers, sql_materials, reference_data):
        assert [s["name"] for s in sql_suppliers.get_all().data] == ["Coastal Scrap", "Gulf Metals"]
        assert [m["name"] for m in sql_materials.get_all().data] == ["Aluminium", "Copper"]

    def test_locations_by_supplier(self, sql_supplier_locations, reference_data):
        rows = sql_supplier_locations.get_by_supplier(str(TEST_SUPPLIER_ID)).data
        assert [r["id"] for r in rows] == [11, 12, 13]
        assert sql_supplier_locations.get_by_supplier("").data == []


class TestEndToEnd:
    """Edit session and service running against the SQL repositories."""

    def test_edit_remove_location_and_submit(
        self, sql_contracts, sql_suppliers, sql_materials, sql_supplier_locations,
        saved_contract, notifier, confirmer, deterministic_clock,
    ):
        service = ContractsService(
            sql_contracts, sql_suppliers, sql_materials, sql_supplier_locations,
            notifier, confirmer, clock=deterministic_clock, actor_id="user-42",
        )
        session = service.begin_edit(str(saved_contract["id"]))
        assert [loc.id for loc in session.draft.locations] == ["11", "12"]

        session.remove_location(1)
        session.remove_material_row(0, 1)
        session.add_material_row(0)
        session.update_material_row(0, 1, "materialId", TEST_ALUMINIUM_ID)
        session.update_material_row(0, 1, "contractRate", "1.2")

        result = session.submit()
        assert result.success, notifier.errors

        reloaded = sql_contracts.get_by_id(str(saved_contract["id"])).data
        assert [(r["locationId"], r["materialId"]) for r in reloaded["rates"]] == [
            (TEST_LOCATION_A_ID, TEST_COPPER_ID),
            (TEST_LOCATION_A_ID, TEST_ALUMINIUM_ID),
        ]

    def test_available_locations_from_database(
        self, sql_contracts, sql_suppliers, sql_materials, sql_supplier_locations,
        saved_contract, notifier, confirmer,
    ):
        service = ContractsService(
            sql_contracts, sql_suppliers, sql_materials, sql_supplier_locations,
            notifier, confirmer,
        )
        session = service.begin_edit(str(saved_contract["id"]))
        session.remove_location(1)
        refs = service.load_supplier_locations(session.draft.supplier_id)
        assert [r.id for r in service.available_locations(session, refs)] == ["12"]
