"""
Tests for the contract draft aggregate: supplier changes, location and
material row operations, and header field edits.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from trading_kernel.exceptions import (
    DuplicateLocationError,
    InvalidRowIndexError,
    UnknownFieldError,
)
from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.drafts import new_draft, update_draft_field
from trading_modules.contracts.locations import (
    add_location,
    add_material_row,
    remove_location,
    remove_material_row,
    update_material_row,
)
from trading_modules.contracts.models import ContractDraft, ContractStatus, PendingDeletions
from trading_modules.contracts.rate_types import RateType
from tests.conftest import make_location_ref, make_valid_draft


class TestSupplierChange:

    def test_changing_supplier_clears_locations(self):
        draft = make_valid_draft()
        changed = draft.with_supplier("8")
        assert changed.supplier_id == "8"
        assert changed.locations == ()

    def test_same_supplier_keeps_locations(self):
        draft = make_valid_draft()
        assert draft.with_supplier(7) is draft

    def test_header_edit_of_supplier_goes_through_with_supplier(self):
        draft = make_valid_draft()
        changed = update_draft_field(draft, "supplierId", "9")
        assert changed.locations == ()


class TestAddLocation:

    def test_appends_location_with_one_default_line(self):
        draft = add_location(ContractDraft(supplier_id="7"), make_location_ref(), default_unit="kg")
        assert len(draft.locations) == 1
        location = draft.locations[0]
        assert location.id == "11"
        assert location.location_name == "Yard A"
        assert location.persisted is False
        assert len(location.rate_lines) == 1
        assert location.rate_lines[0].unit == "kg"

    def test_keeps_insertion_order(self):
        draft = ContractDraft(supplier_id="7")
        draft = add_location(draft, make_location_ref("11", "Yard A"))
        draft = add_location(draft, make_location_ref("12", "Yard B"))
        assert [loc.id for loc in draft.locations] == ["11", "12"]

    def test_duplicate_rejected_and_draft_unchanged(self):
        draft = add_location(ContractDraft(supplier_id="7"), make_location_ref())
        with pytest.raises(DuplicateLocationError) as exc_info:
            add_location(draft, make_location_ref())
        assert exc_info.value.location_id == "11"
        assert "already added" in str(exc_info.value)
        assert len(draft.locations) == 1


class TestRemoveLocation:

    def test_returns_removed_entry(self):
        draft = make_valid_draft()
        updated, removed = remove_location(draft, 0)
        assert updated.locations == ()
        assert removed.id == "11"

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_bad_index(self, index):
        with pytest.raises(InvalidRowIndexError):
            remove_location(make_valid_draft(), index)


class TestMaterialRows:

    def test_add_row(self):
        draft = add_material_row(make_valid_draft(), 0, default_unit="ton")
        lines = draft.locations[0].rate_lines
        assert len(lines) == 2
        assert lines[1].unit == "ton"

    def test_remove_row(self):
        draft = add_material_row(make_valid_draft(), 0)
        updated, removed = remove_material_row(draft, 0, 0)
        assert removed.id == "new-1"
        assert len(updated.locations[0].rate_lines) == 1

    def test_remove_row_bad_index(self):
        with pytest.raises(InvalidRowIndexError) as exc_info:
            remove_material_row(make_valid_draft(), 0, 3)
        assert exc_info.value.row_index == 3

    def test_update_row_applies_free_rule(self):
        draft = update_material_row(make_valid_draft(), 0, 0, "rateType", "free")
        line = draft.locations[0].rate_lines[0]
        assert line.rate_type == RateType.FREE
        assert line.contract_rate == Decimal("0")

    def test_update_row_bad_location(self):
        with pytest.raises(InvalidRowIndexError):
            update_material_row(make_valid_draft(), 2, 0, "unit", "kg")


class TestHeaderFields:

    def test_dates_accept_iso_strings(self):
        draft = update_draft_field(make_valid_draft(), "startDate", "2024-02-01T00:00:00Z")
        assert draft.start_date == date(2024, 2, 1)

    def test_blank_date_clears(self):
        draft = update_draft_field(make_valid_draft(), "end_date", "")
        assert draft.end_date is None

    def test_total_value_coerced(self):
        draft = update_draft_field(make_valid_draft(), "totalValue", "1500.50")
        assert draft.total_value == Decimal("1500.50")

    def test_status(self):
        draft = update_draft_field(make_valid_draft(), "status", "pending")
        assert draft.status == ContractStatus.PENDING

    def test_unknown_field(self):
        with pytest.raises(UnknownFieldError):
            update_draft_field(make_valid_draft(), "locations", ())


class TestNewDraft:

    def test_defaults_from_config(self):
        config = ContractsConfig(default_currency="AED", default_term_days=90)
        today = date(2024, 3, 15)
        draft = new_draft(config, today, "CON-2024-007")
        assert draft.contract_number == "CON-2024-007"
        assert draft.start_date == today
        assert draft.end_date == today + timedelta(days=90)
        assert draft.currency == "AED"
        assert draft.status == ContractStatus.ACTIVE
        assert draft.locations == ()


class TestPendingDeletions:

    def test_staging_is_deduplicated(self):
        pending = PendingDeletions().stage_location("11").stage_location("11").stage_material("501")
        assert pending.locations == ("11",)
        assert pending.materials == ("501",)
        assert not pending.is_empty

    def test_to_payload(self):
        pending = PendingDeletions(locations=("11",), materials=("501", "502"))
        assert pending.to_payload() == {"locations": ["11"], "materials": ["501", "502"]}
