"""
Contract draft header operations (``trading_modules.contracts.drafts``).

Pure functions over the scalar fields of a ``ContractDraft``: build the
blank draft a create flow starts from, and replace one header field.
Locations and rate lines are edited through ``locations`` instead.

Setting the supplier always goes through ``ContractDraft.with_supplier`` so
that the locations of the previous supplier are dropped.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Any

from trading_kernel.domain.coercion import as_text, parse_date, parse_decimal
from trading_kernel.exceptions import UnknownFieldError
from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.models import ContractDraft, ContractStatus

_TEXT_FIELDS = frozenset({"contract_number", "title", "currency", "terms", "notes"})
_DATE_FIELDS = frozenset({"start_date", "end_date"})

_FIELD_ALIASES = {
    "contractNumber": "contract_number",
    "supplierId": "supplier_id",
    "startDate": "start_date",
    "endDate": "end_date",
    "totalValue": "total_value",
}


def new_draft(
    config: ContractsConfig,
    today: date,
    contract_number: str = "",
) -> ContractDraft:
    """Blank draft for a create flow, running ``default_term_days`` from ``today``."""
    return ContractDraft(
        contract_number=contract_number,
        start_date=today,
        end_date=today + timedelta(days=config.default_term_days),
        currency=config.default_currency,
        status=config.default_status,
    )


def update_draft_field(draft: ContractDraft, field: str, value: Any) -> ContractDraft:
    """Return ``draft`` with one header field replaced.

    Raises:
        UnknownFieldError: ``field`` is not an editable header field.
        ValueError: malformed date or unknown status.
    """
    name = _FIELD_ALIASES.get(field, field)

    if name == "supplier_id":
        return draft.with_supplier(value)
    if name in _TEXT_FIELDS:
        return replace(draft, **{name: as_text(value)})
    if name in _DATE_FIELDS:
        return replace(draft, **{name: parse_date(value)})
    if name == "total_value":
        return replace(draft, total_value=parse_decimal(value))
    if name == "status":
        return replace(draft, status=ContractStatus(value))

    raise UnknownFieldError("ContractDraft", field)
