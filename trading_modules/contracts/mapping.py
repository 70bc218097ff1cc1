"""
Wire mapping for contracts (``trading_modules.contracts.mapping``).

Responsibility
--------------
Translate between the repository's JSON-shaped dicts (camelCase keys,
loosely typed values) and the typed draft/reference models.

* ``from_contract_response`` folds the flat ``rates`` list of a contract
  into one ``LocationEntry`` per ``locationId`` (first-seen order).
* ``to_submit_payload`` flattens a draft back into the create/update wire
  shape, coercing numbers the way the contract screens always did and
  re-applying the free-rate rule to every line.

Architecture position
---------------------
**Modules layer** -- pure transformation, ZERO I/O.

Failure modes
-------------
* Unknown ``rateType`` / ``paymentDirection`` / ``status`` values and
  non-ISO dates raise ``ValueError`` (a malformed response).
"""

from __future__ import annotations

from typing import Any

from trading_kernel.domain.coercion import as_text, parse_date, parse_decimal, parse_int
from trading_modules.contracts.models import (
    ContractDraft,
    ContractStatus,
    LocationEntry,
    Material,
    PendingDeletions,
    RateLine,
    Supplier,
    SupplierLocationRef,
)
from trading_modules.contracts.rate_lines import new_rate_line_id, normalize_rate_line
from trading_modules.contracts.rate_types import PaymentDirection, RateType


# -----------------------------------------------------------------------------
# Response -> draft
# -----------------------------------------------------------------------------


def _rate_line_from_response(rate: dict[str, Any], fallback_unit: str) -> RateLine:
    rate_id = as_text(rate.get("id"))
    return RateLine(
        id=rate_id or new_rate_line_id(),
        material_id=as_text(rate.get("materialId")),
        unit=as_text(rate.get("unit")) or fallback_unit,
        rate_type=RateType(rate.get("rateType") or RateType.FIXED_RATE),
        contract_rate=parse_decimal(rate.get("contractRate")),
        discount_percentage=parse_decimal(rate.get("discountPercentage")),
        minimum_price=parse_decimal(rate.get("minimumPrice")),
        payment_direction=PaymentDirection(
            rate.get("paymentDirection") or PaymentDirection.WE_RECEIVE
        ),
        minimum_quantity=parse_decimal(rate.get("minimumQuantity")),
        maximum_quantity=parse_decimal(rate.get("maximumQuantity")),
        description=as_text(rate.get("description")),
        persisted=bool(rate_id),
    )


def _terms_text(terms: Any) -> str:
    # Older contracts store terms as {"specialTerms": ..., "paymentTerms": ...}
    if isinstance(terms, dict):
        return as_text(terms.get("specialTerms"))
    return as_text(terms)


def from_contract_response(
    contract: dict[str, Any],
    *,
    fallback_unit: str = "kg",
    default_currency: str = "OMR",
) -> ContractDraft:
    """Build a draft from a repository contract with a flat ``rates`` list."""
    rates = contract.get("rates") or []

    order: list[str] = []
    grouped: dict[str, list[dict[str, Any]]] = {}
    for rate in rates:
        location_id = as_text(rate.get("locationId"))
        if location_id not in grouped:
            order.append(location_id)
            grouped[location_id] = []
        grouped[location_id].append(rate)

    locations = []
    for location_id in order:
        location_rates = grouped[location_id]
        first = location_rates[0]
        locations.append(LocationEntry(
            id=location_id,
            location_name=as_text(first.get("locationName")),
            location_code=as_text(first.get("locationCode")),
            address=as_text(first.get("address")),
            contact_person=as_text(first.get("contactPerson")),
            contact_phone=as_text(first.get("contactPhone")),
            rate_lines=tuple(_rate_line_from_response(r, fallback_unit) for r in location_rates),
            persisted=True,
        ))

    return ContractDraft(
        id=as_text(contract.get("id")) or None,
        contract_number=as_text(contract.get("contractNumber")),
        supplier_id=as_text(contract.get("supplierId")),
        title=as_text(contract.get("title")),
        start_date=parse_date(contract.get("startDate")),
        end_date=parse_date(contract.get("endDate")),
        total_value=parse_decimal(contract.get("totalValue")),
        currency=as_text(contract.get("currency")) or default_currency,
        terms=_terms_text(contract.get("terms")),
        notes=as_text(contract.get("notes")),
        status=ContractStatus(contract.get("status") or ContractStatus.ACTIVE),
        locations=tuple(locations),
    )


# -----------------------------------------------------------------------------
# Draft -> payload
# -----------------------------------------------------------------------------


def wire_id(value: str) -> int | str:
    """Numeric ids travel as numbers, anything else as text."""
    text = value.strip()
    if text.isdigit():
        return int(text)
    return text


def _rate_line_payload(line: RateLine) -> dict[str, Any]:
    line = normalize_rate_line(line)
    payload: dict[str, Any] = {
        "materialId": parse_int(line.material_id),
        "rateType": line.rate_type.value,
        "contractRate": line.contract_rate,
        "discountPercentage": line.discount_percentage,
        "minimumPrice": line.minimum_price,
        "paymentDirection": line.payment_direction.value,
        "unit": line.unit,
        "minimumQuantity": line.minimum_quantity,
        "maximumQuantity": line.maximum_quantity,
        "description": line.description,
    }
    if line.persisted:
        payload["id"] = wire_id(line.id)
    return payload


def to_submit_payload(
    draft: ContractDraft,
    *,
    created_by: str | None = None,
    pending_deletions: PendingDeletions | None = None,
) -> dict[str, Any]:
    """Flatten ``draft`` into the create/update wire shape."""
    payload: dict[str, Any] = {
        "contractNumber": draft.contract_number,
        "supplierId": parse_int(draft.supplier_id),
        "title": draft.title.strip() or f"Contract {draft.contract_number}",
        "startDate": draft.start_date.isoformat() if draft.start_date else None,
        "endDate": draft.end_date.isoformat() if draft.end_date else None,
        "status": draft.status.value,
        "terms": draft.terms,
        "notes": draft.notes,
        "totalValue": parse_decimal(draft.total_value),
        "currency": draft.currency,
        "createdBy": created_by,
        "locations": [
            {
                "id": wire_id(location.id),
                "locationName": location.location_name,
                "locationCode": location.location_code,
                "materials": [_rate_line_payload(line) for line in location.rate_lines],
            }
            for location in draft.locations
        ],
    }
    if pending_deletions is not None:
        payload["pendingDeletions"] = {
            "locations": [wire_id(i) for i in pending_deletions.locations],
            "materials": [wire_id(i) for i in pending_deletions.materials],
        }
    return payload


def flatten_rates(payload: dict[str, Any]) -> list[dict[str, Any]]:
    """Flat ``rates`` rows (one per material) from a submit payload."""
    rows = []
    for location in payload.get("locations") or []:
        for material in location.get("materials") or []:
            rows.append({
                **material,
                "locationId": location.get("id"),
                "locationName": location.get("locationName", ""),
                "locationCode": location.get("locationCode", ""),
            })
    return rows


# -----------------------------------------------------------------------------
# Reference data
# -----------------------------------------------------------------------------


def supplier_location_from_response(data: dict[str, Any]) -> SupplierLocationRef:
    return SupplierLocationRef(
        id=as_text(data.get("id")),
        supplier_id=as_text(data.get("supplierId")),
        location_name=as_text(data.get("locationName")),
        location_code=as_text(data.get("locationCode")),
        address=as_text(data.get("address")),
        contact_person=as_text(data.get("contactPerson")),
        contact_phone=as_text(data.get("contactPhone")),
        is_active=bool(data.get("isActive", True)),
    )


def material_from_response(data: dict[str, Any]) -> Material:
    return Material(
        id=as_text(data.get("id")),
        name=as_text(data.get("name")),
        unit=as_text(data.get("unit")),
        standard_price=parse_decimal(data.get("standardPrice")),
    )


def supplier_from_response(data: dict[str, Any]) -> Supplier:
    return Supplier(
        id=as_text(data.get("id")),
        name=as_text(data.get("name")),
        code=as_text(data.get("code")),
    )
