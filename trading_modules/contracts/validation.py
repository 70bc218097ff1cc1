"""
Contract draft validation (``trading_modules.contracts.validation``).

Responsibility
--------------
Pure checks over a ``ContractDraft`` that decide whether it may be
submitted.  Every failing rule contributes one human-readable message;
all rules are hard blockers and the order below only fixes the order of
the messages:

1. supplier chosen
2. start and end dates set, end not before start
3. at least one location (stops the location checks when absent)
4. every location has at least one rate line
5. every rate line names a material and a configured unit and carries a price
   (optionally: maximum quantity not below minimum quantity)
6. at least one complete rate line across the whole draft

Rule 6 is separate from rule 5: it still fires when every location has
rows but none of them is usable.

Architecture position
---------------------
**Modules layer** -- pure, ZERO I/O.  Called by the edit session before
every submit and by callers that enable/disable a submit control.
"""

from __future__ import annotations

from trading_kernel.domain.dtos import ValidationError, ValidationResult
from trading_modules.contracts.config import DEFAULT_UNITS, ContractsConfig
from trading_modules.contracts.models import ContractDraft
from trading_modules.contracts.rate_lines import is_complete
from trading_modules.contracts.rate_types import RateType


def validate_draft(
    draft: ContractDraft, config: ContractsConfig | None = None,
) -> ValidationResult:
    """Validate ``draft``; the result lists errors in rule order."""
    enforce_quantity_range = config.enforce_quantity_range if config else False
    units = config.units if config else DEFAULT_UNITS
    errors: list[ValidationError] = []

    if not draft.supplier_id.strip():
        errors.append(ValidationError(
            code="SUPPLIER_REQUIRED",
            message="Supplier is required",
            field="supplier_id",
        ))

    if draft.start_date is None:
        errors.append(ValidationError(
            code="START_DATE_REQUIRED",
            message="Start date is required",
            field="start_date",
        ))
    if draft.end_date is None:
        errors.append(ValidationError(
            code="END_DATE_REQUIRED",
            message="End date is required",
            field="end_date",
        ))
    if (
        draft.start_date is not None
        and draft.end_date is not None
        and draft.end_date < draft.start_date
    ):
        errors.append(ValidationError(
            code="END_BEFORE_START",
            message="End date must be on or after start date",
            field="end_date",
        ))

    if not draft.locations:
        errors.append(ValidationError(
            code="LOCATION_REQUIRED",
            message="At least one contract location is required",
            field="locations",
        ))
        return ValidationResult.from_errors(errors)

    for loc_index, location in enumerate(draft.locations):
        name = location.display_name
        if not location.rate_lines:
            errors.append(ValidationError(
                code="LOCATION_WITHOUT_RATES",
                message=f"Location {name} must have at least one material rate",
                field=f"locations[{loc_index}].rate_lines",
            ))
            continue

        for row_index, line in enumerate(location.rate_lines):
            row = f"{name} - Row {row_index + 1}"
            path = f"locations[{loc_index}].rate_lines[{row_index}]"
            if not line.material_id.strip():
                errors.append(ValidationError(
                    code="MATERIAL_REQUIRED",
                    message=f"{row}: Material selection is required",
                    field=f"{path}.material_id",
                ))
            if not line.unit.strip():
                errors.append(ValidationError(
                    code="UNIT_REQUIRED",
                    message=f"{row}: Unit is required",
                    field=f"{path}.unit",
                ))
            elif line.unit not in units:
                errors.append(ValidationError(
                    code="UNIT_NOT_SUPPORTED",
                    message=f"{row}: Unit '{line.unit}' is not supported",
                    field=f"{path}.unit",
                ))
            if line.rate_type != RateType.FREE and line.contract_rate <= 0:
                errors.append(ValidationError(
                    code="RATE_NOT_POSITIVE",
                    message=f"{row}: Contract rate must be greater than 0",
                    field=f"{path}.contract_rate",
                ))
            if (
                enforce_quantity_range
                and line.maximum_quantity > 0
                and line.maximum_quantity < line.minimum_quantity
            ):
                errors.append(ValidationError(
                    code="QUANTITY_RANGE_INVERTED",
                    message=f"{row}: Maximum quantity must not be less than minimum quantity",
                    field=f"{path}.maximum_quantity",
                ))

    if not any(
        is_complete(line)
        for location in draft.locations
        for line in location.rate_lines
    ):
        errors.append(ValidationError(
            code="NO_COMPLETE_RATE",
            message="At least one material with a valid rate is required",
            field="locations",
        ))

    return ValidationResult.from_errors(errors)


def validate(draft: ContractDraft, config: ContractsConfig | None = None) -> list[str]:
    """Messages for every failing rule; empty means the draft is valid."""
    return validate_draft(draft, config).messages


def is_form_valid(draft: ContractDraft, config: ContractsConfig | None = None) -> bool:
    return not validate(draft, config)
