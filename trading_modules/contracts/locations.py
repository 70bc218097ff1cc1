"""
Location container operations (``trading_modules.contracts.locations``).

Responsibility
--------------
Pure functions that add and remove supplier locations and their material
rows on a ``ContractDraft``.  Every function returns a new draft; removals
also return the removed record so an edit session can stage its deletion.

Invariants enforced
-------------------
* A supplier location appears at most once on a draft.
* A newly added location always starts with one default rate line.

Failure modes
-------------
* ``DuplicateLocationError`` -- location already on the draft; the draft
  passed in is left as it was.
* ``InvalidRowIndexError`` -- index outside the draft's locations or rows.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from trading_kernel.exceptions import DuplicateLocationError, InvalidRowIndexError
from trading_modules.contracts.models import (
    ContractDraft,
    LocationEntry,
    RateLine,
    SupplierLocationRef,
)
from trading_modules.contracts.rate_lines import create_rate_line, update_rate_line


def _location_at(draft: ContractDraft, location_index: int) -> LocationEntry:
    if not 0 <= location_index < len(draft.locations):
        raise InvalidRowIndexError(location_index)
    return draft.locations[location_index]


def _replace_location(
    draft: ContractDraft, location_index: int, location: LocationEntry,
) -> ContractDraft:
    locations = list(draft.locations)
    locations[location_index] = location
    return replace(draft, locations=tuple(locations))


def add_location(
    draft: ContractDraft,
    ref: SupplierLocationRef,
    *,
    default_unit: str = "",
) -> ContractDraft:
    """Append ``ref`` as a new location seeded with one default rate line."""
    if draft.has_location(ref.id):
        raise DuplicateLocationError(ref.id, ref.location_name)

    location = LocationEntry(
        id=ref.id,
        location_name=ref.location_name,
        location_code=ref.location_code,
        address=ref.address,
        contact_person=ref.contact_person,
        contact_phone=ref.contact_phone,
        rate_lines=(create_rate_line(default_unit),),
    )
    return replace(draft, locations=draft.locations + (location,))


def remove_location(
    draft: ContractDraft, location_index: int,
) -> tuple[ContractDraft, LocationEntry]:
    """Remove the location at ``location_index``."""
    removed = _location_at(draft, location_index)
    locations = draft.locations[:location_index] + draft.locations[location_index + 1:]
    return replace(draft, locations=locations), removed


def add_material_row(
    draft: ContractDraft, location_index: int, *, default_unit: str = "",
) -> ContractDraft:
    """Append a default rate line to the location at ``location_index``."""
    location = _location_at(draft, location_index)
    updated = replace(location, rate_lines=location.rate_lines + (create_rate_line(default_unit),))
    return _replace_location(draft, location_index, updated)


def remove_material_row(
    draft: ContractDraft, location_index: int, row_index: int,
) -> tuple[ContractDraft, RateLine]:
    """Remove one rate line from the location at ``location_index``."""
    location = _location_at(draft, location_index)
    if not 0 <= row_index < len(location.rate_lines):
        raise InvalidRowIndexError(location_index, row_index)

    removed = location.rate_lines[row_index]
    rate_lines = location.rate_lines[:row_index] + location.rate_lines[row_index + 1:]
    return _replace_location(draft, location_index, replace(location, rate_lines=rate_lines)), removed


def update_material_row(
    draft: ContractDraft,
    location_index: int,
    row_index: int,
    field: str,
    value: Any,
) -> ContractDraft:
    """Replace one field of one rate line (see ``update_rate_line``)."""
    location = _location_at(draft, location_index)
    if not 0 <= row_index < len(location.rate_lines):
        raise InvalidRowIndexError(location_index, row_index)

    rate_lines = list(location.rate_lines)
    rate_lines[row_index] = update_rate_line(rate_lines[row_index], field, value)
    return _replace_location(draft, location_index, replace(location, rate_lines=tuple(rate_lines)))
