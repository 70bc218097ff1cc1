"""
Supplier Contract Domain Models (``trading_modules.contracts.models``).

Responsibility
--------------
Frozen dataclass value objects for the contract editor: the contract draft
(root aggregate), its supplier locations, the material rate lines under each
location, the set of staged deletions, and the reference data offered in
dropdowns (supplier locations, materials, suppliers).

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Editing is done
by building new values (``dataclasses.replace``), so a snapshot of a draft
is simply an earlier value and "has anything changed?" is ``==``.

Invariants enforced
-------------------
* All models are ``frozen=True``; collections are tuples.
* All rate, price and quantity fields use ``Decimal`` -- NEVER ``float``.
* Changing the supplier of a draft drops every location (locations belong
  to a supplier).
* Pending deletions never contain the same id twice.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from trading_kernel.domain.coercion import ZERO, as_text
from trading_modules.contracts.rate_types import PaymentDirection, RateType


class ContractStatus(str, Enum):
    """Contract lifecycle status."""
    DRAFT = "draft"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"
    PENDING = "pending"
    PENDING_RENEWAL = "pending_renewal"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# Draft aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateLine:
    """One material rate under a contract location.

    ``persisted`` is True for lines loaded from the repository; only those
    need a server-side delete when removed.
    """
    id: str
    material_id: str = ""
    unit: str = ""
    rate_type: RateType = RateType.FIXED_RATE
    contract_rate: Decimal = ZERO
    discount_percentage: Decimal = ZERO
    minimum_price: Decimal = ZERO
    payment_direction: PaymentDirection = PaymentDirection.WE_RECEIVE
    minimum_quantity: Decimal = ZERO
    maximum_quantity: Decimal = ZERO
    description: str = ""
    persisted: bool = False


@dataclass(frozen=True)
class LocationEntry:
    """A supplier location on the contract and its ordered rate lines."""
    id: str
    location_name: str = ""
    location_code: str = ""
    address: str = ""
    contact_person: str = ""
    contact_phone: str = ""
    rate_lines: tuple[RateLine, ...] = ()
    persisted: bool = False

    @property
    def display_name(self) -> str:
        return self.location_name or self.location_code or self.id


@dataclass(frozen=True)
class ContractDraft:
    """Editable contract: scalar fields plus ordered locations.

    ``id`` is the repository id once the contract has been saved.
    """
    contract_number: str = ""
    supplier_id: str = ""
    title: str = ""
    start_date: date | None = None
    end_date: date | None = None
    total_value: Decimal = ZERO
    currency: str = "OMR"
    terms: str = ""
    notes: str = ""
    status: ContractStatus = ContractStatus.ACTIVE
    locations: tuple[LocationEntry, ...] = ()
    id: str | None = None

    def with_supplier(self, supplier_id: object) -> ContractDraft:
        """Return a draft for ``supplier_id``; locations are cleared on change."""
        new_id = as_text(supplier_id)
        if new_id == self.supplier_id:
            return self
        return replace(self, supplier_id=new_id, locations=())

    def location_index(self, location_id: object) -> int | None:
        """Index of the location with ``location_id``, or None."""
        wanted = as_text(location_id)
        for index, location in enumerate(self.locations):
            if location.id == wanted:
                return index
        return None

    def has_location(self, location_id: object) -> bool:
        return self.location_index(location_id) is not None

    @property
    def rate_line_count(self) -> int:
        return sum(len(location.rate_lines) for location in self.locations)


@dataclass(frozen=True)
class PendingDeletions:
    """Ids removed during an edit session, applied only on submit."""
    locations: tuple[str, ...] = ()
    materials: tuple[str, ...] = ()

    def stage_location(self, location_id: str) -> PendingDeletions:
        if location_id in self.locations:
            return self
        return replace(self, locations=self.locations + (location_id,))

    def stage_material(self, rate_line_id: str) -> PendingDeletions:
        if rate_line_id in self.materials:
            return self
        return replace(self, materials=self.materials + (rate_line_id,))

    @property
    def is_empty(self) -> bool:
        return not self.locations and not self.materials

    def to_payload(self) -> dict[str, list[str]]:
        return {"locations": list(self.locations), "materials": list(self.materials)}


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SupplierLocationRef:
    """A supplier location that can be added to a contract."""
    id: str
    supplier_id: str
    location_name: str
    location_code: str = ""
    address: str = ""
    contact_person: str = ""
    contact_phone: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class Material:
    """A tradeable material and its standard (market) price."""
    id: str
    name: str
    unit: str = ""
    standard_price: Decimal = ZERO


@dataclass(frozen=True)
class Supplier:
    """A supplier that contracts can be raised against."""
    id: str
    name: str
    code: str = ""
