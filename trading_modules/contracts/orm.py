"""
SQLAlchemy ORM persistence models for supplier contracts.

Responsibility
--------------
Database-backed storage for the records the contract editor reads and
writes: suppliers, their locations, materials, contracts and the flat list
of contract rates (one row per material per location).

Architecture position
---------------------
**Modules layer** -- ORM models consumed by
``trading_modules.contracts.repository``.  Inherits from ``TrackedBase``
(kernel db layer).

Invariants enforced
-------------------
* All rate, price and quantity fields use ``Decimal`` -- NEVER float.
* Enum fields stored as String(50) for readability and portability.
* ``contract_number`` is unique.
* Rates belong to exactly one contract and are deleted with it.

``to_response()`` renders each row in the camelCase shape the editor's
mapping functions read.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trading_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class SupplierModel(TrackedBase):
    """A supplier that contracts are raised against."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    locations: Mapped[list["SupplierLocationModel"]] = relationship(
        back_populates="supplier",
        order_by="SupplierLocationModel.id",
    )

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code or "",
            "isActive": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<SupplierModel {self.id}: {self.name}>"


class SupplierLocationModel(TrackedBase):
    """A collection/delivery site belonging to one supplier."""

    __tablename__ = "supplier_locations"

    __table_args__ = (
        Index("idx_supplier_location_supplier", "supplier_id"),
    )

    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id"), nullable=False)
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)
    location_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    supplier: Mapped[SupplierModel] = relationship(back_populates="locations")

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "supplierId": self.supplier_id,
            "locationName": self.location_name,
            "locationCode": self.location_code or "",
            "address": self.address or "",
            "contactPerson": self.contact_person or "",
            "contactPhone": self.contact_phone or "",
            "isActive": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<SupplierLocationModel {self.id}: {self.location_name}>"


class MaterialModel(TrackedBase):
    """A tradeable material with its standard price per unit."""

    __tablename__ = "materials"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")
    standard_price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "standardPrice": self.standard_price,
            "isActive": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<MaterialModel {self.id}: {self.name}>"


# ---------------------------------------------------------------------------
# ContractModel
# ---------------------------------------------------------------------------


class ContractModel(TrackedBase):
    """
    A supplier contract header.

    Guarantees:
        - contract_number is unique.
        - Rates are owned: deleting the contract deletes its rates.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        Index("idx_contract_supplier", "supplier_id"),
        Index("idx_contract_status", "status"),
        Index("idx_contract_end_date", "end_date"),
    )

    contract_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_value: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="OMR")

    supplier: Mapped[SupplierModel] = relationship()
    rates: Mapped[list["ContractRateModel"]] = relationship(
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="ContractRateModel.id",
    )

    def to_response(self, include_rates: bool = True) -> dict:
        data = {
            "id": self.id,
            "contractNumber": self.contract_number,
            "supplierId": self.supplier_id,
            "supplierName": self.supplier.name if self.supplier else "",
            "title": self.title,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "terms": self.terms or "",
            "notes": self.notes or "",
            "totalValue": self.total_value,
            "currency": self.currency,
            "createdBy": self.created_by,
        }
        if include_rates:
            data["rates"] = [rate.to_response() for rate in self.rates]
        return data

    def __repr__(self) -> str:
        return f"<ContractModel {self.contract_number}: {self.title[:30]}>"


class ContractRateModel(TrackedBase):
    """One material rate at one supplier location of a contract."""

    __tablename__ = "contract_rates"

    __table_args__ = (
        Index("idx_contract_rate_contract", "contract_id"),
        Index("idx_contract_rate_location", "contract_id", "location_id"),
    )

    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id"), nullable=False)
    location_id: Mapped[int] = mapped_column(ForeignKey("supplier_locations.id"), nullable=False)
    material_id: Mapped[int] = mapped_column(ForeignKey("materials.id"), nullable=False)
    rate_type: Mapped[str] = mapped_column(String(50), nullable=False, default="fixed_rate")
    contract_rate: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    discount_percentage: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    minimum_price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    payment_direction: Mapped[str] = mapped_column(String(50), nullable=False, default="we_receive")
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    minimum_quantity: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    maximum_quantity: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    contract: Mapped[ContractModel] = relationship(back_populates="rates")
    location: Mapped[SupplierLocationModel] = relationship()
    material: Mapped[MaterialModel] = relationship()

    def to_response(self) -> dict:
        location = self.location
        return {
            "id": self.id,
            "contractId": self.contract_id,
            "locationId": self.location_id,
            "locationName": location.location_name if location else "",
            "locationCode": (location.location_code or "") if location else "",
            "address": (location.address or "") if location else "",
            "contactPerson": (location.contact_person or "") if location else "",
            "contactPhone": (location.contact_phone or "") if location else "",
            "materialId": self.material_id,
            "materialName": self.material.name if self.material else "",
            "rateType": self.rate_type,
            "contractRate": self.contract_rate,
            "discountPercentage": self.discount_percentage,
            "minimumPrice": self.minimum_price,
            "paymentDirection": self.payment_direction,
            "unit": self.unit,
            "minimumQuantity": self.minimum_quantity,
            "maximumQuantity": self.maximum_quantity,
            "description": self.description or "",
        }

    def __repr__(self) -> str:
        return f"<ContractRateModel {self.id}: material {self.material_id} @ location {self.location_id}>"
