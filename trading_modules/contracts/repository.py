"""
SQL-backed contract repositories (``trading_modules.contracts.repository``).

Responsibility
--------------
Implement the repository ports of ``trading_modules.contracts.ports`` on
SQLAlchemy.  Each call runs in its own ``session_scope`` transaction and
answers with a ``RepositoryResult``; nothing is raised to the caller.

``update`` applies a submit payload in three steps inside one transaction:

1. staged deletions -- a location id removes every rate of that location,
   a material id removes that single rate row;
2. rates carrying an ``id`` are updated in place;
3. rates without an ``id`` are inserted.

Architecture position
---------------------
**Modules layer** -- persistence adapter.  Uses ``trading_kernel.db`` for
sessions and ``orm`` for the tables.

Failure modes
-------------
* ``SQLAlchemyError`` -> failed envelope with a generic message, logged
  with ``exc_info``; the transaction is rolled back.
* ``RepositoryError`` (unknown contract, stale rate id, duplicate number,
  bad status) -> failed envelope carrying the error text.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from trading_kernel.db.engine import session_scope
from trading_kernel.domain.clock import Clock, SystemClock
from trading_kernel.domain.coercion import as_text, parse_date, parse_decimal, parse_int
from trading_kernel.exceptions import ContractNotFoundError, RepositoryError
from trading_kernel.logging_config import get_logger
from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.models import ContractStatus
from trading_modules.contracts.orm import (
    ContractModel,
    ContractRateModel,
    MaterialModel,
    SupplierLocationModel,
    SupplierModel,
)
from trading_modules.contracts.ports import RepositoryResult

logger = get_logger("modules.contracts.repository")


class _SqlRepository:
    """Shared transaction/envelope handling."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._session_factory = session_factory

    def _run(
        self,
        operation: str,
        work: Callable[[Session], Any],
        message: str | None = None,
    ) -> RepositoryResult:
        try:
            with session_scope(self._session_factory) as session:
                data = work(session)
        except RepositoryError as exc:
            logger.warning(
                "repository_operation_rejected",
                extra={"operation": operation, "error": exc.error},
            )
            return RepositoryResult.fail(exc.error)
        except SQLAlchemyError:
            logger.error(
                "repository_operation_failed",
                extra={"operation": operation},
                exc_info=True,
            )
            return RepositoryResult.fail(f"Failed to {operation.replace('_', ' ')}")
        return RepositoryResult.ok(data, message)


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


_RATE_FIELDS = (
    ("rate_type", "rateType", "fixed_rate"),
    ("payment_direction", "paymentDirection", "we_receive"),
)
_RATE_DECIMALS = (
    ("contract_rate", "contractRate"),
    ("discount_percentage", "discountPercentage"),
    ("minimum_price", "minimumPrice"),
    ("minimum_quantity", "minimumQuantity"),
    ("maximum_quantity", "maximumQuantity"),
)


def _contract_id(contract_id: Any) -> int:
    value = parse_int(contract_id)
    if value is None:
        raise ContractNotFoundError(as_text(contract_id))
    return value


def _load_contract(session: Session, contract_id: Any) -> ContractModel:
    contract = session.get(ContractModel, _contract_id(contract_id))
    if contract is None:
        raise ContractNotFoundError(as_text(contract_id))
    return contract


def _apply_header(contract: ContractModel, payload: dict[str, Any]) -> None:
    contract.contract_number = as_text(payload.get("contractNumber"))
    contract.supplier_id = payload.get("supplierId")
    contract.title = as_text(payload.get("title")) or f"Contract {contract.contract_number}"
    contract.start_date = parse_date(payload.get("startDate"))
    contract.end_date = parse_date(payload.get("endDate"))
    contract.status = as_text(payload.get("status")) or ContractStatus.ACTIVE.value
    contract.terms = as_text(payload.get("terms"))
    contract.notes = as_text(payload.get("notes"))
    contract.total_value = parse_decimal(payload.get("totalValue"))
    contract.currency = as_text(payload.get("currency")) or contract.currency or "OMR"


def _apply_rate(rate: ContractRateModel, location_id: Any, material: dict[str, Any]) -> None:
    rate.location_id = parse_int(location_id)
    rate.material_id = material.get("materialId")
    for attr, key, default in _RATE_FIELDS:
        setattr(rate, attr, as_text(material.get(key)) or default)
    for attr, key in _RATE_DECIMALS:
        setattr(rate, attr, parse_decimal(material.get(key)))
    rate.unit = as_text(material.get("unit"))
    rate.description = as_text(material.get("description"))


class SqlContractRepository(_SqlRepository):
    """``ContractRepository`` on the ``contracts``/``contract_rates`` tables."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        config: ContractsConfig | None = None,
    ):
        super().__init__(session_factory)
        self._clock = clock or SystemClock()
        self._prefix = (config or ContractsConfig()).contract_number_prefix

    def get_all(self) -> RepositoryResult:
        def work(session: Session) -> list[dict]:
            rows = session.scalars(select(ContractModel).order_by(ContractModel.id.desc()))
            return [row.to_response(include_rates=False) for row in rows]

        return self._run("get_all", work)

    def get_by_id(self, contract_id: str) -> RepositoryResult:
        return self._run(
            "get_by_id",
            lambda session: _load_contract(session, contract_id).to_response(),
        )

    def get_next_contract_number(self) -> RepositoryResult:
        prefix = f"{self._prefix}-{self._clock.today().year}-"

        def work(session: Session) -> str:
            numbers = session.scalars(
                select(ContractModel.contract_number).where(
                    ContractModel.contract_number.like(f"{prefix}%")
                )
            )
            highest = 0
            for number in numbers:
                sequence = parse_int(number[len(prefix):])
                if sequence is not None and sequence > highest:
                    highest = sequence
            return f"{prefix}{highest + 1:03d}"

        return self._run("get_next_contract_number", work)

    def create(self, payload: dict[str, Any]) -> RepositoryResult:
        def work(session: Session) -> dict:
            number = as_text(payload.get("contractNumber"))
            existing = session.scalar(
                select(ContractModel.id).where(ContractModel.contract_number == number)
            )
            if existing is not None:
                raise RepositoryError("create", f"Contract number {number} already exists")

            contract = ContractModel(created_by=payload.get("createdBy"))
            _apply_header(contract, payload)
            for location in payload.get("locations") or []:
                for material in location.get("materials") or []:
                    rate = ContractRateModel(created_by=payload.get("createdBy"))
                    _apply_rate(rate, location.get("id"), material)
                    contract.rates.append(rate)
            session.add(contract)
            session.flush()
            session.expire_all()

            logger.info(
                "contract_created",
                extra={
                    "contract_id": contract.id,
                    "contract_number": number,
                    "rate_count": len(contract.rates),
                },
            )
            return contract.to_response()

        return self._run("create", work, "Contract created successfully")

    def update(self, contract_id: str, payload: dict[str, Any]) -> RepositoryResult:
        def work(session: Session) -> dict:
            contract = _load_contract(session, contract_id)
            _apply_header(contract, payload)

            deletions = payload.get("pendingDeletions") or {}
            location_ids = {parse_int(i) for i in deletions.get("locations") or []}
            material_ids = {parse_int(i) for i in deletions.get("materials") or []}
            removed = 0
            for rate in list(contract.rates):
                if rate.location_id in location_ids or rate.id in material_ids:
                    contract.rates.remove(rate)
                    removed += 1

            existing = {rate.id: rate for rate in contract.rates}
            updated = inserted = 0
            for location in payload.get("locations") or []:
                for material in location.get("materials") or []:
                    rate_id = material.get("id")
                    if rate_id is None:
                        rate = ContractRateModel(created_by=payload.get("createdBy"))
                        contract.rates.append(rate)
                        inserted += 1
                    else:
                        rate = existing.get(parse_int(rate_id))
                        if rate is None:
                            raise RepositoryError(
                                "update", f"Rate {rate_id} does not belong to this contract",
                            )
                        updated += 1
                    _apply_rate(rate, location.get("id"), material)

            session.flush()
            session.expire_all()

            logger.info(
                "contract_updated",
                extra={
                    "contract_id": contract.id,
                    "rates_removed": removed,
                    "rates_updated": updated,
                    "rates_inserted": inserted,
                },
            )
            return contract.to_response()

        return self._run("update", work, "Contract updated successfully")

    def delete(self, contract_id: str) -> RepositoryResult:
        def work(session: Session) -> None:
            session.delete(_load_contract(session, contract_id))
            logger.info("contract_row_deleted", extra={"contract_id": contract_id})

        return self._run("delete", work, "Contract deleted successfully")

    def update_status(self, contract_id: str, status: str) -> RepositoryResult:
        def work(session: Session) -> dict:
            try:
                new_status = ContractStatus(status)
            except ValueError:
                raise RepositoryError("update_status", f"Invalid contract status: {status}") from None
            contract = _load_contract(session, contract_id)
            contract.status = new_status.value
            return contract.to_response(include_rates=False)

        return self._run("update_status", work, "Contract status updated successfully")

    def renew(self, contract_id: str, renewal: dict[str, Any]) -> RepositoryResult:
        def work(session: Session) -> dict:
            contract = _load_contract(session, contract_id)
            contract.start_date = parse_date(renewal.get("startDate"))
            contract.end_date = parse_date(renewal.get("endDate"))
            contract.status = ContractStatus.ACTIVE.value
            return contract.to_response(include_rates=False)

        return self._run("renew", work, "Contract renewed successfully")


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class SqlSupplierRepository(_SqlRepository):
    def get_all(self) -> RepositoryResult:
        def work(session: Session) -> list[dict]:
            rows = session.scalars(
                select(SupplierModel)
                .where(SupplierModel.is_active.is_(True))
                .order_by(SupplierModel.name)
            )
            return [row.to_response() for row in rows]

        return self._run("get_suppliers", work)


class SqlMaterialRepository(_SqlRepository):
    def get_all(self) -> RepositoryResult:
        def work(session: Session) -> list[dict]:
            rows = session.scalars(
                select(MaterialModel)
                .where(MaterialModel.is_active.is_(True))
                .order_by(MaterialModel.name)
            )
            return [row.to_response() for row in rows]

        return self._run("get_materials", work)


class SqlSupplierLocationRepository(_SqlRepository):
    def get_by_supplier(self, supplier_id: str) -> RepositoryResult:
        supplier = parse_int(supplier_id)
        if supplier is None:
            return RepositoryResult.ok([])

        def work(session: Session) -> list[dict]:
            rows = session.scalars(
                select(SupplierLocationModel)
                .where(SupplierLocationModel.supplier_id == supplier)
                .order_by(SupplierLocationModel.id)
            )
            return [row.to_response() for row in rows]

        return self._run("get_supplier_locations", work)
