"""
Supplier Contracts Service (``trading_modules.contracts.service``).

Responsibility
--------------
Page-level entry point for supplier contracts: list and delete contracts,
start create/edit sessions, feed the location and material dropdowns, and
the status/renewal actions of the contract list.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ContractsService`` composes the
repository ports, the ``Notifier``/``Confirmer`` hooks and an injectable
``Clock``; the form itself is a ``ContractEditSession``.

Failure modes
-------------
* Reference-data loads (contracts, suppliers, materials, supplier
  locations) that fail raise ``RepositoryError`` carrying the repository's
  error text.
* User actions (open for edit, delete, status change, renewal) report a
  failed envelope through the ``Notifier`` and return without raising.
* Opening for edit also catches anything raised while fetching or
  hydrating the contract (transport errors, malformed data), logs it with
  ``exc_info`` and reports a generic message.

Usage::

    service = ContractsService(contracts, suppliers, materials, locations,
                               notifier, confirmer, clock=clock)
    session = service.begin_edit("50")
    session.remove_location(0)
    session.submit()
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from trading_kernel.domain.clock import Clock, SystemClock
from trading_kernel.domain.coercion import parse_date
from trading_kernel.exceptions import RepositoryError
from trading_kernel.logging_config import get_logger
from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.drafts import new_draft
from trading_modules.contracts.mapping import (
    material_from_response,
    supplier_from_response,
    supplier_location_from_response,
)
from trading_modules.contracts.models import (
    ContractStatus,
    Material,
    Supplier,
    SupplierLocationRef,
)
from trading_modules.contracts.ports import (
    Confirmer,
    ContractRepository,
    MaterialRepository,
    Notifier,
    RepositoryResult,
    SupplierLocationRepository,
    SupplierRepository,
)
from trading_modules.contracts.session import ContractEditSession

logger = get_logger("modules.contracts.service")


DELETE_CONTRACT_PROMPT = "Are you sure you want to delete this contract?"
LOAD_FAILURE_MESSAGE = "Failed to load contract. Please try again."


class ContractsService:
    """
    Orchestrates the supplier contract pages over repository ports.

    Contract
    --------
    * Every edit goes through a ``ContractEditSession`` built by
      ``new_session``/``begin_create``/``begin_edit``.
    * Destructive list actions (delete) ask the ``Confirmer`` first.

    Non-goals
    ---------
    * Does NOT render anything; messages go to the injected ``Notifier``.
    * Does NOT talk to a database directly -- see ``repository`` for the
      SQL-backed ports.
    """

    def __init__(
        self,
        contracts: ContractRepository,
        suppliers: SupplierRepository,
        materials: MaterialRepository,
        supplier_locations: SupplierLocationRepository,
        notifier: Notifier,
        confirmer: Confirmer,
        config: ContractsConfig | None = None,
        clock: Clock | None = None,
        actor_id: str | None = None,
    ):
        self._contracts = contracts
        self._suppliers = suppliers
        self._materials = materials
        self._supplier_locations = supplier_locations
        self._notifier = notifier
        self._confirmer = confirmer
        self._config = config or ContractsConfig()
        self._clock = clock or SystemClock()
        self._actor_id = actor_id

    @property
    def config(self) -> ContractsConfig:
        return self._config

    # =========================================================================
    # Sessions
    # =========================================================================

    def new_session(self) -> ContractEditSession:
        return ContractEditSession(
            self._contracts,
            self._notifier,
            self._confirmer,
            self._config,
            actor_id=self._actor_id,
        )

    def begin_create(self) -> ContractEditSession:
        """Open a create form with the next contract number suggested."""
        result = self._contracts.get_next_contract_number()
        number = ""
        if result.success:
            number = str(result.data or "")
        else:
            # The number stays editable; an empty suggestion is not fatal.
            logger.warning(
                "next_contract_number_unavailable", extra={"error": result.error},
            )

        session = self.new_session()
        session.open_new(new_draft(self._config, self._clock.today(), number))
        return session

    def begin_edit(self, contract_id: str) -> ContractEditSession | None:
        """Open an edit form on a saved contract.

        Returns None (after telling the user) when the contract cannot be
        fetched or its data cannot be turned into a draft.
        """
        try:
            result = self._contracts.get_by_id(contract_id)
            if not result.success or not result.data:
                message = result.error or f"Contract not found: {contract_id}"
                logger.warning(
                    "contract_fetch_failed",
                    extra={"contract_id": contract_id, "error": message},
                )
                self._notifier.error(message)
                return None

            session = self.new_session()
            session.open(result.data)
        except Exception:
            logger.error(
                "contract_fetch_error",
                extra={"contract_id": contract_id},
                exc_info=True,
            )
            self._notifier.error(LOAD_FAILURE_MESSAGE)
            return None
        return session

    def available_locations(
        self,
        session: ContractEditSession,
        refs: list[SupplierLocationRef],
    ) -> list[SupplierLocationRef]:
        """Supplier locations that are not on the session's draft yet."""
        if session.draft is None:
            return list(refs)
        return [ref for ref in refs if not session.draft.has_location(ref.id)]

    # =========================================================================
    # Reference data
    # =========================================================================

    def list_contracts(self) -> list[dict[str, Any]]:
        return list(self._unwrap(self._contracts.get_all(), "get_all") or [])

    def load_suppliers(self) -> list[Supplier]:
        rows = self._unwrap(self._suppliers.get_all(), "get_suppliers") or []
        return [supplier_from_response(row) for row in rows]

    def load_materials(self) -> list[Material]:
        rows = self._unwrap(self._materials.get_all(), "get_materials") or []
        return [material_from_response(row) for row in rows]

    def load_supplier_locations(self, supplier_id: str) -> list[SupplierLocationRef]:
        """Active locations of ``supplier_id``; empty when no supplier is chosen."""
        if not str(supplier_id or "").strip():
            return []
        rows = self._unwrap(
            self._supplier_locations.get_by_supplier(supplier_id), "get_by_supplier",
        ) or []
        refs = [supplier_location_from_response(row) for row in rows]
        active = [ref for ref in refs if ref.is_active]
        logger.debug(
            "supplier_locations_loaded",
            extra={"supplier_id": supplier_id, "count": len(active)},
        )
        return active

    def expiring_contracts(self, days: int | None = None) -> list[dict[str, Any]]:
        """Active contracts whose end date falls within ``days`` from today."""
        window = days if days is not None else self._config.expiring_within_days
        today = self._clock.today()
        horizon = today + timedelta(days=window)

        expiring = []
        for contract in self.list_contracts():
            end = parse_date(contract.get("endDate"))
            status = contract.get("status") or ContractStatus.ACTIVE.value
            if end is None or status != ContractStatus.ACTIVE.value:
                continue
            if today <= end <= horizon:
                expiring.append(contract)
        expiring.sort(key=lambda c: parse_date(c.get("endDate")))
        return expiring

    def _unwrap(self, result: RepositoryResult, operation: str) -> Any:
        if not result.success:
            logger.warning(
                "repository_call_failed",
                extra={"operation": operation, "error": result.error},
            )
            raise RepositoryError(operation, result.error or f"{operation} failed")
        return result.data

    # =========================================================================
    # List actions
    # =========================================================================

    def delete_contract(self, contract_id: str) -> bool:
        if not self._confirmer.confirm(DELETE_CONTRACT_PROMPT):
            return False

        result = self._contracts.delete(contract_id)
        if not result.success:
            self._notifier.error(result.error or "Failed to delete contract")
            return False

        logger.info("contract_deleted", extra={"contract_id": contract_id})
        self._notifier.info(result.message or "Contract deleted successfully")
        return True

    def update_status(self, contract_id: str, status: ContractStatus | str) -> RepositoryResult:
        status = ContractStatus(status)
        result = self._contracts.update_status(contract_id, status.value)
        if not result.success:
            self._notifier.error(result.error or "Failed to update contract status")
            return result

        logger.info(
            "contract_status_updated",
            extra={"contract_id": contract_id, "status": status.value},
        )
        self._notifier.info(result.message or "Contract status updated successfully")
        return result

    def renew_contract(
        self,
        contract_id: str,
        start_date: date,
        end_date: date | None = None,
    ) -> RepositoryResult:
        """Renew a contract for a new period (default term when no end date)."""
        if end_date is None:
            end_date = start_date + timedelta(days=self._config.default_term_days)
        if end_date < start_date:
            message = "End date must be on or after start date"
            self._notifier.error(message)
            return RepositoryResult.fail(message)

        result = self._contracts.renew(
            contract_id,
            {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
        )
        if not result.success:
            self._notifier.error(result.error or "Failed to renew contract")
            return result

        logger.info(
            "contract_renewed",
            extra={
                "contract_id": contract_id,
                "start_date": start_date,
                "end_date": end_date,
            },
        )
        self._notifier.info(result.message or "Contract renewed successfully")
        return result
