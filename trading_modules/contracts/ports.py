"""
Collaborator ports for the contract editor (``trading_modules.contracts.ports``).

Responsibility
--------------
Declare the shapes of everything the editor talks to but does not own:
the contract, supplier, material and supplier-location repositories, and
the two user-interaction hooks (notices and confirmations).

Every repository call returns a ``RepositoryResult`` envelope instead of
raising: a failed call carries the repository's own error text, which the
editor shows to the user verbatim.

Architecture position
---------------------
**Modules layer** -- interfaces only.  The SQL implementations live in
``trading_modules.contracts.repository``; tests use in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Self, runtime_checkable


@dataclass(frozen=True)
class RepositoryResult:
    """``{success, data, error, message}`` envelope returned by repositories."""
    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> Self:
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> Self:
        return cls(success=False, error=error)


@runtime_checkable
class ContractRepository(Protocol):
    """Remote contract resource.

    ``create``/``update`` take the dict built by
    ``mapping.to_submit_payload``; ``get_by_id`` answers with a contract dict
    carrying a flat ``rates`` list.
    """

    def get_all(self) -> RepositoryResult: ...

    def get_by_id(self, contract_id: str) -> RepositoryResult: ...

    def get_next_contract_number(self) -> RepositoryResult: ...

    def create(self, payload: dict[str, Any]) -> RepositoryResult: ...

    def update(self, contract_id: str, payload: dict[str, Any]) -> RepositoryResult: ...

    def delete(self, contract_id: str) -> RepositoryResult: ...

    def update_status(self, contract_id: str, status: str) -> RepositoryResult: ...

    def renew(self, contract_id: str, renewal: dict[str, Any]) -> RepositoryResult: ...


@runtime_checkable
class SupplierRepository(Protocol):
    def get_all(self) -> RepositoryResult: ...


@runtime_checkable
class MaterialRepository(Protocol):
    def get_all(self) -> RepositoryResult: ...


@runtime_checkable
class SupplierLocationRepository(Protocol):
    def get_by_supplier(self, supplier_id: str) -> RepositoryResult: ...


@runtime_checkable
class Notifier(Protocol):
    """Shows a message to the user."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@runtime_checkable
class Confirmer(Protocol):
    """Asks the user a yes/no question; True means go ahead."""

    def confirm(self, message: str) -> bool: ...
