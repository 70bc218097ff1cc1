"""
Pytest fixtures for the trading contracts test suite.

Provides:
- Structured logging setup and log capture
- A deterministic clock
- A SQLite database (file under tmp_path) with every module table created
- In-memory fakes for the repository, notifier and confirmer ports
- Builders for contract responses and drafts
"""

import json
import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from io import StringIO

import pytest

from trading_kernel.db.engine import (
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from trading_kernel.domain.clock import DeterministicClock
from trading_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from trading_modules._orm_registry import create_all_tables
from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.models import (
    ContractDraft,
    LocationEntry,
    RateLine,
    SupplierLocationRef,
)
from trading_modules.contracts.ports import RepositoryResult
from trading_modules.contracts.rate_types import RateType

TEST_ACTOR_ID = "user-42"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture trading_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, session):
            session.submit()
            logs = captured_logs()
            assert any(r["message"] == "contract_submitted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("trading_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and configuration
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 15, 9, 0, tzinfo=UTC))


@pytest.fixture
def contracts_config() -> ContractsConfig:
    return ContractsConfig()


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine(tmp_path):
    """SQLite engine with every module table created; torn down per test."""
    engine = init_engine_from_url(f"sqlite:///{tmp_path / 'contracts.db'}")
    create_all_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory()


# =============================================================================
# Port fakes
# =============================================================================


class RecordingNotifier:
    """Notifier that remembers every message."""

    def __init__(self):
        self.infos: list[str] = []
        self.errors: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class ScriptedConfirmer:
    """Confirmer that answers from a fixed value and records the prompts."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.prompts: list[str] = []

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer


class InMemoryContractRepository:
    """Contract repository fake.

    ``responses`` maps a method name to the ``RepositoryResult`` it should
    answer with; ``hooks`` maps a method name to a callable run before
    answering (used to simulate a user acting while a call is outstanding).
    """

    def __init__(self, contracts: dict[str, dict] | None = None):
        self.contracts = dict(contracts or {})
        self.calls: list[tuple] = []
        self.responses: dict[str, RepositoryResult] = {}
        self.hooks: dict[str, object] = {}
        self.next_number = "CON-2024-001"

    def _answer(self, method: str, default: RepositoryResult) -> RepositoryResult:
        hook = self.hooks.get(method)
        if hook is not None:
            hook()
        return self.responses.get(method, default)

    def get_all(self) -> RepositoryResult:
        self.calls.append(("get_all",))
        return self._answer("get_all", RepositoryResult.ok(list(self.contracts.values())))

    def get_by_id(self, contract_id):
        self.calls.append(("get_by_id", contract_id))
        contract = self.contracts.get(str(contract_id))
        if contract is None:
            return self._answer("get_by_id", RepositoryResult.fail(f"Contract not found: {contract_id}"))
        return self._answer("get_by_id", RepositoryResult.ok(contract))

    def get_next_contract_number(self):
        self.calls.append(("get_next_contract_number",))
        return self._answer("get_next_contract_number", RepositoryResult.ok(self.next_number))

    def create(self, payload):
        self.calls.append(("create", payload))
        return self._answer("create", RepositoryResult.ok({"id": 99, **payload}))

    def update(self, contract_id, payload):
        self.calls.append(("update", contract_id, payload))
        return self._answer("update", RepositoryResult.ok({"id": contract_id, **payload}))

    def delete(self, contract_id):
        self.calls.append(("delete", contract_id))
        self.contracts.pop(str(contract_id), None)
        return self._answer("delete", RepositoryResult.ok())

    def update_status(self, contract_id, status):
        self.calls.append(("update_status", contract_id, status))
        return self._answer("update_status", RepositoryResult.ok({"id": contract_id, "status": status}))

    def renew(self, contract_id, renewal):
        self.calls.append(("renew", contract_id, renewal))
        return self._answer("renew", RepositoryResult.ok({"id": contract_id, **renewal}))


class StaticRepository:
    """``get_all``/``get_by_supplier`` fake answering from fixed rows."""

    def __init__(self, rows=None, by_supplier=None, result: RepositoryResult | None = None):
        self.rows = rows or []
        self.by_supplier = by_supplier or {}
        self.result = result
        self.calls: list[tuple] = []

    def get_all(self):
        self.calls.append(("get_all",))
        return self.result or RepositoryResult.ok(list(self.rows))

    def get_by_supplier(self, supplier_id):
        self.calls.append(("get_by_supplier", supplier_id))
        return self.result or RepositoryResult.ok(list(self.by_supplier.get(str(supplier_id), [])))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def confirmer() -> ScriptedConfirmer:
    return ScriptedConfirmer(answer=True)


@pytest.fixture
def contract_repo() -> InMemoryContractRepository:
    return InMemoryContractRepository()


# =============================================================================
# Builders
# =============================================================================


def make_rate_response(
    rate_id,
    location_id,
    material_id,
    *,
    location_name=None,
    rate_type="fixed_rate",
    contract_rate="10.5",
    unit="kg",
    **extra,
) -> dict:
    return {
        "id": rate_id,
        "locationId": location_id,
        "locationName": location_name or f"Yard {location_id}",
        "locationCode": f"LOC-{location_id}",
        "materialId": material_id,
        "rateType": rate_type,
        "contractRate": contract_rate,
        "unit": unit,
        "paymentDirection": "we_receive",
        **extra,
    }


def make_contract_response(contract_id=50, rates=None, **overrides) -> dict:
    """Contract #50 with two locations (A=11, B=12) unless told otherwise."""
    if rates is None:
        rates = [
            make_rate_response(501, 11, 3, location_name="Yard A"),
            make_rate_response(502, 11, 4, location_name="Yard A", contract_rate="7"),
            make_rate_response(503, 12, 3, location_name="Yard B", unit="ton"),
        ]
    contract = {
        "id": contract_id,
        "contractNumber": "CON-2024-050",
        "supplierId": 7,
        "title": "Scrap supply",
        "startDate": "2024-01-01T00:00:00.000Z",
        "endDate": "2024-12-31",
        "status": "active",
        "terms": "Net 30",
        "notes": "",
        "totalValue": "15000",
        "currency": "OMR",
        "rates": rates,
    }
    contract.update(overrides)
    return contract


def make_location_ref(location_id="11", name="Yard A", supplier_id="7") -> SupplierLocationRef:
    return SupplierLocationRef(
        id=location_id,
        supplier_id=supplier_id,
        location_name=name,
        location_code=f"LOC-{location_id}",
    )


def make_complete_line(line_id="new-1", material_id="3", rate="12.5", unit="kg") -> RateLine:
    return RateLine(
        id=line_id,
        material_id=material_id,
        unit=unit,
        rate_type=RateType.FIXED_RATE,
        contract_rate=Decimal(rate),
    )


def make_valid_draft(**overrides) -> ContractDraft:
    """Draft that passes validation: supplier, dates, one location with one complete line."""
    values = dict(
        contract_number="CON-2024-001",
        supplier_id="7",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        locations=(
            LocationEntry(
                id="11",
                location_name="Yard A",
                rate_lines=(make_complete_line(),),
            ),
        ),
    )
    values.update(overrides)
    return ContractDraft(**values)
