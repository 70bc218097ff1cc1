"""
Supplier Contracts Module (``trading_modules.contracts``).

Responsibility
--------------
The contract editor core: a contract draft with its supplier locations and
the material rates agreed at each, the validator that gates submission,
the mapping to and from the repository wire shape, and the edit session
that snapshots a draft, stages deletions and rolls back on cancel.

Architecture position
---------------------
**Modules layer** -- pure draft operations plus a session/service facade
that reaches the outside world only through the ports in ``ports``.

Invariants enforced
-------------------
* Choosing the ``free`` rate type forces the contract rate to zero, both
  when editing and when building the submit payload.
* Changing the supplier clears the draft's locations.
* A supplier location appears at most once on a draft.
* Staged deletions are cleared on successful submit and on rollback.

Failure modes
-------------
* Validation failures and repository failures come back as result objects
  and user notices.
* Programming errors (bad index, unknown field, closed session) raise the
  typed exceptions of ``trading_kernel.exceptions``.
"""

from trading_modules.contracts.config import ContractsConfig
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
from trading_modules.contracts.rate_types import PaymentDirection, RateType
from trading_modules.contracts.service import ContractsService
from trading_modules.contracts.session import (
    ContractEditSession,
    EditorMode,
    SubmitResult,
    SubmitStatus,
)
from trading_modules.contracts.validation import is_form_valid, validate, validate_draft
from trading_modules.contracts.workflows import EDIT_SESSION_WORKFLOW, EditSessionState

__all__ = [
    "ContractsConfig",
    "ContractDraft",
    "ContractStatus",
    "LocationEntry",
    "Material",
    "PendingDeletions",
    "RateLine",
    "Supplier",
    "SupplierLocationRef",
    "PaymentDirection",
    "RateType",
    "ContractsService",
    "ContractEditSession",
    "EditorMode",
    "SubmitResult",
    "SubmitStatus",
    "is_form_valid",
    "validate",
    "validate_draft",
    "EDIT_SESSION_WORKFLOW",
    "EditSessionState",
]
