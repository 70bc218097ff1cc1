"""
Contract edit session (``trading_modules.contracts.session``).

Responsibility
--------------
Own one open contract form: the live draft, the snapshot it was opened
from, and the deletions staged while editing.  All mutations go through
the session so that removals of saved rows are remembered, and so that a
cancel can put the draft back exactly as it was loaded.

Architecture position
---------------------
**Modules layer** -- orchestrates the pure draft functions
(``rate_lines``, ``locations``, ``drafts``, ``validation``, ``mapping``)
and talks to the outside only through the ports in ``ports``.

Lifecycle (``workflows.EDIT_SESSION_WORKFLOW``)::

    closed --open--> open --submit | cancel | discard--> closed

Invariants enforced
-------------------
* Drafts are immutable values; the snapshot is the value the session was
  opened with and ``has_changes`` is plain ``!=``.
* ``pending_deletions`` grows only through removals of saved locations or
  rate lines in edit mode, and is cleared on successful submit and on
  rollback.
* At most one submit is in flight per session.
* A repository answer that arrives after ``discard()`` is ignored.
* A failed submit never touches the draft; the session stays open so the
  user can retry.

Failure modes
-------------
* ``SessionNotOpenError`` -- mutating, cancelling or submitting a closed session.
* ``SessionBusyError`` -- submit while another submit is outstanding.
* ``InvalidSessionTransitionError`` -- action not allowed by the workflow.
* Validation and repository failures are returned as ``SubmitResult``s
  and reported through the ``Notifier``; they are never raised.
* A repository call that raises, or answers with something other than a
  ``RepositoryResult``, is logged with ``exc_info`` and reported with the
  generic failure message; the session stays open.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

from trading_kernel.domain.workflow import find_transition
from trading_kernel.exceptions import (
    DuplicateLocationError,
    InvalidSessionTransitionError,
    SessionBusyError,
    SessionNotOpenError,
)
from trading_kernel.logging_config import LogContext, get_logger
from trading_modules.contracts import locations as location_ops
from trading_modules.contracts.config import ContractsConfig
from trading_modules.contracts.drafts import update_draft_field
from trading_modules.contracts.mapping import from_contract_response, to_submit_payload
from trading_modules.contracts.models import (
    ContractDraft,
    LocationEntry,
    PendingDeletions,
    RateLine,
    SupplierLocationRef,
)
from trading_modules.contracts.ports import (
    Confirmer,
    ContractRepository,
    Notifier,
    RepositoryResult,
)
from trading_modules.contracts.validation import validate_draft
from trading_modules.contracts.workflows import EDIT_SESSION_WORKFLOW, EditSessionState

logger = get_logger("modules.contracts.session")


UNSAVED_CHANGES_PROMPT = "You have unsaved changes. Are you sure you want to discard them?"


class EditorMode(str, Enum):
    """Whether the session creates a new contract or edits a saved one."""
    CREATE = "create"
    EDIT = "edit"


class SubmitStatus(str, Enum):
    SUBMITTED = "submitted"
    VALIDATION_FAILED = "validation_failed"
    REPOSITORY_FAILED = "repository_failed"
    UNEXPECTED_ERROR = "unexpected_error"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of ``ContractEditSession.submit``.

    ``errors`` holds validator messages; ``message`` the text shown to the
    user for repository and unexpected failures; ``data`` the repository's
    answer on success.
    """
    status: SubmitStatus
    errors: tuple[str, ...] = ()
    message: str | None = None
    data: Any = None

    @property
    def success(self) -> bool:
        return self.status == SubmitStatus.SUBMITTED


def generic_failure_message(mode: EditorMode) -> str:
    verb = "update" if mode == EditorMode.EDIT else "create"
    return f"Failed to {verb} contract. Please try again."


class ContractEditSession:
    """One contract form: live draft, snapshot and staged deletions."""

    def __init__(
        self,
        contracts: ContractRepository,
        notifier: Notifier,
        confirmer: Confirmer,
        config: ContractsConfig | None = None,
        *,
        actor_id: str | None = None,
        session_id: str | None = None,
    ):
        self._contracts = contracts
        self._notifier = notifier
        self._confirmer = confirmer
        self._config = config or ContractsConfig()
        self._actor_id = actor_id
        self.session_id = session_id or uuid4().hex

        self.state = EditSessionState.CLOSED
        self.mode = EditorMode.CREATE
        self.draft: ContractDraft | None = None
        self.snapshot: ContractDraft | None = None
        self.pending_deletions = PendingDeletions()

        self._in_flight = False
        # Bumped on every open/close; a submit only applies its answer if
        # the generation it started in is still current.
        self._generation = 0

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state == EditSessionState.OPEN

    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    @property
    def has_changes(self) -> bool:
        """True when the live draft differs from the snapshot."""
        return self.is_open and self.draft != self.snapshot

    def open(self, contract: dict[str, Any]) -> ContractDraft:
        """Open an edit form on a repository contract (with flat ``rates``)."""
        draft = from_contract_response(
            contract,
            fallback_unit=self._config.fallback_unit,
            default_currency=self._config.default_currency,
        )
        return self._open(draft, EditorMode.EDIT)

    def open_new(self, draft: ContractDraft) -> ContractDraft:
        """Open a create form on a blank (or prefilled) draft."""
        return self._open(draft, EditorMode.CREATE)

    def _open(self, draft: ContractDraft, mode: EditorMode) -> ContractDraft:
        if self._in_flight:
            raise SessionBusyError(self.session_id)

        previous = self.state
        self._fire("open")
        self._generation += 1
        self.mode = mode
        self.draft = draft
        self.snapshot = draft
        self.pending_deletions = PendingDeletions()

        logger.info(
            "edit_session_opened",
            extra={
                "session_id": self.session_id,
                "mode": mode.value,
                "contract_id": draft.id,
                "contract_number": draft.contract_number,
                "location_count": len(draft.locations),
                "rate_line_count": draft.rate_line_count,
                "reopened": previous == EditSessionState.OPEN,
            },
        )
        return draft

    def restore_from_snapshot(self) -> ContractDraft:
        """Put the live draft back to the value the session was opened with."""
        self._require_open("restore from snapshot")
        self.draft = self.snapshot
        logger.info("edit_session_restored", extra={"session_id": self.session_id})
        return self.draft

    def clear_pending_deletions(self) -> None:
        self._require_open("clear pending deletions")
        self.pending_deletions = PendingDeletions()

    def cancel(self) -> bool:
        """Close the form, asking first if there are unsaved changes.

        Returns True when the session closed.  When the user declines, the
        draft and the staged deletions are left exactly as they were.
        """
        self._require_open("cancel")

        if not self.has_changes:
            self._close("cancel")
            return True

        if not self._confirmer.confirm(UNSAVED_CHANGES_PROMPT):
            logger.info(
                "edit_session_cancel_declined",
                extra={"session_id": self.session_id},
            )
            return False

        self.restore_from_snapshot()
        self.clear_pending_deletions()
        self._close("cancel")
        return True

    def discard(self) -> None:
        """Close without prompting; an outstanding submit answer is dropped."""
        if not self.is_open:
            return
        self._in_flight = False
        self._close("discard")

    def _close(self, action: str) -> None:
        self._fire(action)
        self._generation += 1
        logger.info(
            "edit_session_closed",
            extra={"session_id": self.session_id, "action": action},
        )

    def _fire(self, action: str) -> None:
        transition = find_transition(EDIT_SESSION_WORKFLOW, self.state.value, action)
        if transition is None:
            raise InvalidSessionTransitionError(self.state.value, action)
        self.state = EditSessionState(transition.to_state)

    def _require_open(self, operation: str) -> None:
        if not self.is_open:
            raise SessionNotOpenError(operation)

    # -------------------------------------------------------------------------
    # Draft mutations
    # -------------------------------------------------------------------------

    def set_supplier(self, supplier_id: Any) -> ContractDraft:
        """Change supplier; the previous supplier's locations are removed."""
        self._require_open("set supplier")
        updated = self.draft.with_supplier(supplier_id)
        if updated is not self.draft:
            for location in self.draft.locations:
                self._stage_location(location)
        self.draft = updated
        return updated

    def update_field(self, field: str, value: Any) -> ContractDraft:
        """Replace one header field (``supplier_id`` routes to ``set_supplier``)."""
        self._require_open("update field")
        if field in ("supplier_id", "supplierId"):
            return self.set_supplier(value)
        self.draft = update_draft_field(self.draft, field, value)
        return self.draft

    def add_location(self, ref: SupplierLocationRef) -> bool:
        """Add a supplier location; a duplicate is reported and ignored."""
        self._require_open("add location")
        try:
            self.draft = location_ops.add_location(
                self.draft, ref, default_unit=self._config.fallback_unit,
            )
        except DuplicateLocationError as exc:
            logger.info(
                "duplicate_location_rejected",
                extra={"session_id": self.session_id, "location_id": exc.location_id},
            )
            self._notifier.info(str(exc))
            return False
        return True

    def remove_location(self, location_index: int) -> LocationEntry:
        self._require_open("remove location")
        self.draft, removed = location_ops.remove_location(self.draft, location_index)
        self._stage_location(removed)
        return removed

    def add_material_row(self, location_index: int) -> ContractDraft:
        self._require_open("add material row")
        self.draft = location_ops.add_material_row(
            self.draft, location_index, default_unit=self._config.fallback_unit,
        )
        return self.draft

    def remove_material_row(self, location_index: int, row_index: int) -> RateLine:
        self._require_open("remove material row")
        self.draft, removed = location_ops.remove_material_row(
            self.draft, location_index, row_index,
        )
        if self.mode == EditorMode.EDIT and removed.persisted:
            self.pending_deletions = self.pending_deletions.stage_material(removed.id)
        return removed

    def update_material_row(
        self, location_index: int, row_index: int, field: str, value: Any,
    ) -> ContractDraft:
        self._require_open("update material row")
        self.draft = location_ops.update_material_row(
            self.draft, location_index, row_index, field, value,
        )
        return self.draft

    def _stage_location(self, location: LocationEntry) -> None:
        if self.mode == EditorMode.EDIT and location.persisted:
            self.pending_deletions = self.pending_deletions.stage_location(location.id)

    # -------------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------------

    def validation_messages(self) -> list[str]:
        """Current validator messages (empty when the form may be submitted)."""
        self._require_open("validate")
        return validate_draft(self.draft, self._config).messages

    def submit(self) -> SubmitResult:
        """Validate, then send the draft and staged deletions to the repository."""
        self._require_open("submit")
        if self._in_flight:
            raise SessionBusyError(self.session_id)

        with LogContext.bind(session_id=self.session_id, contract_id=self.draft.id):
            result = validate_draft(self.draft, self._config)
            if not result:
                messages = result.messages
                logger.info(
                    "contract_submit_rejected",
                    extra={
                        "error_codes": [e.code for e in result.errors],
                        "error_count": len(messages),
                    },
                )
                self._notifier.error("\n".join(messages))
                return SubmitResult(
                    status=SubmitStatus.VALIDATION_FAILED, errors=tuple(messages),
                )

            payload = to_submit_payload(
                self.draft,
                created_by=self._actor_id,
                pending_deletions=self.pending_deletions,
            )
            generation = self._generation
            self._in_flight = True
            logger.info(
                "contract_submit_started",
                extra={
                    "mode": self.mode.value,
                    "location_count": len(self.draft.locations),
                    "rate_line_count": self.draft.rate_line_count,
                    "pending_location_deletions": len(self.pending_deletions.locations),
                    "pending_material_deletions": len(self.pending_deletions.materials),
                },
            )
            try:
                response = self._send(payload)
                if generation != self._generation:
                    logger.info("contract_submit_answer_ignored")
                    return SubmitResult(status=SubmitStatus.DISCARDED)
                self._in_flight = False
                return self._apply_response(response)
            except Exception:
                if generation != self._generation:
                    logger.info("contract_submit_answer_ignored")
                    return SubmitResult(status=SubmitStatus.DISCARDED)
                self._in_flight = False
                message = generic_failure_message(self.mode)
                logger.error("contract_submit_error", exc_info=True)
                self._notifier.error(message)
                return SubmitResult(status=SubmitStatus.UNEXPECTED_ERROR, message=message)

    def _send(self, payload: dict[str, Any]) -> RepositoryResult:
        if self.mode == EditorMode.EDIT:
            response = self._contracts.update(self.draft.id, payload)
        else:
            response = self._contracts.create(payload)
        if not isinstance(response, RepositoryResult):
            raise TypeError(
                f"Repository answered with {type(response).__name__}, "
                "expected RepositoryResult"
            )
        return response

    def _apply_response(self, response: RepositoryResult) -> SubmitResult:
        if not response.success:
            message = response.error or generic_failure_message(self.mode)
            logger.warning("contract_submit_failed", extra={"error": message})
            self._notifier.error(message)
            return SubmitResult(status=SubmitStatus.REPOSITORY_FAILED, message=message)

        verb = "updated" if self.mode == EditorMode.EDIT else "created"
        logger.info("contract_submitted", extra={"mode": self.mode.value})
        self._notifier.info(f"Contract {verb} successfully")
        self.pending_deletions = PendingDeletions()
        self._close("submit")
        return SubmitResult(status=SubmitStatus.SUBMITTED, data=response.data)
