"""
Typed Exception Hierarchy for the Trading Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to react to an error by its type and code, never by
parsing a message string. Every exception therefore:

  1. Has its own class (catch by type, not message)
  2. Carries a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (survives logging and serialization)

Example:
    try:
        draft = add_location(draft, ref, default_unit="kg")
    except DuplicateLocationError as e:
        notifier.info(f"Location {e.location_name} is already added")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TradingKernelError (base)
    |
    +-- DraftError
    |   +-- DuplicateLocationError
    |   +-- InvalidRowIndexError
    |   +-- UnknownFieldError
    |
    +-- SessionError
    |   +-- SessionNotOpenError
    |   +-- SessionBusyError
    |   +-- InvalidSessionTransitionError
    |
    +-- RepositoryError
    |   +-- ContractNotFoundError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Draft           | DUPLICATE_LOCATION            | Supplier location already on the draft
                | INVALID_ROW_INDEX             | Location/row index out of range
                | UNKNOWN_FIELD                 | Field name not part of the record
----------------|-------------------------------|---------------------------------------
Session         | SESSION_NOT_OPEN              | Mutating or submitting a closed session
                | SESSION_BUSY                  | A submit is already in flight
                | INVALID_SESSION_TRANSITION    | Action not allowed in current state
----------------|-------------------------------|---------------------------------------
Repository      | REPOSITORY_ERROR              | Remote call reported a failure
                | CONTRACT_NOT_FOUND            | Contract id does not exist
----------------|-------------------------------|---------------------------------------
Configuration   | CONFIGURATION_ERROR           | Invalid or unreadable settings

Validation failures are NOT exceptions: the validator returns a
``ValidationResult`` and the edit session reports them to the user.
"""


class TradingKernelError(Exception):
    """
    Base exception for all trading kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "TRADING_KERNEL_ERROR"


# Draft-related exceptions


class DraftError(TradingKernelError):
    """Base exception for contract draft editing errors."""

    code: str = "DRAFT_ERROR"


class DuplicateLocationError(DraftError):
    """Supplier location is already part of the draft."""

    code: str = "DUPLICATE_LOCATION"

    def __init__(self, location_id: str, location_name: str = ""):
        self.location_id = location_id
        self.location_name = location_name
        super().__init__(
            f"Location {location_name or location_id} is already added to this contract"
        )


class InvalidRowIndexError(DraftError):
    """Location or rate-line index does not exist in the draft."""

    code: str = "INVALID_ROW_INDEX"

    def __init__(self, location_index: int, row_index: int | None = None):
        self.location_index = location_index
        self.row_index = row_index
        if row_index is None:
            message = f"No location at index {location_index}"
        else:
            message = f"No rate line at index {row_index} for location {location_index}"
        super().__init__(message)


class UnknownFieldError(DraftError):
    """Field name is not part of the edited record."""

    code: str = "UNKNOWN_FIELD"

    def __init__(self, record: str, field_name: str):
        self.record = record
        self.field_name = field_name
        super().__init__(f"{record} has no editable field '{field_name}'")


# Session-related exceptions


class SessionError(TradingKernelError):
    """Base exception for edit session lifecycle errors."""

    code: str = "SESSION_ERROR"


class SessionNotOpenError(SessionError):
    """Operation requires an open edit session."""

    code: str = "SESSION_NOT_OPEN"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: edit session is not open")


class SessionBusyError(SessionError):
    """A request is already in flight for this session."""

    code: str = "SESSION_BUSY"

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} already has a request in flight")


class InvalidSessionTransitionError(SessionError):
    """Workflow does not allow the action from the current state."""

    code: str = "INVALID_SESSION_TRANSITION"

    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Action '{action}' is not allowed from state '{state}'")


# Repository-related exceptions


class RepositoryError(TradingKernelError):
    """A repository call reported a failure."""

    code: str = "REPOSITORY_ERROR"

    def __init__(self, operation: str, error: str):
        self.operation = operation
        self.error = error
        super().__init__(error)


class ContractNotFoundError(RepositoryError):
    """Contract with given id was not found."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__("get_by_id", f"Contract not found: {contract_id}")


# Configuration exceptions


class ConfigurationError(TradingKernelError):
    """Settings are missing, malformed, or out of range."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid setting '{setting}': {reason}")
