"""Contract Editor Workflows.

Lifecycle of one contract edit session: a session is opened on a draft and
closed again by a successful submit, a (confirmed) cancel, or a discard.
"""

from enum import Enum

from trading_kernel.domain.workflow import Guard, Transition, Workflow
from trading_kernel.logging_config import get_logger

logger = get_logger("modules.contracts.workflows")


class EditSessionState(Enum):
    """
    Edit session states.

    CLOSED -- No draft is being edited.
    OPEN   -- A draft and its snapshot are live; mutations are allowed.
    """
    CLOSED = "closed"
    OPEN = "open"


SUBMIT_ACCEPTED_GUARD = Guard(
    name="submit_accepted",
    description="The draft validates and the contract repository accepted it",
)
UNCHANGED_OR_CONFIRMED_GUARD = Guard(
    name="unchanged_or_confirmed",
    description="The draft equals its snapshot or the user confirmed losing changes",
)


EDIT_SESSION_WORKFLOW = Workflow(
    name="contract_edit_session",
    description="Contract editor session lifecycle",
    initial_state=EditSessionState.CLOSED.value,
    states=tuple(s.value for s in EditSessionState),
    transitions=(
        Transition("closed", "open", action="open"),
        # reopening replaces the draft being edited
        Transition("open", "open", action="open"),
        Transition(
            "open", "closed", action="submit",
            guard=SUBMIT_ACCEPTED_GUARD,
        ),
        Transition(
            "open", "closed", action="cancel",
            guard=UNCHANGED_OR_CONFIRMED_GUARD,
        ),
        Transition("open", "closed", action="discard"),
    ),
)
