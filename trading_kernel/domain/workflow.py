"""
Canonical workflow types (``trading_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for workflow state machines, plus a lookup helper that
answers "which transition does this action fire from this state?".

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/`` or outer layers.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owner of the workflow does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document or session lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"initial_state '{self.initial_state}' is not one of {self.states}"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Transition {t.action} references unknown state "
                    f"({t.from_state} -> {t.to_state})"
                )

    def actions_from(self, state: str) -> tuple[str, ...]:
        """Actions that may fire from ``state``."""
        return tuple(t.action for t in self.transitions if t.from_state == state)


def find_transition(workflow: Workflow, state: str, action: str) -> Transition | None:
    """Return the transition for ``action`` from ``state``, or None."""
    for t in workflow.transitions:
        if t.from_state == state and t.action == action:
            return t
    return None
