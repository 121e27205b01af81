"""Domain enumerations for doodle.

``ResearchPhase`` names the states of the research controller.  The
legal transitions between them are kept next to the enum so that every
node advancing the phase checks against the same table.
"""

from enum import Enum


class ResearchPhase(Enum):
    """Finite-state-machine states for one research session."""

    PLANNING = "planning"
    RESEARCHING = "researching"
    EVALUATING = "evaluating"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (ResearchPhase.DONE, ResearchPhase.ABORTED)


VALID_TRANSITIONS: dict[ResearchPhase, frozenset[ResearchPhase]] = {
    ResearchPhase.PLANNING: frozenset({ResearchPhase.RESEARCHING, ResearchPhase.ABORTED}),
    ResearchPhase.RESEARCHING: frozenset({ResearchPhase.EVALUATING, ResearchPhase.ABORTED}),
    ResearchPhase.EVALUATING: frozenset({
        ResearchPhase.RESEARCHING,
        ResearchPhase.SYNTHESIZING,
        ResearchPhase.ABORTED,
    }),
    ResearchPhase.SYNTHESIZING: frozenset({ResearchPhase.DONE, ResearchPhase.ABORTED}),
    ResearchPhase.DONE: frozenset(),
    ResearchPhase.ABORTED: frozenset(),
}


def can_transition(current: ResearchPhase, target: ResearchPhase) -> bool:
    """Return ``True`` if *target* may follow *current*."""
    return target in VALID_TRANSITIONS[current]
