"""
State machine for the practice session lifecycle.

Idle -> AwaitingQuestion -> Presenting -> Evaluated -> (AwaitingQuestion | Completed)
Completed -> AwaitingQuestion ("continue practice"); any live state -> Abandoned.
"""

from enum import Enum
from typing import Dict, List, Set


class SessionState(str, Enum):
    """Lifecycle states of one practice session."""
    IDLE = "idle"
    AWAITING_QUESTION = "awaiting_question"
    PRESENTING = "presenting"
    EVALUATED = "evaluated"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class InvalidTransition(ValueError):
    """An operation is not allowed in the session's current state."""

    def __init__(self, from_state: SessionState, to_state: SessionState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


# Valid transitions: from_state -> allowed target states
_TRANSITIONS: Dict[SessionState, Set[SessionState]] = {
    SessionState.IDLE: {SessionState.AWAITING_QUESTION},
    SessionState.AWAITING_QUESTION: {SessionState.PRESENTING},
    SessionState.PRESENTING: {SessionState.EVALUATED},
    SessionState.EVALUATED: {SessionState.AWAITING_QUESTION, SessionState.COMPLETED},
    SessionState.COMPLETED: {SessionState.AWAITING_QUESTION},
    SessionState.ABANDONED: set(),
}

TERMINAL_STATES = {SessionState.ABANDONED}


def valid_transitions(from_state: SessionState) -> List[SessionState]:
    """Return the states reachable from from_state (abandon included for live states)."""
    targets = set(_TRANSITIONS.get(from_state, set()))
    if from_state not in TERMINAL_STATES:
        targets.add(SessionState.ABANDONED)
    return sorted(targets, key=lambda s: list(SessionState).index(s))


def can_transition(from_state: SessionState, to_state: SessionState) -> bool:
    """Check whether from_state -> to_state is allowed."""
    return to_state in valid_transitions(from_state)


class SessionStateMachine:
    """Tracks the current state and rejects transitions outside the table."""

    def __init__(self, initial: SessionState = SessionState.IDLE):
        self._state = initial

    @property
    def state(self) -> SessionState:
        return self._state

    def require(self, *states: SessionState) -> None:
        """Raise InvalidTransition unless the current state is one of states."""
        if self._state not in states:
            raise InvalidTransition(self._state, states[0])

    def transition(self, to_state: SessionState) -> SessionState:
        """Move to to_state. Returns the previous state."""
        from_state = self._state
        if not can_transition(from_state, to_state):
            raise InvalidTransition(from_state, to_state)
        self._state = to_state
        return from_state

    def restore(self, previous: SessionState) -> None:
        """Return to previous after a question request ends without a question."""
        if self._state is not SessionState.AWAITING_QUESTION:
            raise InvalidTransition(self._state, previous)
        self._state = previous
