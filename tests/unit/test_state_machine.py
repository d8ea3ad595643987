"""Unit tests for the practice session state machine."""

import pytest

from smart_tutor.orchestration.state_machine import (
    InvalidTransition,
    SessionState,
    SessionStateMachine,
    can_transition,
    valid_transitions,
)


def test_happy_path():
    m = SessionStateMachine()
    assert m.state == SessionState.IDLE
    for target in (
        SessionState.AWAITING_QUESTION,
        SessionState.PRESENTING,
        SessionState.EVALUATED,
        SessionState.AWAITING_QUESTION,
        SessionState.PRESENTING,
        SessionState.EVALUATED,
        SessionState.COMPLETED,
        SessionState.AWAITING_QUESTION,
    ):
        m.transition(target)
    assert m.state == SessionState.AWAITING_QUESTION


def test_transition_returns_previous_state():
    m = SessionStateMachine()
    assert m.transition(SessionState.AWAITING_QUESTION) == SessionState.IDLE


def test_invalid_transition_raises():
    m = SessionStateMachine()
    with pytest.raises(InvalidTransition) as exc_info:
        m.transition(SessionState.EVALUATED)
    assert exc_info.value.from_state == SessionState.IDLE
    assert exc_info.value.to_state == SessionState.EVALUATED
    assert m.state == SessionState.IDLE


def test_cannot_skip_presentation():
    assert not can_transition(SessionState.AWAITING_QUESTION, SessionState.EVALUATED)
    assert not can_transition(SessionState.PRESENTING, SessionState.AWAITING_QUESTION)


def test_abandon_reachable_from_every_live_state():
    for state in SessionState:
        if state is SessionState.ABANDONED:
            continue
        assert SessionState.ABANDONED in valid_transitions(state)


def test_abandoned_is_terminal():
    m = SessionStateMachine(SessionState.ABANDONED)
    assert valid_transitions(SessionState.ABANDONED) == []
    with pytest.raises(InvalidTransition):
        m.transition(SessionState.AWAITING_QUESTION)


def test_require():
    m = SessionStateMachine()
    m.require(SessionState.IDLE, SessionState.EVALUATED)
    with pytest.raises(InvalidTransition):
        m.require(SessionState.PRESENTING)


def test_restore_only_from_awaiting():
    m = SessionStateMachine()
    previous = m.transition(SessionState.AWAITING_QUESTION)
    m.restore(previous)
    assert m.state == SessionState.IDLE
    with pytest.raises(InvalidTransition):
        m.restore(SessionState.EVALUATED)


def test_invalid_transition_is_value_error():
    assert issubclass(InvalidTransition, ValueError)
