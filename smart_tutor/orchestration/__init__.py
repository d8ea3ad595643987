"""Orchestration layer - session state machine and practice session coordination."""

from smart_tutor.orchestration.session_coordinator import SessionCoordinator, SessionPreferences
from smart_tutor.orchestration.state_machine import (
    InvalidTransition,
    SessionState,
    SessionStateMachine,
)

__all__ = [
    "SessionCoordinator",
    "SessionPreferences",
    "InvalidTransition",
    "SessionState",
    "SessionStateMachine",
]
