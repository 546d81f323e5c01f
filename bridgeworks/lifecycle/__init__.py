"""Lifecycle — the status transition table and the state machine built on it."""

from .state_machine import apply_transition, create_request
from .transitions import TRANSITIONS, is_transition_allowed, propose_transition

__all__ = [
    "TRANSITIONS",
    "apply_transition",
    "create_request",
    "is_transition_allowed",
    "propose_transition",
]
