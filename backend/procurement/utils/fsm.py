from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Usage:
    from procurement.utils.fsm import TransitionValidator
    PO_FSM = TransitionValidator({
        'draft': {'pending_approval', 'cancelled'},
        'pending_approval': {'sent', 'cancelled'},
        'received': set(),
    })
    PO_FSM.assert_can_transition(current_status, target_status)

Raises InvalidArgument if invalid.
"""
from typing import Dict, Set
from procurement.errors import InvalidArgument

class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def is_terminal(self, status: str) -> bool:
        return not self.graph.get(status)

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidArgument(f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def states(self):
        """States in declaration order, used for documentation."""
        return list(self.graph.keys())

__all__ = ['TransitionValidator']
