"""
Core package providing the state machine engine.

Architecture:
- Transition rules and tables declare permitted state changes
- The machine engine validates and applies transition attempts
- Channels broadcast transition outcomes to observers

Design Patterns:
- Value Object for rules, tables and events
- Observer Pattern for outcome notification
- Facade Pattern for the engine

Cross-cutting:
- Failures reported as events, never raised
- Per-instance locking for thread safety
- Logging through the standard logging module
"""

# Import order matters to avoid circular dependencies
from .types import ErrorKind
from .transition import TransitionRule, TransitionTable
from .event import ErrorEvent, SuccessEvent, TransitionOutcome
from .channel import Channel, FilteredChannel, Subscription
from .machine import MachineEngine, MachineStatus, create

__all__ = [
    # Types
    "ErrorKind",
    # Transition table
    "TransitionRule",
    "TransitionTable",
    # Outcome events
    "SuccessEvent",
    "ErrorEvent",
    "TransitionOutcome",
    # Channels
    "Channel",
    "FilteredChannel",
    "Subscription",
    # Engine
    "MachineEngine",
    "MachineStatus",
    "create",
]
