"""stately: declarative finite state machine engine

This package provides a finite state machine that tracks one active state,
validates transitions against a declared transition table, carries a
key-value context, and broadcasts transition outcomes to subscribers.

Responsibilities:
    - Transition table declaration and lookup
    - Transition validation and state/context mutation
    - Synchronous publish/subscribe of outcomes

Interactions:
    - Client code through public API
    - Logging system for diagnostics

Cross-cutting Concerns:
    Thread Safety:
        - Each engine serializes its own transition attempts
        - Channels tolerate subscription changes during delivery

    Error Handling:
        - Rejected transitions are published, never raised
        - Invalid arguments raise ValueError
        - Subscriber failures are logged and isolated

    Logging:
        - Module-level loggers under the ``stately`` namespace
        - No handlers configured by the library
"""

from stately.core import (
    Channel,
    ErrorEvent,
    ErrorKind,
    FilteredChannel,
    MachineEngine,
    MachineStatus,
    Subscription,
    SuccessEvent,
    TransitionOutcome,
    TransitionRule,
    TransitionTable,
    create,
)

__version__ = "0.1.0"

__all__ = [
    "Channel",
    "ErrorEvent",
    "ErrorKind",
    "FilteredChannel",
    "MachineEngine",
    "MachineStatus",
    "Subscription",
    "SuccessEvent",
    "TransitionOutcome",
    "TransitionRule",
    "TransitionTable",
    "create",
]
