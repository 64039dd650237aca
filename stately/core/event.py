"""
Transition outcome payloads.

Architecture:
- Defines the two payloads published by the engine
- Carries diagnostics for failed attempts
- Carries the merged context for successful ones

Design Patterns:
- Value Object: Payloads are frozen dataclasses
- Tagged Union: TransitionOutcome is one of two event types

Outcomes are transient. The engine publishes them and keeps no record.

Dependencies:
- types.py: ErrorKind
- machine/engine.py: Creates and publishes events
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Union

from stately.core.types import ErrorKind, State


@dataclass(frozen=True)
class SuccessEvent(Generic[State]):
    """Published once for every accepted transition.

    ``from_state`` is the state before the change and ``context`` is the
    context after merging, so observers always see a consistent pair.
    """

    from_state: State
    to_state: State
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class ErrorEvent(Generic[State]):
    """Published once for every rejected transition attempt."""

    kind: ErrorKind
    from_state: State
    to_state: State

    @property
    def succeeded(self) -> bool:
        return False


TransitionOutcome = Union[SuccessEvent, ErrorEvent]
