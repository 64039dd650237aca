"""
Type definitions and enums for the state machine.

This module contains shared type definitions used across the engine,
the transition table and the event payloads. It keeps those modules
free of circular imports.

Design:
- No runtime dependencies on other modules
- Only contains type definitions and enums
- Provides type hints for static analysis
"""

from enum import Enum, auto
from typing import Any, Callable, Dict, TypeVar


class ErrorKind(Enum):
    """Defines the reasons a transition attempt can be rejected.

    The kinds are mutually exclusive. The engine checks them in declaration
    order and reports the first one that applies.
    """

    EMPTY_TRANSITIONS = auto()  # No transition table configured
    SAME_STATE = auto()  # Target equals the active state
    NO_TRANSITION = auto()  # No rule connects active state to target

    def __str__(self) -> str:
        return self.name


# Any comparable value; equality is ``==``, hashing is not required
State = TypeVar("State")

# Type aliases for common types
Context = Dict[str, Any]
Predicate = Callable[[Any], bool]
