"""
Machine engine: active state, context and transition validation.

Architecture:
- Owns the active state, the context and the transition table
- Validates and applies transition attempts
- Publishes one outcome per attempt on its channels

Design Patterns:
- Facade Pattern: Single entry point for mutation and observation
- Observer Pattern: Outcome notification through channels
- Value Object: Tables and events are immutable

Responsibilities:
1. Validation
   - Empty table
   - Self transition
   - Missing rule

2. Mutation
   - Shallow context merge
   - Atomic state and context update

3. Notification
   - Success and error channels
   - Per-state and per-kind filtered views

Cross-cutting:
- Failures reported as data, never raised
- Thread safety through a per-instance lock
- Debug logging of every attempt

Dependencies:
- transition.py: Rule lookup
- event.py: Outcome payloads
- channel.py: Broadcast channels
"""

import logging
import threading
from typing import Any, Generic, Iterable, Mapping, Optional, Union

from stately.core.channel import Channel, FilteredChannel
from stately.core.event import ErrorEvent, SuccessEvent
from stately.core.machine.machine_status import MachineStatus
from stately.core.transition import RuleConfig, TransitionTable
from stately.core.types import Context, ErrorKind, State

logger = logging.getLogger(__name__)


def _check_context(context: Any, name: str) -> Context:
    if context is None:
        return {}
    if not isinstance(context, Mapping):
        raise ValueError(f"{name} must be a mapping")
    return dict(context)


class MachineEngine(Generic[State]):
    """A finite state machine with a declarative transition table.

    The engine tracks exactly one active state. Callers configure the
    permitted transitions once with ``set_transitions`` and then request
    changes with ``attempt_transition``. The outcome of every attempt is
    published on ``on_success`` or ``on_error``; nothing is returned and
    nothing is raised for a rejected transition.

    Class Invariants:
    1. Exactly one state is active at any time
    2. State and context change only on an accepted transition
    3. Each attempt publishes exactly one event
    4. A published ``from_state`` is the state before the change
    5. A published context is the context after the merge

    Design Patterns:
    - Facade: Coordinates table, channels and state
    - Observer: Publishes outcomes

    Threading/Concurrency Guarantees:
    1. Read, validation, mutation and publish form one critical section
    2. Concurrent attempts on one instance are serialized
    3. Instances share no state

    Performance Characteristics:
    1. O(1) state and status access
    2. O(c) context snapshot where c is context size
    3. O(r * s) validation where r is rule count and s is set size
    4. O(n) publish where n is subscriber count
    """

    def __init__(self, initial_state: State, context: Optional[Mapping[str, Any]] = None) -> None:
        """Initialize a new MachineEngine instance.

        Args:
            initial_state: The state the machine starts in
            context: Optional initial context

        Raises:
            ValueError: If context is not a mapping
        """
        self._state = initial_state
        self._context = _check_context(context, "Initial context")
        self._transitions: TransitionTable[State] = TransitionTable()
        self._lock = threading.RLock()

        self._on_success: Channel[SuccessEvent[State]] = Channel("success")
        self._on_error: Channel[ErrorEvent[State]] = Channel("error")

    @property
    def state(self) -> State:
        """Get the active state."""
        with self._lock:
            return self._state

    @property
    def context(self) -> Context:
        """Get a copy of the current context."""
        with self._lock:
            return self._context.copy()

    @property
    def transitions(self) -> TransitionTable[State]:
        """Get the configured transition table."""
        with self._lock:
            return self._transitions

    @property
    def status(self) -> MachineStatus:
        """Get the configuration status."""
        with self._lock:
            return MachineStatus.CONFIGURED if self._transitions else MachineStatus.UNCONFIGURED

    @property
    def on_success(self) -> Channel[SuccessEvent[State]]:
        """Channel receiving every accepted transition."""
        return self._on_success

    @property
    def on_error(self) -> Channel[ErrorEvent[State]]:
        """Channel receiving every rejected transition attempt."""
        return self._on_error

    def on_success_for(self, state: State) -> FilteredChannel[SuccessEvent[State]]:
        """View of ``on_success`` limited to transitions into ``state``."""
        return self._on_success.filter(lambda event: event.to_state == state)

    def on_error_of(self, kind: ErrorKind) -> FilteredChannel[ErrorEvent[State]]:
        """View of ``on_error`` limited to errors of ``kind``.

        Raises:
            ValueError: If kind is not an ErrorKind
        """
        if not isinstance(kind, ErrorKind):
            raise ValueError("Error kind must be an ErrorKind enum value")
        return self._on_error.filter(lambda event: event.kind is kind)

    def set_transitions(self, rules: Union[TransitionTable[State], Iterable[RuleConfig]]) -> None:
        """Replace the transition table.

        The previous table is discarded entirely. Rules are not checked for
        reachability or duplication; bad rules surface as NO_TRANSITION
        errors when exercised.

        Args:
            rules: A TransitionTable, or rules and/or ``{"from", "to"}``
                mappings in declaration order

        Raises:
            ValueError: If an entry cannot be turned into a rule
        """
        table = rules if isinstance(rules, TransitionTable) else TransitionTable.from_config(rules)
        with self._lock:
            self._transitions = table
        logger.debug("Transition table replaced with %d rule(s)", len(table))

    def validate(self, target: State) -> Optional[ErrorKind]:
        """Check a transition without attempting it.

        Args:
            target: Candidate destination state

        Returns:
            The ErrorKind an attempt would report, or None if it would succeed
        """
        with self._lock:
            if not self._transitions:
                return ErrorKind.EMPTY_TRANSITIONS
            if self._state == target:
                return ErrorKind.SAME_STATE
            if not self._transitions.permits(self._state, target):
                return ErrorKind.NO_TRANSITION
            return None

    def can_transition(self, target: State) -> bool:
        """Check whether an attempt to move to ``target`` would succeed."""
        return self.validate(target) is None

    def attempt_transition(self, target: State, context: Optional[Mapping[str, Any]] = None) -> None:
        """Try to move to ``target``, merging ``context`` on success.

        Exactly one event is published: a SuccessEvent on ``on_success``
        or an ErrorEvent on ``on_error``. Rejected attempts leave state and
        context untouched and are never raised.

        Args:
            target: Destination state
            context: Optional partial context; its keys override existing ones

        Raises:
            ValueError: If context is not a mapping
        """
        partial = _check_context(context, "Context")

        with self._lock:
            source = self._state
            error = self.validate(target)
            if error is not None:
                logger.debug("Transition %r -> %r rejected: %s", source, target, error)
                self._on_error.publish(ErrorEvent(kind=error, from_state=source, to_state=target))
                return

            merged = {**self._context, **partial}
            self._state = target
            self._context = merged
            logger.debug("Transition %r -> %r", source, target)
            self._on_success.publish(SuccessEvent(from_state=source, to_state=target, context=merged.copy()))

    def __repr__(self) -> str:
        return f"MachineEngine(state={self._state!r}, rules={len(self._transitions)})"


def create(initial_state: State, context: Optional[Mapping[str, Any]] = None) -> MachineEngine[State]:
    """Create a machine engine in ``initial_state``.

    Args:
        initial_state: The state the machine starts in
        context: Optional initial context

    Returns:
        A new, unconfigured MachineEngine
    """
    return MachineEngine(initial_state, context)
