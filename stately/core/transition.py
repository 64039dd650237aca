"""
Transition rules and the transition table.

Architecture:
- Declares which state changes are permitted
- Answers the engine's "is this target reachable" question
- Stays immutable once built; the engine swaps whole tables

Design Patterns:
- Value Object: Rules and tables are frozen
- Predicate Pair: A rule is a (from-set, to-set) membership test

Responsibilities:
1. Rule representation
   - Source state set
   - Target state set
   - Mapping form for plain configuration data

2. Lookup
   - Rules applicable to a state
   - Existence check for a target
   - Reachable target listing

Dependencies:
- machine/engine.py: Validates attempts against the table
"""

from dataclasses import dataclass
from typing import Any, Generic, Iterable, Iterator, Mapping, Tuple, Union

from stately.core.types import State


def _as_state_tuple(states: Iterable[Any], field_name: str) -> Tuple[Any, ...]:
    if isinstance(states, (str, bytes)):
        raise ValueError(f"{field_name} must be a collection of states, not a single string")
    try:
        return tuple(states)
    except TypeError:
        raise ValueError(f"{field_name} must be an iterable of states")


@dataclass(frozen=True)
class TransitionRule(Generic[State]):
    """Declares that any state in ``from_states`` may move to any state in ``to_states``.

    Class Invariants:
    1. Both sets are stored as tuples and never change
    2. Membership uses ``==``, so states need not be hashable
    3. Duplicates are allowed and harmless

    No semantic checks are made: empty sets, unreachable states and
    self-referencing rules are accepted and simply never (or always) match.
    """

    from_states: Tuple[State, ...]
    to_states: Tuple[State, ...]

    def __post_init__(self) -> None:
        """Normalize both state collections to tuples.

        Raises:
            ValueError: If either field is not a collection of states
        """
        object.__setattr__(self, "from_states", _as_state_tuple(self.from_states, "from_states"))
        object.__setattr__(self, "to_states", _as_state_tuple(self.to_states, "to_states"))

    @classmethod
    def from_dict(cls, config: Mapping[str, Iterable[State]]) -> "TransitionRule[State]":
        """Build a rule from its mapping form ``{"from": [...], "to": [...]}``.

        Raises:
            ValueError: If a key is missing or a value is not a collection
        """
        missing = [key for key in ("from", "to") if key not in config]
        if missing:
            raise ValueError(f"Transition rule is missing key(s): {', '.join(missing)}")
        return cls(config["from"], config["to"])

    def applies_to(self, state: State) -> bool:
        """Check whether ``state`` is one of the rule's source states."""
        return state in self.from_states

    def allows(self, target: State) -> bool:
        """Check whether ``target`` is one of the rule's destination states."""
        return target in self.to_states


RuleConfig = Union[TransitionRule, Mapping[str, Iterable[Any]]]


class TransitionTable(Generic[State]):
    """An ordered, read-only collection of transition rules.

    TransitionTable is replaced wholesale, never edited. Rule order is kept
    for iteration and diagnostics but never changes the outcome of a lookup.

    Class Invariants:
    1. Rules never change after construction
    2. An empty table permits nothing
    3. Lookup is an existence check, not a priority resolution

    Performance Characteristics:
    1. O(1) length and emptiness checks
    2. O(r * s) lookup where r is rule count and s is set size
    """

    def __init__(self, rules: Iterable[TransitionRule[State]] = ()) -> None:
        """Initialize a TransitionTable instance.

        Args:
            rules: TransitionRule instances, in declaration order

        Raises:
            ValueError: If an item is not a TransitionRule
        """
        rules = tuple(rules)
        for rule in rules:
            if not isinstance(rule, TransitionRule):
                raise ValueError("Transition table entries must be TransitionRule instances")
        self._rules = rules

    @classmethod
    def from_config(cls, config: Iterable[RuleConfig]) -> "TransitionTable":
        """Build a table from rules and/or their mapping form.

        Args:
            config: Iterable of TransitionRule instances or mappings with
                ``from`` and ``to`` keys

        Returns:
            A new TransitionTable

        Raises:
            ValueError: If an entry is neither a rule nor a valid mapping
        """
        if isinstance(config, (str, bytes, Mapping)):
            raise ValueError("Transitions must be a sequence of rules")
        rules = []
        for entry in config:
            if isinstance(entry, TransitionRule):
                rules.append(entry)
            elif isinstance(entry, Mapping):
                rules.append(TransitionRule.from_dict(entry))
            else:
                raise ValueError(f"Unsupported transition rule: {entry!r}")
        return cls(rules)

    @property
    def rules(self) -> Tuple[TransitionRule[State], ...]:
        """Get the rules in declaration order."""
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __iter__(self) -> Iterator[TransitionRule[State]]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"TransitionTable({list(self._rules)!r})"

    def rules_from(self, state: State) -> Iterator[TransitionRule[State]]:
        """Yield the rules whose source set contains ``state``, in table order."""
        return (rule for rule in self._rules if rule.applies_to(state))

    def permits(self, source: State, target: State) -> bool:
        """Check whether any rule applying to ``source`` allows ``target``.

        Args:
            source: The state being left
            target: The candidate destination

        Returns:
            True if at least one applicable rule lists ``target``
        """
        return any(rule.allows(target) for rule in self.rules_from(source))

    def targets_from(self, state: State) -> Tuple[State, ...]:
        """List the distinct destinations reachable from ``state`` in one step.

        Returns:
            Targets in first-seen order, without duplicates
        """
        targets = []
        for rule in self.rules_from(state):
            for target in rule.to_states:
                if target not in targets:
                    targets.append(target)
        return tuple(targets)
