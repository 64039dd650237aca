# tests/conftest.py

import pytest

from stately.core.machine.engine import MachineEngine
from stately.core.transition import TransitionRule


@pytest.fixture
def rules():
    """The A/B/C table: A may go to B or C, B may go back to A."""
    return [
        TransitionRule(["A"], ["B", "C"]),
        TransitionRule(["B"], ["A"]),
    ]


@pytest.fixture
def machine():
    """An unconfigured machine starting in A."""
    return MachineEngine("A")


@pytest.fixture
def configured_machine(rules):
    """A machine in A with the A/B/C table and a small context."""
    engine = MachineEngine("A", {"a": 1, "b": 2})
    engine.set_transitions(rules)
    return engine


@pytest.fixture
def recorder():
    """Collects every event passed to it."""

    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

    return Recorder()
