from enum import Enum, auto


class MachineStatus(Enum):
    """Defines the configuration status of a machine engine.

    Derived from the transition table: an engine with no rules can never
    accept a transition.
    """

    UNCONFIGURED = auto()  # Transition table empty
    CONFIGURED = auto()  # At least one transition rule present
