from .engine import MachineEngine, create
from .machine_status import MachineStatus

__all__ = ["MachineEngine", "MachineStatus", "create"]
