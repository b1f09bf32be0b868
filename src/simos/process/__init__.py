"""Process subsystem — PCB, process table, and CPU scheduling.

Re-exports public symbols so callers can write::

    from simos.process import Process, ProcessTable, Scheduler
"""

from simos.process.pcb import Process, ProcessState
from simos.process.scheduler import Scheduler
from simos.process.table import FIRST_USER_PID, ProcessTable

__all__ = [
    "FIRST_USER_PID",
    "Process",
    "ProcessState",
    "ProcessTable",
    "Scheduler",
]
