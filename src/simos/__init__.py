"""simos — a discrete-event model of an OS resource-management core.

Re-exports the kernel and the types a simulation driver needs::

    from simos import Kernel

    kernel = Kernel(num_disks=1, total_memory=10_000, os_size=1_000)
    kernel.create_process(2_000, 3)
    kernel.cpu  # → 2
"""

from simos.io.disk import FileReadRequest
from simos.kernel import Kernel, ZombieLinks
from simos.logging import LogEntry, Logger, LogLevel
from simos.memory.manager import (
    BestFitPolicy,
    FirstFitPolicy,
    MemoryItem,
    WorstFitPolicy,
)

__all__ = [
    "BestFitPolicy",
    "FileReadRequest",
    "FirstFitPolicy",
    "Kernel",
    "LogEntry",
    "LogLevel",
    "Logger",
    "MemoryItem",
    "WorstFitPolicy",
    "ZombieLinks",
]
