"""Memory subsystem — contiguous partition allocation.

Re-exports public symbols so callers can write::

    from simos.memory import MemoryManager, WorstFitPolicy
"""

from simos.memory.manager import (
    OS_PID,
    AllocationPolicy,
    BestFitPolicy,
    FirstFitPolicy,
    MemoryBlock,
    MemoryItem,
    MemoryManager,
    OutOfMemoryError,
    WorstFitPolicy,
)

__all__ = [
    "OS_PID",
    "AllocationPolicy",
    "BestFitPolicy",
    "FirstFitPolicy",
    "MemoryBlock",
    "MemoryItem",
    "MemoryManager",
    "OutOfMemoryError",
    "WorstFitPolicy",
]
