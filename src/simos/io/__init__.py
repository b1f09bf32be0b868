"""I/O subsystem — per-device disk request queues.

Re-exports public symbols so callers can write::

    from simos.io import DiskQueueManager, FileReadRequest
"""

from simos.io.disk import DiskQueue, DiskQueueManager, FileReadRequest

__all__ = [
    "DiskQueue",
    "DiskQueueManager",
    "FileReadRequest",
]
