"""Disk request queues — one in-service slot plus a FIFO per device.

Each physical disk serves one read at a time.  A request that arrives
while the disk is busy waits in that disk's queue; when the active job
completes, the front of the queue is promoted immediately.  Devices
never reorder requests: first requested, first served.

A device with no active request always has an empty queue, because a
request is promoted the instant the slot frees up.

Requests only carry a file name.  Nothing is ever read.
"""

from collections import deque
from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileReadRequest:
    """A read request issued by a process.

    The default instance (PID 0, empty name) is the sentinel returned
    for an idle or unknown disk.
    """

    pid: int = 0
    file_name: str = ""


@dataclass
class DiskQueue:
    """The state of one device: the job in service and those waiting."""

    active: FileReadRequest | None = None
    pending: deque[FileReadRequest] = field(default_factory=deque)


class DiskQueueManager:
    """Own every device's queue, indexed from 0."""

    def __init__(self, *, num_disks: int) -> None:
        """Create *num_disks* idle devices.

        Raises:
            ValueError: If *num_disks* is negative.

        """
        if num_disks < 0:
            msg = f"Number of disks must be non-negative, got {num_disks}"
            raise ValueError(msg)
        self._disks: list[DiskQueue] = [DiskQueue() for _ in range(num_disks)]

    @property
    def num_disks(self) -> int:
        """Return the number of devices."""
        return len(self._disks)

    def is_valid(self, disk: int) -> bool:
        """Return True if *disk* names an existing device."""
        return 0 <= disk < len(self._disks)

    def is_idle(self, disk: int) -> bool:
        """Return True if *disk* has no job in service."""
        return self.is_valid(disk) and self._disks[disk].active is None

    def request_read(self, disk: int, *, pid: int, file_name: str) -> bool:
        """Start or queue a read on *disk*.

        Returns:
            True if the request went straight into service, False if it
            was queued behind the active job.

        Raises:
            IndexError: If *disk* is not a valid device.

        """
        if not self.is_valid(disk):
            msg = f"Disk {disk} does not exist"
            raise IndexError(msg)
        queue = self._disks[disk]
        request = FileReadRequest(pid=pid, file_name=file_name)
        if queue.active is None:
            queue.active = request
            return True
        queue.pending.append(request)
        return False

    def complete_job(self, disk: int) -> FileReadRequest | None:
        """Finish the active job on *disk* and promote the next one.

        Returns:
            The request that just completed, or None if the device is
            unknown or idle (in which case nothing changes).

        """
        if not self.is_valid(disk):
            return None
        queue = self._disks[disk]
        finished = queue.active
        if finished is None:
            return None
        queue.active = queue.pending.popleft() if queue.pending else None
        return finished

    def active(self, disk: int) -> FileReadRequest:
        """Return the request in service on *disk*, or the idle sentinel."""
        if not self.is_valid(disk):
            return FileReadRequest()
        return self._disks[disk].active or FileReadRequest()

    def pending(self, disk: int) -> list[FileReadRequest]:
        """Return the requests waiting on *disk*, oldest first."""
        if not self.is_valid(disk):
            return []
        return list(self._disks[disk].pending)
