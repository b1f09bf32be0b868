"""The kernel — the single entry point a simulation driver talks to.

The kernel owns one instance of every subsystem and routes each event
to the ones it concerns:

    0. Logger — records every decision, from construction on.
    1. Memory manager — the OS block is laid out first.
    2. Process table — PID 1 (the OS) exists before any user process.
    3. Disk queues — one idle device per configured disk.
    4. Scheduler — starts with an idle CPU and an empty ready queue.

Every public operation runs to completion before returning.  None of
them raise on bad input: a call whose precondition fails (no user
process on the CPU, unknown disk, no memory) simply does nothing, and
``create_process`` / ``fork`` report it by returning False.  The log
explains why.

Process lifecycle in one picture::

    create/fork ──► READY ⇄ RUNNING ──exit──► ZOMBIE (has parent)
                      ▲       │                 or erased (no parent)
                      │       ├─disk read─► WAITING ─disk done─┘
                      └───────┘
                              └─wait, no zombie child─► WAITING (forever)

Known leak, kept on purpose for observability: a process that exits
while its parent is alive becomes a zombie *without* giving its memory
back, and reaping it with ``wait()`` erases the PCB but still leaves the
region marked as owned by the stale PID.
"""

from enum import StrEnum

from simos.io.disk import DiskQueueManager, FileReadRequest
from simos.logging import Logger, LogLevel
from simos.memory.manager import (
    OS_PID,
    AllocationPolicy,
    MemoryItem,
    MemoryManager,
    OutOfMemoryError,
)
from simos.process.pcb import Process
from simos.process.scheduler import Scheduler
from simos.process.table import ProcessTable

DEFAULT_NUM_DISKS = 1
DEFAULT_TOTAL_MEMORY = 10_000
DEFAULT_OS_SIZE = 1_000


class ZombieLinks(StrEnum):
    """What happens to a zombie's entry in its parent's child list.

    - DETACH: the zombie is removed from the list when it exits, so the
      parent's ``wait()`` never finds it (observed behaviour, default).
    - RETAIN: the zombie stays listed until the parent reaps it.
    """

    DETACH = "detach"
    RETAIN = "retain"


class Kernel:
    """Coordinate memory, processes, the CPU, and the disks."""

    def __init__(
        self,
        *,
        num_disks: int = DEFAULT_NUM_DISKS,
        total_memory: int = DEFAULT_TOTAL_MEMORY,
        os_size: int = DEFAULT_OS_SIZE,
        allocation_policy: AllocationPolicy | None = None,
        zombie_links: ZombieLinks = ZombieLinks.DETACH,
        logger: Logger | None = None,
    ) -> None:
        """Build every subsystem and register the OS process.

        Args:
            num_disks: Number of disk devices (indices 0..num_disks-1).
            total_memory: Size of the whole address space.
            os_size: Bytes reserved at address 0 for the OS process.
            allocation_policy: Placement algorithm (defaults to worst fit).
            zombie_links: Whether zombies stay in their parent's child list.
            logger: Log buffer to write to (a fresh one if omitted).

        Raises:
            ValueError: If the sizes or the disk count are invalid.

        """
        self._logger = logger if logger is not None else Logger()
        self._memory = MemoryManager(
            total_size=total_memory,
            os_size=os_size,
            policy=allocation_policy,
        )
        self._table = ProcessTable(os_memory_size=os_size)
        os_process = self._table.get(OS_PID)
        if os_process is not None:
            os_process.memory = self._memory.region_for(OS_PID)
        self._disks = DiskQueueManager(num_disks=num_disks)
        self._scheduler = Scheduler(table=self._table)
        self._zombie_links = zombie_links
        self._logger.log(
            LogLevel.INFO,
            f"Kernel up: {num_disks} disk(s), {total_memory} bytes, {os_size} reserved for OS",
            source="kernel",
            pid=OS_PID,
        )

    # -- Subsystem access ------------------------------------------------------

    @property
    def logger(self) -> Logger:
        """Return the kernel's log buffer."""
        return self._logger

    @property
    def memory_manager(self) -> MemoryManager:
        """Return the memory manager."""
        return self._memory

    @property
    def scheduler(self) -> Scheduler:
        """Return the CPU scheduler."""
        return self._scheduler

    @property
    def disks(self) -> DiskQueueManager:
        """Return the disk queue manager."""
        return self._disks

    @property
    def zombie_links(self) -> ZombieLinks:
        """Return the configured zombie link behaviour."""
        return self._zombie_links

    # -- Queries ---------------------------------------------------------------

    @property
    def cpu(self) -> int | None:
        """Return the PID on the CPU, or None when idle."""
        return self._scheduler.current

    @property
    def ready_queue(self) -> list[int]:
        """Return the ready PIDs in queue order (not sorted by priority)."""
        return self._scheduler.ready_queue

    @property
    def memory(self) -> list[MemoryItem]:
        """Return every occupied region in address order."""
        return self._memory.used

    def disk(self, disk: int) -> FileReadRequest:
        """Return the request in service on *disk* (sentinel when idle)."""
        return self._disks.active(disk)

    def disk_queue(self, disk: int) -> list[FileReadRequest]:
        """Return the requests waiting on *disk*, oldest first."""
        return self._disks.pending(disk)

    def process(self, pid: int) -> Process | None:
        """Return the PCB for *pid*, or None if it is not in the table."""
        return self._table.get(pid)

    @property
    def processes(self) -> list[int]:
        """Return every PID in the table, OS and zombies included."""
        return self._table.pids

    # -- Process lifecycle -----------------------------------------------------

    def create_process(self, size: int, priority: int) -> bool:
        """Admit a new root process needing *size* bytes.

        Returns:
            True on success.  False if no free block fits, in which case
            nothing changes (not even the PID counter).

        """
        process = self._table.new_process(priority=priority, memory_size=size)
        if not self._allocate(process):
            return False
        self._admit(process)
        self._logger.log(
            LogLevel.INFO,
            f"Created pid {process.pid} (priority {priority}, {size} bytes)",
            source="kernel",
            pid=process.pid,
        )
        self._reschedule()
        return True

    def fork(self) -> bool:
        """Clone the running process into a new child.

        The child copies the parent's priority and memory size and gets
        its own region; no memory contents exist to copy.

        Returns:
            True on success.  False if no user process holds the CPU or
            the child's memory cannot be allocated.

        """
        parent = self._running_process("fork")
        if parent is None:
            return False
        child = self._table.new_process(
            priority=parent.priority,
            memory_size=parent.memory_size,
            parent_pid=parent.pid,
        )
        if not self._allocate(child):
            return False
        self._admit(child)
        self._logger.log(
            LogLevel.INFO,
            f"Forked pid {child.pid} from pid {parent.pid}",
            source="kernel",
            pid=child.pid,
        )
        self._reschedule()
        return True

    def exit(self) -> None:
        """Terminate the running process and all of its descendants."""
        process = self._running_process("exit")
        if process is None:
            return
        self.terminate_subtree(process.pid)
        self._reschedule()

    def wait(self) -> None:
        """Reap the first zombie child of the running process, or block it.

        A process blocked here is not re-queued and nothing inside the
        kernel will ever wake it.
        """
        process = self._running_process("wait")
        if process is None:
            return

        for child_pid in process.children:
            child = self._table.get(child_pid)
            if child is not None and child.is_zombie:
                self._table.remove(child_pid)
                process.remove_child(child_pid)
                self._logger.log(
                    LogLevel.INFO,
                    f"pid {process.pid} reaped zombie pid {child_pid}; its region is not reclaimed",
                    source="kernel",
                    pid=child_pid,
                )
                return

        self._scheduler.vacate()
        process.block()
        self._logger.log(
            LogLevel.INFO,
            f"pid {process.pid} waiting with no zombie child",
            source="scheduler",
            pid=process.pid,
        )
        self._reschedule()

    def terminate_subtree(self, pid: int) -> list[int]:
        """Terminate *pid* and every live descendant, children first.

        The walk is an explicit depth-first post-order over PIDs:
        children are visited in child-list order, each subtree is
        finished before its root.  A process whose parent is still in
        the table becomes a zombie and keeps its memory; one without a
        parent has its memory freed and its PCB erased.

        Returns:
            The PIDs in the order they were terminated (empty for the
            OS process, which is never terminated).

        """
        if pid == OS_PID:
            return []
        order: list[int] = []
        stack: list[tuple[int, bool]] = [(pid, False)]
        while stack:
            current, expanded = stack.pop()
            process = self._table.get(current)
            if process is None:
                continue
            if expanded:
                self._terminate_one(process)
                order.append(current)
                continue
            stack.append((current, True))
            for child_pid in reversed(process.children):
                child = self._table.get(child_pid)
                if child is not None and not child.is_zombie:
                    stack.append((child_pid, False))
        return order

    # -- Disk I/O --------------------------------------------------------------

    def disk_read_request(self, disk: int, file_name: str) -> None:
        """Issue a read on *disk* for the running process and block it."""
        process = self._running_process("disk read")
        if process is None:
            return
        if not self._disks.is_valid(disk):
            self._logger.log(
                LogLevel.WARNING,
                f"Read of {file_name!r} rejected: disk {disk} does not exist",
                source="disk",
                pid=process.pid,
            )
            return

        started = self._disks.request_read(disk, pid=process.pid, file_name=file_name)
        self._scheduler.vacate()
        process.block()
        self._logger.log(
            LogLevel.INFO,
            f"pid {process.pid} {'started' if started else 'queued'} read of {file_name!r} on disk {disk}",
            source="disk",
            pid=process.pid,
        )
        self._reschedule()

    def disk_job_completed(self, disk: int) -> None:
        """Finish the active job on *disk* and wake its requester.

        The next queued request, if any, goes into service.  The
        requester returns to the ready queue unless it has become a
        zombie (or been reaped) while it was blocked.
        """
        finished = self._disks.complete_job(disk)
        if finished is None:
            self._logger.log(
                LogLevel.WARNING,
                f"Completion ignored: disk {disk} has no active job",
                source="disk",
            )
            return

        self._logger.log(
            LogLevel.INFO,
            f"Disk {disk} finished {finished.file_name!r} for pid {finished.pid}",
            source="disk",
            pid=finished.pid,
        )
        process = self._table.get(finished.pid)
        if process is None or process.is_zombie:
            return
        process.wake()
        self._scheduler.add(process.pid)
        self._reschedule()

    # -- Internals -------------------------------------------------------------

    def _running_process(self, action: str) -> Process | None:
        """Return the user process on the CPU, logging a rejection if none."""
        pid = self._scheduler.current
        process = self._table.get(pid) if pid is not None and pid != OS_PID else None
        if process is None:
            self._logger.log(
                LogLevel.WARNING,
                f"{action.capitalize()} rejected: no user process on the CPU",
                source="kernel",
            )
        return process

    def _allocate(self, process: Process) -> bool:
        try:
            region = self._memory.allocate(process.pid, size=process.memory_size)
        except OutOfMemoryError as e:
            self._logger.log(LogLevel.WARNING, str(e), source="memory", pid=process.pid)
            return False
        process.memory = region
        self._logger.log(
            LogLevel.DEBUG,
            f"pid {process.pid} placed at [{region.address}, {region.address + region.size})",
            source="memory",
            pid=process.pid,
        )
        return True

    def _admit(self, process: Process) -> None:
        self._table.add(process)
        process.admit()
        self._scheduler.add(process.pid)

    def _terminate_one(self, process: Process) -> None:
        parent = self._table.parent_of(process.pid)
        if parent is None or self._zombie_links is ZombieLinks.DETACH:
            self._table.unlink(process.pid)

        if self._scheduler.current == process.pid:
            self._scheduler.vacate()
        else:
            self._scheduler.remove(process.pid)

        if parent is not None:
            process.zombify()
            self._logger.log(
                LogLevel.INFO,
                f"pid {process.pid} is now a zombie of pid {parent.pid}",
                source="kernel",
                pid=process.pid,
            )
            return

        self._memory.free(process.pid)
        self._table.remove(process.pid)
        self._logger.log(
            LogLevel.INFO,
            f"pid {process.pid} terminated and its memory freed",
            source="kernel",
            pid=process.pid,
        )

    def _reschedule(self) -> None:
        dispatched, preempted = self._scheduler.reschedule()
        if preempted is not None:
            self._logger.log(
                LogLevel.DEBUG,
                f"pid {preempted} preempted by pid {dispatched}",
                source="scheduler",
                pid=preempted,
            )
        if dispatched is not None:
            self._logger.log(
                LogLevel.DEBUG,
                f"pid {dispatched} dispatched",
                source="scheduler",
                pid=dispatched,
            )
