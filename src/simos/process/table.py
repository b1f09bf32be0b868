"""Process table — the single owner of every PCB.

The table maps PIDs to ``Process`` records and keeps parent/child
links as PIDs, never as object references.  Exit cascades and reaping
can then drop records in any order without leaving a dangling pointer
behind.

PID 1 is the OS process, created with the table and never admitted,
scheduled, or removed.  User PIDs start at 2 and only ever go up.
"""

from itertools import count

from simos.memory.manager import OS_PID
from simos.process.pcb import Process

FIRST_USER_PID = 2


class ProcessTable:
    """Own the PCBs of one simulator instance."""

    def __init__(self, *, os_memory_size: int = 0) -> None:
        """Create the table with the OS process already in it.

        Args:
            os_memory_size: Size of the region reserved for the OS.

        """
        self._processes: dict[int, Process] = {
            OS_PID: Process(pid=OS_PID, memory_size=os_memory_size),
        }
        self._pids = count(start=FIRST_USER_PID)
        self._next_pid = next(self._pids)

    @property
    def next_pid(self) -> int:
        """Return the PID the next committed process will receive."""
        return self._next_pid

    @property
    def pids(self) -> list[int]:
        """Return all PIDs in the table (OS included), in creation order."""
        return list(self._processes)

    def new_process(
        self,
        *,
        priority: int,
        memory_size: int,
        parent_pid: int | None = None,
    ) -> Process:
        """Build a PCB carrying the next PID without registering it.

        The PID is only consumed by ``add()``.  A caller that abandons
        the record (e.g. because memory ran out) leaves the counter
        untouched.
        """
        return Process(
            pid=self._next_pid,
            priority=priority,
            memory_size=memory_size,
            parent_pid=parent_pid,
        )

    def add(self, process: Process) -> None:
        """Register *process* and advance the PID counter.

        Raises:
            ValueError: If the PID is not the one ``new_process`` handed out.

        """
        if process.pid != self._next_pid:
            msg = f"Expected PID {self._next_pid}, got {process.pid}"
            raise ValueError(msg)
        self._processes[process.pid] = process
        if process.parent_pid is not None and process.parent_pid in self._processes:
            self._processes[process.parent_pid].add_child(process.pid)
        self._next_pid = next(self._pids)

    def get(self, pid: int) -> Process | None:
        """Return the PCB for *pid*, or None."""
        return self._processes.get(pid)

    def remove(self, pid: int) -> Process | None:
        """Erase *pid* from the table and return its PCB (None if absent)."""
        return self._processes.pop(pid, None)

    def parent_of(self, pid: int) -> Process | None:
        """Return the live parent record of *pid*, or None."""
        process = self._processes.get(pid)
        if process is None or process.parent_pid is None:
            return None
        return self._processes.get(process.parent_pid)

    def unlink(self, pid: int) -> None:
        """Remove *pid* from its parent's child list, if it has a parent."""
        parent = self.parent_of(pid)
        if parent is not None:
            parent.remove_child(pid)

    def __contains__(self, pid: object) -> bool:
        """Return True if *pid* is in the table."""
        return pid in self._processes

    def __len__(self) -> int:
        """Return the number of records (OS and zombies included)."""
        return len(self._processes)
