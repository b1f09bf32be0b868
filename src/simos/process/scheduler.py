"""CPU scheduler — strict priority preemption on a single CPU.

The scheduler owns two things: the PID currently holding the CPU and
the ready queue.  Both hold PIDs only; priorities are looked up in the
process table on every decision.

Selection rule:
    The ready PID with the strictly highest priority wins.  Ties go to
    the PID that has been in the queue longest, since the scan runs
    front to back and only a strictly greater priority replaces the
    running best.

Preemption rule:
    The winner takes the CPU if the CPU is idle or if the winner's
    priority is strictly greater than the occupant's.  The displaced
    occupant goes to the back of the ready queue.  Equal priority never
    preempts, so calling ``reschedule()`` twice in a row changes nothing
    the second time.

There is no time quantum: a process only loses the CPU to a strictly
more urgent one, or by leaving on its own (exit, wait, disk read).
"""

from collections import deque

from simos.process.pcb import Process, ProcessState
from simos.process.table import ProcessTable


class Scheduler:
    """Manage the ready queue and the CPU occupant."""

    def __init__(self, *, table: ProcessTable) -> None:
        """Create an idle scheduler that resolves PIDs through *table*."""
        self._table = table
        self._ready_queue: deque[int] = deque()
        self._current: int | None = None
        self._context_switches: int = 0

    @property
    def current(self) -> int | None:
        """Return the PID holding the CPU, or None when idle."""
        return self._current

    @property
    def ready_queue(self) -> list[int]:
        """Return a snapshot of the ready queue in queue order."""
        return list(self._ready_queue)

    @property
    def ready_count(self) -> int:
        """Return the number of ready PIDs."""
        return len(self._ready_queue)

    @property
    def context_switches(self) -> int:
        """Return how many times a new PID was installed on the CPU."""
        return self._context_switches

    def _process(self, pid: int) -> Process:
        process = self._table.get(pid)
        if process is None:
            msg = f"Process {pid} is not in the process table"
            raise RuntimeError(msg)
        return process

    def add(self, pid: int) -> None:
        """Append *pid* to the ready queue unless it is already there.

        The PCB must already be READY.

        Raises:
            RuntimeError: If the process is unknown or not READY.

        """
        process = self._process(pid)
        if process.state is not ProcessState.READY:
            msg = f"Cannot add process {pid}: state is {process.state}, expected ready"
            raise RuntimeError(msg)
        if pid not in self._ready_queue and pid != self._current:
            self._ready_queue.append(pid)

    def remove(self, pid: int) -> bool:
        """Drop *pid* from the ready queue.

        Returns:
            True if the PID was queued.

        """
        if pid not in self._ready_queue:
            return False
        self._ready_queue.remove(pid)
        return True

    def vacate(self) -> int | None:
        """Take the occupant off the CPU without re-queueing it.

        Returns:
            The PID that was running, or None if the CPU was idle.

        """
        pid, self._current = self._current, None
        return pid

    def _select(self) -> Process | None:
        best: Process | None = None
        for pid in self._ready_queue:
            candidate = self._process(pid)
            if best is None or candidate.priority > best.priority:
                best = candidate
        return best

    def highest_priority(self) -> int | None:
        """Return the ready PID that would be selected next, or None."""
        best = self._select()
        return best.pid if best is not None else None

    def reschedule(self) -> tuple[int | None, int | None]:
        """Reconsider who should hold the CPU.

        An empty ready queue leaves the CPU idle.  Callers only reach
        that case after they have vacated the CPU themselves.

        Returns:
            ``(dispatched, preempted)`` — the PID newly installed on the
            CPU and the PID sent back to the ready queue.  Either is
            None when no such change happened.

        """
        candidate = self._select()
        if candidate is None:
            self._current = None
            return None, None

        preempted: int | None = None
        if self._current is not None:
            running = self._process(self._current)
            if candidate.priority <= running.priority:
                return None, None
            running.preempt()
            self._ready_queue.append(running.pid)
            preempted = running.pid

        self._ready_queue.remove(candidate.pid)
        candidate.dispatch()
        self._current = candidate.pid
        self._context_switches += 1
        return candidate.pid, preempted
