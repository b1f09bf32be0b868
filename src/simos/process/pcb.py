"""Process and Process Control Block (PCB).

The PCB holds everything the simulator tracks about a process: its
PID, priority, requested memory size, the region it was given, its
parent, and the ordered list of its children.  Relations are stored as
PIDs only; the process table resolves them.

Processes follow a strict state machine — each transition method
enforces that the process is in the correct source state before moving
it.

State machine::

    NEW → READY ⇄ RUNNING
            ↑       ↓
            └── WAITING

    any admitted state → ZOMBIE

A process blocked by ``wait()`` sits in WAITING with nothing that will
ever call ``wake()`` for it; only the driving harness can unblock it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from simos.memory.manager import MemoryItem


class ProcessState(StrEnum):
    """Lifecycle states of a process.

    - NEW: record built, not yet admitted to the scheduler.
    - READY: waiting in the ready queue for the CPU.
    - RUNNING: holding the CPU.
    - WAITING: blocked on a disk read or on ``wait()``.
    - ZOMBIE: terminated, kept in the table until its parent reaps it.
    """

    NEW = "new"
    READY = "ready"
    RUNNING = "running"
    WAITING = "waiting"
    ZOMBIE = "zombie"


class Process:
    """A simulated process (the Process Control Block)."""

    def __init__(
        self,
        *,
        pid: int,
        priority: int = 0,
        memory_size: int = 0,
        parent_pid: int | None = None,
    ) -> None:
        """Create a new process in the NEW state.

        Args:
            pid: Identifier handed out by the process table.
            priority: Scheduling priority (higher = more urgent).
            memory_size: Number of bytes the process asked for.
            parent_pid: PID of the parent process, if any.

        """
        self._pid = pid
        self._priority = priority
        self._memory_size = memory_size
        self._parent_pid = parent_pid
        self._children: list[int] = []
        self._state = ProcessState.NEW
        self.memory: MemoryItem | None = None

    @property
    def pid(self) -> int:
        """Return the unique process identifier."""
        return self._pid

    @property
    def priority(self) -> int:
        """Return the scheduling priority."""
        return self._priority

    @property
    def memory_size(self) -> int:
        """Return the requested memory size."""
        return self._memory_size

    @property
    def parent_pid(self) -> int | None:
        """Return the parent's PID, or None for root processes."""
        return self._parent_pid

    @property
    def children(self) -> list[int]:
        """Return a copy of the child PIDs in creation order."""
        return list(self._children)

    @property
    def state(self) -> ProcessState:
        """Return the current process state."""
        return self._state

    @property
    def is_zombie(self) -> bool:
        """Return True once the process has terminated but not been reaped."""
        return self._state is ProcessState.ZOMBIE

    def add_child(self, pid: int) -> None:
        """Append *pid* to the child list."""
        self._children.append(pid)

    def remove_child(self, pid: int) -> bool:
        """Drop *pid* from the child list.

        Returns:
            True if the PID was a child, False otherwise.

        """
        if pid not in self._children:
            return False
        self._children.remove(pid)
        return True

    def _transition(self, action: str, expected: ProcessState, target: ProcessState) -> None:
        """Enforce a state transition.

        Raises:
            RuntimeError: If the process is not in the expected state.

        """
        if self._state is not expected:
            msg = f"Cannot {action}: process {self._pid} is {self._state}, expected {expected}"
            raise RuntimeError(msg)
        self._state = target

    def admit(self) -> None:
        """Transition NEW → READY."""
        self._transition("admit", ProcessState.NEW, ProcessState.READY)

    def dispatch(self) -> None:
        """Transition READY → RUNNING."""
        self._transition("dispatch", ProcessState.READY, ProcessState.RUNNING)

    def preempt(self) -> None:
        """Transition RUNNING → READY."""
        self._transition("preempt", ProcessState.RUNNING, ProcessState.READY)

    def block(self) -> None:
        """Transition RUNNING → WAITING."""
        self._transition("block", ProcessState.RUNNING, ProcessState.WAITING)

    def wake(self) -> None:
        """Transition WAITING → READY."""
        self._transition("wake", ProcessState.WAITING, ProcessState.READY)

    def zombify(self) -> None:
        """Move to ZOMBIE from any admitted, live state.

        Raises:
            RuntimeError: If the process is NEW or already a zombie.

        """
        if self._state is ProcessState.ZOMBIE:
            msg = f"Cannot zombify: process {self._pid} is already a zombie"
            raise RuntimeError(msg)
        if self._state is ProcessState.NEW:
            msg = f"Cannot zombify: process {self._pid} is not yet admitted"
            raise RuntimeError(msg)
        self._state = ProcessState.ZOMBIE

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"Process(pid={self._pid}, priority={self._priority}, state={self._state})"
