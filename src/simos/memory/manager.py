"""Memory manager — contiguous variable-size partition allocation.

The address space is one fixed range ``[0, total_size)`` split into an
ordered list of **blocks**.  Every block is either free or occupied by
exactly one process.  Block zero always belongs to the OS (PID 1).

Allocation picks a free block through a pluggable
``AllocationPolicy`` and splits it: the front part goes to the process,
the remainder stays free right after it.  Freeing a block coalesces it
with every free neighbour so two free blocks are never adjacent.

Policies (Strategy pattern, same shape as the CPU scheduler):
    - ``WorstFitPolicy`` — the largest fitting block (default).  Keeps
      one big hole around instead of many medium ones.
    - ``BestFitPolicy`` — the smallest fitting block.
    - ``FirstFitPolicy`` — the lowest-address fitting block.

Ties are always broken by the first block in address order.
"""

from dataclasses import dataclass
from typing import Protocol

OS_PID = 1


class OutOfMemoryError(Exception):
    """Raise when no free block can satisfy an allocation."""


@dataclass(frozen=True)
class MemoryItem:
    """An occupied region as reported to callers.

    Attributes:
        address: First byte of the region.
        size: Length of the region in bytes.
        pid: Process that owns the region.

    """

    address: int
    size: int
    pid: int


@dataclass
class MemoryBlock:
    """One contiguous slice of the address space."""

    start: int
    size: int
    pid: int | None = None

    @property
    def is_free(self) -> bool:
        """Return True if no process owns this block."""
        return self.pid is None

    @property
    def end(self) -> int:
        """Return the first address past this block."""
        return self.start + self.size


class AllocationPolicy(Protocol):
    """Interface every placement algorithm must satisfy."""

    def choose(self, blocks: list[MemoryBlock], size: int) -> int | None:
        """Return the index of the free block to use, or None if none fits."""
        ...  # pragma: no cover


class WorstFitPolicy:
    """Worst fit — take the largest free block that is big enough."""

    def choose(self, blocks: list[MemoryBlock], size: int) -> int | None:
        """Scan every free block and keep the strictly largest fit."""
        chosen: int | None = None
        for i, block in enumerate(blocks):
            if not block.is_free or block.size < size:
                continue
            if chosen is None or block.size > blocks[chosen].size:
                chosen = i
        return chosen


class BestFitPolicy:
    """Best fit — take the smallest free block that is big enough."""

    def choose(self, blocks: list[MemoryBlock], size: int) -> int | None:
        """Scan every free block and keep the strictly smallest fit."""
        chosen: int | None = None
        for i, block in enumerate(blocks):
            if not block.is_free or block.size < size:
                continue
            if chosen is None or block.size < blocks[chosen].size:
                chosen = i
        return chosen


class FirstFitPolicy:
    """First fit — take the lowest-address free block that is big enough."""

    def choose(self, blocks: list[MemoryBlock], size: int) -> int | None:
        """Return the first fitting block in address order."""
        for i, block in enumerate(blocks):
            if block.is_free and block.size >= size:
                return i
        return None


class MemoryManager:
    """Own the block list and serve allocate/free requests.

    The manager only annotates blocks with an owning PID; it never looks
    at process records.
    """

    def __init__(
        self,
        *,
        total_size: int,
        os_size: int,
        policy: AllocationPolicy | None = None,
    ) -> None:
        """Lay out the OS block and the initial free block.

        Args:
            total_size: Size of the whole address space.
            os_size: Size reserved at address 0 for the OS process.
            policy: Placement algorithm (defaults to worst fit).

        Raises:
            ValueError: If a size is negative or the OS does not fit.

        """
        if total_size < 0 or os_size < 0:
            msg = f"Memory sizes must be non-negative (total={total_size}, os={os_size})"
            raise ValueError(msg)
        if os_size > total_size:
            msg = f"OS size {os_size} exceeds total memory {total_size}"
            raise ValueError(msg)
        self._total_size = total_size
        self._policy: AllocationPolicy = policy if policy is not None else WorstFitPolicy()
        self._blocks: list[MemoryBlock] = [MemoryBlock(start=0, size=os_size, pid=OS_PID)]
        if os_size < total_size:
            self._blocks.append(MemoryBlock(start=os_size, size=total_size - os_size))

    @property
    def total_size(self) -> int:
        """Return the size of the whole address space."""
        return self._total_size

    @property
    def policy(self) -> AllocationPolicy:
        """Return the placement algorithm."""
        return self._policy

    @property
    def blocks(self) -> list[MemoryBlock]:
        """Return copies of every block in address order."""
        return [MemoryBlock(start=b.start, size=b.size, pid=b.pid) for b in self._blocks]

    @property
    def used(self) -> list[MemoryItem]:
        """Return the occupied regions in address order."""
        return [
            MemoryItem(address=b.start, size=b.size, pid=b.pid)
            for b in self._blocks
            if b.pid is not None
        ]

    @property
    def free_size(self) -> int:
        """Return the total number of free bytes."""
        return sum(b.size for b in self._blocks if b.is_free)

    @property
    def largest_free(self) -> int:
        """Return the size of the largest free block (0 if none)."""
        return max((b.size for b in self._blocks if b.is_free), default=0)

    def region_for(self, pid: int) -> MemoryItem | None:
        """Return the region owned by *pid*, or None."""
        for block in self._blocks:
            if block.pid == pid:
                return MemoryItem(address=block.start, size=block.size, pid=pid)
        return None

    def allocate(self, pid: int, *, size: int) -> MemoryItem:
        """Carve a region of *size* bytes for *pid*.

        Args:
            pid: The process receiving the region.
            size: Number of bytes requested.

        Returns:
            The region now owned by the process.

        Raises:
            OutOfMemoryError: If no free block is large enough.  The
                block list is left untouched.

        """
        if size < 0:
            msg = f"Cannot allocate {size} bytes for PID {pid}: negative size"
            raise OutOfMemoryError(msg)
        index = self._policy.choose(self._blocks, size)
        if index is None:
            msg = (
                f"Cannot allocate {size} bytes for PID {pid}: "
                f"largest free block is {self.largest_free}"
            )
            raise OutOfMemoryError(msg)

        block = self._blocks[index]
        if block.size > size:
            remainder = MemoryBlock(start=block.start + size, size=block.size - size)
            self._blocks.insert(index + 1, remainder)
            block.size = size
        block.pid = pid
        return MemoryItem(address=block.start, size=block.size, pid=pid)

    def free(self, pid: int) -> None:
        """Release the block owned by *pid* and merge free neighbours.

        Freeing a PID that owns nothing is a no-op.
        """
        index = next((i for i, b in enumerate(self._blocks) if b.pid == pid), None)
        if index is None:
            return
        self._blocks[index].pid = None

        while index > 0 and self._blocks[index - 1].is_free:
            self._blocks[index - 1].size += self._blocks[index].size
            del self._blocks[index]
            index -= 1

        while index + 1 < len(self._blocks) and self._blocks[index + 1].is_free:
            self._blocks[index].size += self._blocks[index + 1].size
            del self._blocks[index + 1]
