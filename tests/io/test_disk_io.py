"""Tests for disk reads issued through the kernel.

A read blocks the running process; completing it wakes the requester
(unless it became a zombie) and lets the scheduler reconsider.
"""

from simos import FileReadRequest, Kernel
from simos.process import ProcessState

NUM_DISKS = 2


def _booted_kernel() -> Kernel:
    """Create a kernel with two disks, 10000 bytes, 1000 for the OS."""
    return Kernel(num_disks=NUM_DISKS, total_memory=10_000, os_size=1_000)


class TestDiskReadRequest:
    """Verify issuing reads."""

    def test_read_on_idle_disk_is_active(self) -> None:
        """The request goes straight into service."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.disk_read_request(0, "notes.txt")
        assert kernel.disk(0) == FileReadRequest(pid=2, file_name="notes.txt")
        assert kernel.disk_queue(0) == []

    def test_requester_blocks(self) -> None:
        """The caller leaves the CPU and is not re-queued."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.create_process(100, 1)
        kernel.disk_read_request(1, "notes.txt")
        process = kernel.process(2)
        assert process is not None
        assert process.state is ProcessState.WAITING
        assert kernel.cpu == 3
        assert kernel.ready_queue == []

    def test_read_on_busy_disk_queues(self) -> None:
        """A second reader waits behind the first."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.create_process(100, 1)
        kernel.disk_read_request(0, "a")
        kernel.disk_read_request(0, "b")
        assert kernel.disk(0).pid == 2
        assert kernel.disk_queue(0) == [FileReadRequest(pid=3, file_name="b")]
        assert kernel.cpu is None

    def test_invalid_disk_is_ignored(self) -> None:
        """The caller keeps the CPU when the disk does not exist."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.disk_read_request(NUM_DISKS, "a")
        kernel.disk_read_request(-1, "a")
        assert kernel.cpu == 2
        assert kernel.disk(NUM_DISKS) == FileReadRequest()

    def test_read_with_idle_cpu_is_ignored(self) -> None:
        """Nobody can issue a read when nothing runs."""
        kernel = _booted_kernel()
        kernel.disk_read_request(0, "a")
        assert kernel.disk(0) == FileReadRequest()


class TestDiskJobCompleted:
    """Verify completion, promotion, and wake-up."""

    def test_requester_returns_to_cpu(self) -> None:
        """With an idle CPU the woken process runs at once."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.disk_read_request(0, "a")
        kernel.disk_job_completed(0)
        assert kernel.cpu == 2
        assert kernel.disk(0) == FileReadRequest()

    def test_urgent_requester_preempts(self) -> None:
        """A higher-priority requester displaces the occupant."""
        kernel = _booted_kernel()
        kernel.create_process(100, 5)
        kernel.create_process(100, 1)
        kernel.disk_read_request(0, "a")
        assert kernel.cpu == 3
        kernel.disk_job_completed(0)
        assert kernel.cpu == 2
        assert kernel.ready_queue == [3]

    def test_lower_priority_requester_queues(self) -> None:
        """A less urgent requester waits in the ready queue."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.create_process(100, 5)
        kernel.create_process(100, 1)
        assert kernel.cpu == 3
        kernel.disk_read_request(0, "a")  # 3 blocks, 2 runs
        kernel.disk_read_request(1, "b")  # 2 blocks, 4 runs
        kernel.disk_job_completed(1)
        assert kernel.cpu == 4
        assert kernel.ready_queue == [2]

    def test_completions_follow_request_order(self) -> None:
        """Requesters finish in the order they asked, per disk."""
        kernel = _booted_kernel()
        for _ in range(3):
            kernel.create_process(100, 1)
        for _ in range(3):
            kernel.disk_read_request(0, "shared.log")
        served = []
        for _ in range(3):
            served.append(kernel.disk(0).pid)
            kernel.disk_job_completed(0)
        assert served == [2, 3, 4]
        assert kernel.cpu == 2
        assert kernel.ready_queue == [3, 4]

    def test_completion_on_idle_disk_is_noop(self) -> None:
        """Nothing changes when no job is active."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.disk_job_completed(0)
        kernel.disk_job_completed(NUM_DISKS)
        assert kernel.cpu == 2
        assert kernel.ready_queue == []
