"""Tests for wait — a parent reaping a zombie child.

``wait()`` scans the running process's children in list order for the
first zombie.  If it finds one, the zombie's PCB is erased (its memory
is *not* reclaimed).  If it finds none, the caller blocks with nothing
in the kernel that will ever wake it.

By default exit detaches a zombie from its parent's child list, so the
reaping path is only reachable with ``ZombieLinks.RETAIN``.
"""

from simos import Kernel, MemoryItem, ZombieLinks
from simos.process import ProcessState


def _booted_kernel(zombie_links: ZombieLinks = ZombieLinks.DETACH) -> Kernel:
    """Create a kernel with one disk, 10000 bytes, 1000 for the OS."""
    return Kernel(num_disks=1, total_memory=10_000, os_size=1_000, zombie_links=zombie_links)


def _parent_with_zombies(kernel: Kernel, count: int) -> None:
    """Leave PID 2 on the CPU with *count* exited children (PIDs 3..)."""
    kernel.create_process(1_000, 1)
    for _ in range(count):
        kernel.fork()
    kernel.disk_read_request(0, "parent.dat")  # 2 blocks, children run
    for _ in range(count):
        kernel.exit()
    kernel.disk_job_completed(0)  # 2 is back


class TestWaitBlocks:
    """Verify blocking when no zombie child exists."""

    def test_no_children_blocks_caller(self) -> None:
        """The caller leaves the CPU and is not re-queued."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.create_process(100, 1)
        kernel.wait()
        process = kernel.process(2)
        assert process is not None
        assert process.state is ProcessState.WAITING
        assert kernel.cpu == 3
        assert 2 not in kernel.ready_queue

    def test_live_child_blocks_caller(self) -> None:
        """A running or ready child is not reapable."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.fork()
        kernel.wait()
        assert kernel.cpu == 3
        assert kernel.ready_queue == []

    def test_blocked_waiter_is_never_woken(self) -> None:
        """Later events do not bring a waiting parent back."""
        kernel = _booted_kernel()
        kernel.create_process(100, 1)
        kernel.fork()
        kernel.wait()
        kernel.exit()  # child exits; nothing wakes 2
        kernel.create_process(100, 1)
        assert kernel.cpu == 4
        process = kernel.process(2)
        assert process is not None
        assert process.state is ProcessState.WAITING

    def test_detached_zombie_is_not_found(self) -> None:
        """With DETACH the parent cannot see its exited child."""
        kernel = _booted_kernel()
        _parent_with_zombies(kernel, 1)
        assert kernel.cpu == 2
        kernel.wait()
        assert kernel.cpu is None
        zombie = kernel.process(3)
        assert zombie is not None
        assert zombie.is_zombie

    def test_wait_with_idle_cpu_is_noop(self) -> None:
        """Nothing happens without a running user process."""
        kernel = _booted_kernel()
        kernel.wait()
        assert kernel.processes == [1]


class TestWaitReaps:
    """Verify reaping when zombies stay linked."""

    def test_reap_erases_zombie(self) -> None:
        """The zombie PCB and its child-list entry disappear."""
        kernel = _booted_kernel(ZombieLinks.RETAIN)
        _parent_with_zombies(kernel, 1)
        kernel.wait()
        parent = kernel.process(2)
        assert parent is not None
        assert kernel.process(3) is None
        assert parent.children == []

    def test_reaping_parent_keeps_cpu(self) -> None:
        """A successful reap does not block the caller."""
        kernel = _booted_kernel(ZombieLinks.RETAIN)
        _parent_with_zombies(kernel, 1)
        kernel.wait()
        assert kernel.cpu == 2

    def test_reaped_region_stays_owned_by_stale_pid(self) -> None:
        """Known leak: the reaped zombie's region is never released."""
        kernel = _booted_kernel(ZombieLinks.RETAIN)
        _parent_with_zombies(kernel, 1)
        kernel.wait()
        assert MemoryItem(address=2_000, size=1_000, pid=3) in kernel.memory
        assert kernel.memory_manager.free_size == 10_000 - 1_000 - 2 * 1_000

    def test_reaps_first_zombie_in_list_order(self) -> None:
        """Each wait collects one zombie, oldest child first."""
        kernel = _booted_kernel(ZombieLinks.RETAIN)
        _parent_with_zombies(kernel, 2)
        parent = kernel.process(2)
        assert parent is not None
        assert parent.children == [3, 4]
        kernel.wait()
        assert parent.children == [4]
        kernel.wait()
        assert parent.children == []
        kernel.wait()
        assert parent.state is ProcessState.WAITING

    def test_retained_zombie_survives_root_exit(self) -> None:
        """Exiting the parent leaves its unreaped zombie in the table."""
        kernel = _booted_kernel(ZombieLinks.RETAIN)
        _parent_with_zombies(kernel, 1)
        kernel.exit()
        assert kernel.process(2) is None
        zombie = kernel.process(3)
        assert zombie is not None
        assert zombie.is_zombie
