"""
Concurrent scan scheduler - priority work queue over a thread pool.

Workers drain a shared ``queue.PriorityQueue`` of ``(priority, seq, type)``
entries and run the engine's per-type step against a
``ThreadSafeScanRegistry``. Discovered types are enqueued without
blocking. A pending-work counter under a condition variable tells the
coordinating thread when the closure is complete.
"""

import itertools
import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from enum import IntEnum
from typing import List

from ..faults import ScanTimeout
from ..symbols import TypeRef
from .engine import GraphTraversalEngine
from .registry import ThreadSafeScanRegistry

logger = logging.getLogger("litewire.scan.concurrent")

_POLL_INTERVAL = 0.05


class Priority(IntEnum):
    """Lower values are dequeued first."""
    HIGH = 0
    MEDIUM = 1
    LOW = 2


_HIGH_HINTS = ("Config", "Configuration", "Service", "Component", "Repository")
_MEDIUM_HINTS = ("Controller", "Manager", "Handler")


def priority_of(type_ref: TypeRef) -> Priority:
    """Name-based scheduling hint; ties are broken by submission order."""
    name = type_ref.simple_name
    if any(hint in name for hint in _HIGH_HINTS):
        return Priority.HIGH
    if any(hint in name for hint in _MEDIUM_HINTS):
        return Priority.MEDIUM
    return Priority.LOW


class ConcurrentScanScheduler:
    """
    Bounded concurrent traversal.

    Args:
        engine: Engine providing the per-type step
        max_workers: Worker thread count
        timeout: Wall-clock limit in seconds for the whole scan
    """

    def __init__(self, engine: GraphTraversalEngine, max_workers: int = 4, timeout: float = 30.0):
        self.engine = engine
        self.max_workers = max(1, max_workers)
        self.timeout = timeout

    def scan(self, root: TypeRef, registry: ThreadSafeScanRegistry) -> ThreadSafeScanRegistry:
        """
        Visit everything reachable from ``root``.

        Raises:
            ScanTimeout: The deadline passed before the closure was complete
            CancelledByHost: The token was cancelled
        """
        run = _ScanRun(self.engine, registry, root, time.monotonic() + self.timeout)
        executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="litewire-scan"
        )
        completed = False
        try:
            self.engine.token.raise_if_cancelled(root.qualified_name)
            root_future = executor.submit(self.engine.process, root, registry)
            try:
                successors = root_future.result(timeout=run.remaining())
            except FutureTimeout:
                raise ScanTimeout(root.qualified_name, self.timeout) from None

            for successor in successors:
                run.submit(successor)
            for _ in range(self.max_workers):
                executor.submit(run.work)

            run.wait(self.timeout)
            completed = True
        finally:
            run.stop.set()
            # Workers are joined only after a complete scan
            executor.shutdown(wait=completed, cancel_futures=True)
        return registry


class _ScanRun:
    """Shared state of one concurrent scan."""

    def __init__(
        self,
        engine: GraphTraversalEngine,
        registry: ThreadSafeScanRegistry,
        root: TypeRef,
        deadline: float,
    ):
        self.engine = engine
        self.registry = registry
        self.root = root
        self.deadline = deadline
        self.queue: "queue.PriorityQueue" = queue.PriorityQueue()
        self.sequence = itertools.count()
        self.pending = 0
        self.done = threading.Condition()
        self.stop = threading.Event()
        self.errors: List[BaseException] = []

    def remaining(self) -> float:
        return max(0.0, self.deadline - time.monotonic())

    def submit(self, type_ref: TypeRef) -> None:
        with self.done:
            self.pending += 1
        self.queue.put((priority_of(type_ref), next(self.sequence), type_ref))

    def _finish_one(self) -> None:
        with self.done:
            self.pending -= 1
            if self.pending == 0:
                self.done.notify_all()

    def work(self) -> None:
        while not self.stop.is_set():
            try:
                _, _, type_ref = self.queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            try:
                self.engine.token.raise_if_cancelled(self.root.qualified_name)
                for successor in self.engine.process(type_ref, self.registry):
                    self.submit(successor)
            except Exception as e:
                with self.done:
                    self.errors.append(e)
                    self.done.notify_all()
                self.stop.set()
            finally:
                self._finish_one()

    def wait(self, timeout: float) -> None:
        with self.done:
            while self.pending > 0 and not self.errors:
                self.engine.token.raise_if_cancelled(self.root.qualified_name)
                remaining = self.remaining()
                if remaining <= 0:
                    logger.warning(
                        f"Scan of {self.root.qualified_name} timed out with "
                        f"{self.pending} types pending"
                    )
                    raise ScanTimeout(self.root.qualified_name, timeout)
                self.done.wait(min(remaining, _POLL_INTERVAL * 2))
            if self.errors:
                raise self.errors[0]
