"""
Concurrent scan scheduler (scan/concurrent.py).

The concurrent strategy must discover the same closure and the same
bean set as the sequential one, visit every type once, and fail cleanly
on timeout or cancellation.
"""

import threading
import time

import pytest

from litewire.faults import CancelledByHost, ScanTimeout
from litewire.scan import (
    CancellationToken,
    ConcurrentScanScheduler,
    Priority,
    ScanDiagnostics,
    ScanEventType,
    ScanRegistry,
    ThreadSafeScanRegistry,
    priority_of,
)
from litewire.symbols import TypeRef
from tests.conftest import field_entry, make_index, type_entry
from tests.test_engine import make_engine


def _wide_graph(width: int = 30):
    """Root -> N services, each depending on every shared helper."""
    helpers = [f"a.Helper{i}" for i in range(5)]
    services = [
        type_entry(f"a.Svc{i}Service", markers=["Service"],
                   fields=[field_entry(f"h{j}", h) for j, h in enumerate(helpers)])
        for i in range(width)
    ]
    root = type_entry(
        "a.Root", markers=["Service"],
        fields=[field_entry(f"s{i}", s["name"]) for i, s in enumerate(services)],
    )
    return make_index(root, *services, *(type_entry(h) for h in helpers))


class TestPriority:

    def test_name_hints(self):
        assert priority_of(TypeRef("a.OrderService")) is Priority.HIGH
        assert priority_of(TypeRef("a.AppConfig")) is Priority.HIGH
        assert priority_of(TypeRef("a.OrderController")) is Priority.MEDIUM
        assert priority_of(TypeRef("a.Order")) is Priority.LOW


class TestConcurrentScan:

    def test_matches_sequential(self, order_symbols, order_resources, settings):
        sequential = make_engine(order_symbols, settings, resources=order_resources).traverse(
            order_symbols.find("com.acme.order.OrderService"), ScanRegistry()
        )
        engine = make_engine(order_symbols, settings, resources=order_resources)
        concurrent = ConcurrentScanScheduler(engine, max_workers=4, timeout=10).scan(
            order_symbols.find("com.acme.order.OrderService"), ThreadSafeScanRegistry()
        )
        assert sorted(concurrent.visited) == sorted(sequential.visited)
        assert {r.id: r.kind for r in concurrent} == {r.id: r.kind for r in sequential}

    def test_each_type_visited_once(self, settings):
        index = _wide_graph()
        visits = []
        lock = threading.Lock()

        class Recorder:
            def on_event(self, event):
                if event.type is ScanEventType.TYPE_VISITED:
                    with lock:
                        visits.append(event.qualified_name)

        engine = make_engine(index, settings, diagnostics=ScanDiagnostics([Recorder()]))
        registry = ConcurrentScanScheduler(engine, max_workers=8, timeout=10).scan(
            index.find("a.Root"), ThreadSafeScanRegistry()
        )
        assert len(visits) == len(set(visits)) == len(index)
        assert len(registry) == 31

    def test_single_worker(self, order_symbols, settings):
        engine = make_engine(order_symbols, settings)
        registry = ConcurrentScanScheduler(engine, max_workers=1, timeout=10).scan(
            order_symbols.find("com.acme.order.OrderService"), ThreadSafeScanRegistry()
        )
        assert "com.acme.order.Order" in registry.visited

    def test_workers_joined_after_scan(self, settings):
        index = _wide_graph()
        before = set(threading.enumerate())
        engine = make_engine(index, settings)
        ConcurrentScanScheduler(engine, max_workers=4, timeout=10).scan(
            index.find("a.Root"), ThreadSafeScanRegistry()
        )
        leftover = [
            t for t in threading.enumerate()
            if t.name.startswith("litewire-scan") and t not in before
        ]
        assert leftover == []

    def test_timeout(self, settings):
        index = _wide_graph(width=5)

        class Slow:
            def on_event(self, event):
                if event.type is ScanEventType.TYPE_VISITED and event.qualified_name != "a.Root":
                    time.sleep(0.5)

        engine = make_engine(index, settings, diagnostics=ScanDiagnostics([Slow()]))
        started = time.monotonic()
        with pytest.raises(ScanTimeout):
            ConcurrentScanScheduler(engine, max_workers=1, timeout=0.3).scan(
                index.find("a.Root"), ThreadSafeScanRegistry()
            )
        assert time.monotonic() - started < 2.0

    def test_cancelled(self, settings):
        index = _wide_graph(width=5)
        token = CancellationToken()

        class CancelAfterRoot:
            def on_event(self, event):
                if event.type is ScanEventType.TYPE_VISITED and event.qualified_name != "a.Root":
                    token.cancel("shutdown")

        engine = make_engine(index, settings, token=token,
                             diagnostics=ScanDiagnostics([CancelAfterRoot()]))
        with pytest.raises(CancelledByHost):
            ConcurrentScanScheduler(engine, max_workers=2, timeout=10).scan(
                index.find("a.Root"), ThreadSafeScanRegistry()
            )

    def test_worker_error_propagates(self, settings):
        index = _wide_graph(width=3)

        engine = make_engine(index, settings)
        original = engine.dependencies_of

        def failing(type_ref, registry):
            if type_ref.qualified_name == "a.Svc1Service":
                raise RuntimeError("boom")
            return original(type_ref, registry)

        engine.dependencies_of = failing
        with pytest.raises(RuntimeError, match="boom"):
            ConcurrentScanScheduler(engine, max_workers=2, timeout=10).scan(
                index.find("a.Root"), ThreadSafeScanRegistry()
            )
