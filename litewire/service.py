"""
LiteScanService - one call from a root type to its wiring.

Wires the scan pipeline together::

    root -> GraphTraversalEngine (SymbolLookup, Classifier, ImplementationResolver)
         -> ScanRegistry -> ConfigSynthesizer -> WiringDescriptor

Every call builds fresh per-scan state (registry, diagnostics, indexes);
nothing is cached between scans.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set

from .config import ScanSettings
from .faults import UnresolvableRoot
from .resources import ResourceIndex, reduce
from .scan import (
    CancellationToken,
    Classifier,
    ConcurrentScanScheduler,
    DiagnosticListener,
    FactoryIndex,
    GraphTraversalEngine,
    ImplementationResolver,
    LoggingDiagnosticListener,
    ScanDiagnostics,
    ScanEventType,
    ScanRegistry,
    ThreadSafeScanRegistry,
    TypeNameResolver,
    resolve_root,
)
from .symbols import SymbolLookup, TypeRef, package_of
from .wiring import ConfigSynthesizer, WiringDescriptor

logger = logging.getLogger("litewire.service")


@dataclass
class ScanResult:
    """
    Outputs of a successful scan.

    Attributes:
        root: Root declaration
        method: Requested root method, if any
        descriptor: Wiring descriptor
        registry: The scan's registry (records, visited set, counters)
        class_names: Distinct visited class names, sorted
        package_roots: Reduced package roots of the visited classes
        diagnostics: Recorded faults and counters
        duration: Wall-clock seconds
    """

    root: TypeRef
    method: Optional[str]
    descriptor: WiringDescriptor
    registry: ScanRegistry
    class_names: List[str]
    package_roots: Set[str]
    diagnostics: ScanDiagnostics
    duration: float = 0.0
    strategy: str = "sequential"

    def summary(self) -> Dict[str, Any]:
        return {
            "root": self.root.qualified_name,
            "strategy": self.strategy,
            "visited": len(self.class_names),
            "beans": len(self.registry),
            "fragments": len(self.descriptor),
            "counters": self.registry.counters.as_dict(),
            "faults": self.diagnostics.summary()["counts"],
            "duration": round(self.duration, 4),
        }


class LiteScanService:
    """
    Entry point for scans.

    Args:
        lookup: Symbol lookup snapshot
        resources: Resource index (empty when omitted)
        settings: Scan settings (defaults when omitted)
        listeners: Extra diagnostic listeners

    Example:
        ```python
        service = LiteScanService(SymbolIndex.from_file("symbols.yaml"),
                                  ResourceIndex.from_roots(["src/main/resources"]))
        result = service.scan("com.acme.OrderService")
        print(result.descriptor.render())
        ```
    """

    def __init__(
        self,
        lookup: SymbolLookup,
        resources: Optional[ResourceIndex] = None,
        settings: Optional[ScanSettings] = None,
        listeners: Optional[Sequence[DiagnosticListener]] = None,
    ):
        self.lookup = lookup
        self.resources = resources or ResourceIndex.empty()
        self.settings = settings or ScanSettings()
        self.listeners = list(listeners or [])

    def scan(
        self,
        root_name: str,
        method: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> ScanResult:
        """
        Scan from ``root_name`` and synthesize its wiring.

        Raises:
            UnresolvableRoot: Root (or root method) not in the symbol index
            ScanTimeout: Concurrent scan exceeded ``settings.timeout``
            CancelledByHost: ``token`` was cancelled
        """
        started = time.monotonic()
        diagnostics = ScanDiagnostics([LoggingDiagnosticListener(), *self.listeners])
        for failure in self.resources.failures:
            diagnostics.record(failure.fault, subject=failure.subject)

        root, method_ok = resolve_root(self.lookup, root_name, method)
        if root is None or not method_ok:
            raise UnresolvableRoot(root_name, method)

        token = token or CancellationToken()
        names = TypeNameResolver(self.lookup, self.settings)
        factories = FactoryIndex.build(self.lookup, self.settings, names)
        logger.debug(f"Root {root.qualified_name} resolved; {len(factories)} factory bindings")
        implementations = ImplementationResolver(self.lookup, self.resources, self.settings, names)
        classifier = Classifier(self.settings, self.resources, factories)
        engine = GraphTraversalEngine(
            self.lookup,
            classifier,
            implementations,
            factories,
            self.settings,
            diagnostics=diagnostics,
            token=token,
            names=names,
        )

        diagnostics.emit(
            ScanEventType.SCAN_START,
            qualified_name=root.qualified_name,
            metadata={"strategy": self.settings.strategy},
        )

        if self.settings.strategy == "concurrent":
            registry: ScanRegistry = ThreadSafeScanRegistry()
            ConcurrentScanScheduler(
                engine, self.settings.max_workers, self.settings.timeout
            ).scan(root, registry)
        else:
            registry = ScanRegistry()
            engine.traverse(root, registry)

        descriptor = ConfigSynthesizer(
            self.lookup, self.resources, self.settings, factories, implementations
        ).synthesize(registry)

        visited = registry.visited
        class_names = sorted(set(visited))
        package_roots = reduce({package_of(name) for name in visited if package_of(name)})
        duration = time.monotonic() - started

        diagnostics.emit(
            ScanEventType.SCAN_COMPLETE,
            qualified_name=root.qualified_name,
            duration=duration,
            metadata={
                "visited": len(class_names),
                "beans": len(registry),
                "faults": len(diagnostics.records),
            },
        )

        return ScanResult(
            root=root,
            method=method,
            descriptor=descriptor,
            registry=registry,
            class_names=class_names,
            package_roots=package_roots,
            diagnostics=diagnostics,
            duration=duration,
            strategy=self.settings.strategy,
        )
