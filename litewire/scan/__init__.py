"""
LiteWire scan - graph traversal, classification and registration.
"""

from .kinds import BeanKind, BeanRecord, Origin, decapitalize, origin_for
from .registry import RegistryCounters, ScanRegistry, ThreadSafeScanRegistry
from .resolver import ImplementationResolver, TypeNameResolver
from .factories import FactoryBinding, FactoryIndex
from .classifier import Classification, Classifier
from .diagnostics import (
    DiagnosticListener,
    LoggingDiagnosticListener,
    ScanDiagnostics,
    ScanEvent,
    ScanEventType,
)
from .cancellation import CancellationToken
from .engine import GraphTraversalEngine, resolve_root
from .concurrent import ConcurrentScanScheduler, Priority, priority_of

__all__ = [
    "BeanKind",
    "BeanRecord",
    "Origin",
    "decapitalize",
    "origin_for",
    "RegistryCounters",
    "ScanRegistry",
    "ThreadSafeScanRegistry",
    "ImplementationResolver",
    "TypeNameResolver",
    "FactoryBinding",
    "FactoryIndex",
    "Classification",
    "Classifier",
    "DiagnosticListener",
    "LoggingDiagnosticListener",
    "ScanDiagnostics",
    "ScanEvent",
    "ScanEventType",
    "CancellationToken",
    "GraphTraversalEngine",
    "resolve_root",
    "ConcurrentScanScheduler",
    "Priority",
    "priority_of",
]
