"""
Scan Diagnostics - Observability and event tracking for scans.
"""

import threading
import time
from typing import Any, Dict, List, Optional, Protocol
from enum import Enum
import dataclasses
import logging

from ..faults import Fault, FaultRecord, Severity

logger = logging.getLogger("litewire.scan.diagnostics")


class ScanEventType(Enum):
    """Types of scan events."""
    SCAN_START = "scan_start"
    SCAN_COMPLETE = "scan_complete"
    TYPE_VISITED = "type_visited"
    BEAN_REGISTERED = "bean_registered"
    FAULT_RECORDED = "fault_recorded"


@dataclasses.dataclass
class ScanEvent:
    """A diagnostic event during a scan."""
    type: ScanEventType
    timestamp: float = dataclasses.field(default_factory=time.time)
    qualified_name: Optional[str] = None
    bean_id: Optional[str] = None
    kind: Optional[str] = None
    duration: Optional[float] = None
    fault: Optional[Fault] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)


class DiagnosticListener(Protocol):
    """Interface for scan diagnostic listeners."""
    def on_event(self, event: ScanEvent) -> None:
        """Called when a scan event occurs."""
        ...


class LoggingDiagnosticListener:
    """Diagnostic listener that writes events to the ``litewire`` loggers."""
    def __init__(self, log_level: int = logging.DEBUG):
        self.log_level = log_level

    def on_event(self, event: ScanEvent) -> None:
        if event.type == ScanEventType.SCAN_START:
            logger.info(f"Scanning from {event.qualified_name} ({event.metadata.get('strategy')})")
        elif event.type == ScanEventType.TYPE_VISITED:
            logger.log(self.log_level, f"Visited {event.qualified_name} -> {event.kind}")
        elif event.type == ScanEventType.BEAN_REGISTERED:
            logger.log(self.log_level, f"Registered bean '{event.bean_id}' ({event.kind}) for {event.qualified_name}")
        elif event.type == ScanEventType.FAULT_RECORDED:
            level = logging.INFO if event.fault.severity == Severity.INFO else logging.WARNING
            logger.log(level, str(event.fault))
        elif event.type == ScanEventType.SCAN_COMPLETE:
            logger.info(
                f"Scan of {event.qualified_name} finished in {event.duration:.3f}s: "
                f"{event.metadata.get('visited', 0)} types visited, "
                f"{event.metadata.get('beans', 0)} beans, "
                f"{event.metadata.get('faults', 0)} faults"
            )


class ScanDiagnostics:
    """
    Coordinator for scan diagnostic listeners.

    Also keeps per-code fault counters and the recorded faults for the
    post-scan summary. Safe to share between scan workers.
    """
    def __init__(self, listeners: Optional[List[DiagnosticListener]] = None):
        self._listeners: List[DiagnosticListener] = list(listeners or [])
        self._lock = threading.Lock()
        self._records: List[FaultRecord] = []
        self._counts: Dict[str, int] = {}

    def add_listener(self, listener: DiagnosticListener) -> None:
        """Add a diagnostic listener."""
        self._listeners.append(listener)

    def emit(self, event_type: ScanEventType, **kwargs) -> None:
        """Emit a diagnostic event to all listeners."""
        event = ScanEvent(type=event_type, **kwargs)
        for listener in self._listeners:
            try:
                listener.on_event(event)
            except Exception as e:
                logger.error(f"Diagnostic listener error: {e}")

    def record(self, fault: Fault, subject: Optional[str] = None) -> FaultRecord:
        """Record a recovered fault and emit it."""
        entry = FaultRecord(fault, subject=subject)
        with self._lock:
            self._records.append(entry)
            self._counts[fault.code] = self._counts.get(fault.code, 0) + 1
        self.emit(ScanEventType.FAULT_RECORDED, qualified_name=subject, fault=fault)
        return entry

    @property
    def records(self) -> List[FaultRecord]:
        with self._lock:
            return list(self._records)

    def count(self, code: str) -> int:
        with self._lock:
            return self._counts.get(code, 0)

    def summary(self) -> Dict[str, Any]:
        """Fault counts by code plus the recorded faults."""
        with self._lock:
            return {
                "counts": dict(self._counts),
                "faults": [r.to_dict() for r in self._records],
            }
