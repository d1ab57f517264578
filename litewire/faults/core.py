"""
LiteWire Faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
- FaultRecord (a fault captured during a scan, with where it happened)
"""

from __future__ import annotations

import time
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when a fault is recorded.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Recovered locally, should be reviewed
    ERROR = "error"     # Scan-level failure
    FATAL = "fatal"     # Unusable input, abort


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.SYMBOLS = FaultDomain("symbols", "Symbol table lookups")
FaultDomain.SCAN = FaultDomain("scan", "Graph traversal and classification")
FaultDomain.RESOURCES = FaultDomain("resources", "Mapping and data-source resources")
FaultDomain.WIRING = FaultDomain("wiring", "Descriptor synthesis")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.SYMBOLS: Severity.WARN,
    FaultDomain.SCAN: Severity.ERROR,
    FaultDomain.RESOURCES: Severity.WARN,
    FaultDomain.WIRING: Severity.ERROR,
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault carries:
    - Stable machine-readable code
    - Human-readable message
    - Domain classification
    - Severity level
    - Metadata for the diagnostic summary

    Faults are raised for whole-scan failures and recorded (not raised)
    for per-type and per-file problems that the scan recovers from.

    Example:
        ```python
        raise Fault(
            code="ROOT_UNRESOLVABLE",
            message="Root type com.acme.OrderService not found",
            domain=FaultDomain.SCAN,
        )
        ```
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain,
        severity: Optional[Severity] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain
        self.severity = severity or DOMAIN_DEFAULTS.get(domain, Severity.ERROR)
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "metadata": self.metadata,
        }


# ============================================================================
# FaultRecord - a recovered fault kept for the post-scan summary
# ============================================================================

@dataclass(slots=True)
class FaultRecord:
    """
    A fault recovered locally during a scan.

    Attributes:
        fault: The underlying fault
        subject: Qualified name or file the fault is about
        timestamp: When the fault was recorded
    """

    fault: Fault
    subject: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def code(self) -> str:
        return self.fault.code

    def to_dict(self) -> dict[str, Any]:
        return {
            "fault": self.fault.to_dict(),
            "subject": self.subject,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        where = f" ({self.subject})" if self.subject else ""
        return f"{self.fault}{where}"
