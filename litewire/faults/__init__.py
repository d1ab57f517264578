"""
LiteWire Faults - Structured fault taxonomy.

Per-type and per-file faults are recorded and summarized after the scan;
whole-scan faults are raised and no descriptor is produced.
"""

from .core import (
    Fault,
    FaultDomain,
    FaultRecord,
    Severity,
    DOMAIN_DEFAULTS,
)

from .domains import (
    ConfigFault,
    ConfigInvalid,
    LookupFailure,
    ScanFault,
    ClassificationAmbiguity,
    IdCollision,
    ScanFailure,
    UnresolvableRoot,
    ScanTimeout,
    CancelledByHost,
    ResourceParseFailure,
    ScaffoldWriteFailure,
)

__all__ = [
    # Core
    "Fault",
    "FaultDomain",
    "FaultRecord",
    "Severity",
    "DOMAIN_DEFAULTS",
    # Domains
    "ConfigFault",
    "ConfigInvalid",
    "LookupFailure",
    "ScanFault",
    "ClassificationAmbiguity",
    "IdCollision",
    "ScanFailure",
    "UnresolvableRoot",
    "ScanTimeout",
    "CancelledByHost",
    "ResourceParseFailure",
    "ScaffoldWriteFailure",
]
