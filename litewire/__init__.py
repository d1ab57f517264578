"""
LiteWire - minimal dependency wiring for isolated Spring tests

Given one root type, LiteWire finds everything it transitively needs and
emits the smallest wiring descriptor that lets a test container start it:

- Symbols: Read-only view over a project's declared types
- Resources: Mapper XML, Spring XML and application property indexing
- Scan: Classification rules and the sequential/concurrent traversal
- Wiring: Descriptor synthesis, XML rendering and test scaffolding
- Faults: Structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Configuration
# ============================================================================

from .config import ConfigError, ConfigLoader, ScanSettings

# ============================================================================
# Faults
# ============================================================================

from .faults import (
    Fault,
    FaultDomain,
    FaultRecord,
    Severity,
    ScanFault,
    ScanFailure,
    UnresolvableRoot,
    ScanTimeout,
    CancelledByHost,
)

# ============================================================================
# Symbols and resources
# ============================================================================

from .symbols import SymbolIndex, SymbolLookup, TypeRef
from .resources import ResourceIndex, reduce, match

# ============================================================================
# Scanning and wiring
# ============================================================================

from .scan import BeanKind, BeanRecord, CancellationToken, ScanRegistry
from .wiring import WiringDescriptor, ScaffoldWriter
from .service import LiteScanService, ScanResult

__all__ = [
    "__version__",
    "ConfigError",
    "ConfigLoader",
    "ScanSettings",
    "Fault",
    "FaultDomain",
    "FaultRecord",
    "Severity",
    "ScanFault",
    "ScanFailure",
    "UnresolvableRoot",
    "ScanTimeout",
    "CancelledByHost",
    "SymbolIndex",
    "SymbolLookup",
    "TypeRef",
    "ResourceIndex",
    "reduce",
    "match",
    "BeanKind",
    "BeanRecord",
    "CancellationToken",
    "ScanRegistry",
    "WiringDescriptor",
    "ScaffoldWriter",
    "LiteScanService",
    "ScanResult",
]
