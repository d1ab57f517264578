"""
LiteWire Faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- SYMBOLS faults (lookup failures)
- SCAN faults (ambiguity, collisions, timeout, cancellation, root)
- RESOURCES faults (parse failures)
- WIRING faults (scaffold output)

Whole-scan failures derive from ``ScanFailure``. Host cancellation
derives from ``ScanFault`` only, so ``except ScanFailure`` never
catches a user abort.
"""

from typing import Any, Optional, Sequence
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=Severity.FATAL,
            metadata=metadata,
        )


class ConfigInvalid(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason},
        )


# ============================================================================
# SYMBOLS Faults
# ============================================================================

class LookupFailure(Fault):
    """A referenced type could not be resolved; the branch is pruned."""

    def __init__(self, name: str, referenced_by: Optional[str] = None):
        message = f"Cannot resolve type '{name}'"
        if referenced_by:
            message += f" referenced by {referenced_by}"
        super().__init__(
            code="LOOKUP_FAILED",
            message=message,
            domain=FaultDomain.SYMBOLS,
            severity=Severity.WARN,
            metadata={"name": name, "referenced_by": referenced_by},
        )
        self.name = name
        self.referenced_by = referenced_by


# ============================================================================
# SCAN Faults
# ============================================================================

class ScanFault(Fault):
    """Base class for traversal faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.SCAN,
            severity=severity,
            metadata=metadata,
        )


class ClassificationAmbiguity(ScanFault):
    """Two classifier rules matched with conflicting kinds."""

    def __init__(self, qualified_name: str, winner: str, shadowed: Sequence[str]):
        super().__init__(
            code="CLASSIFICATION_AMBIGUOUS",
            message=(
                f"Type '{qualified_name}' matches rules {[winner, *shadowed]}; "
                f"'{winner}' takes precedence"
            ),
            severity=Severity.WARN,
            metadata={"type": qualified_name, "winner": winner, "shadowed": list(shadowed)},
        )
        self.qualified_name = qualified_name
        self.winner = winner
        self.shadowed = list(shadowed)


class IdCollision(ScanFault):
    """Two distinct types produced the same bean id."""

    def __init__(self, bean_id: str, kept: str, dropped: str):
        super().__init__(
            code="BEAN_ID_COLLISION",
            message=(
                f"Bean id '{bean_id}' already registered for {kept}; "
                f"{dropped} was not registered"
            ),
            severity=Severity.WARN,
            metadata={"id": bean_id, "kept": kept, "dropped": dropped},
        )
        self.bean_id = bean_id
        self.kept = kept
        self.dropped = dropped


class ScanFailure(ScanFault):
    """The whole scan failed; no descriptor is produced."""


class UnresolvableRoot(ScanFailure):
    """The root type (or requested root method) does not exist."""

    def __init__(self, name: str, method: Optional[str] = None):
        target = f"{name}#{method}" if method else name
        super().__init__(
            code="ROOT_UNRESOLVABLE",
            message=f"Root '{target}' cannot be resolved in the symbol index",
            metadata={"name": name, "method": method},
        )
        self.name = name
        self.method = method


class ScanTimeout(ScanFailure):
    """Concurrent scan exceeded its deadline."""

    def __init__(self, root: str, timeout: float):
        super().__init__(
            code="SCAN_TIMEOUT",
            message=(
                f"Scan of '{root}' did not finish within {timeout}s; "
                f"retry or use the sequential strategy"
            ),
            metadata={"root": root, "timeout": timeout},
        )
        self.root = root
        self.timeout = timeout


class CancelledByHost(ScanFault):
    """The host aborted the scan. Not a failure."""

    def __init__(self, root: Optional[str] = None, reason: str = "cancelled by host"):
        super().__init__(
            code="SCAN_CANCELLED",
            message=f"Scan{f' of {root!r}' if root else ''} cancelled: {reason}",
            severity=Severity.INFO,
            metadata={"root": root, "reason": reason},
        )
        self.root = root
        self.reason = reason


# ============================================================================
# RESOURCES Faults
# ============================================================================

class ResourceParseFailure(Fault):
    """A mapping or data-source resource file could not be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code="RESOURCE_PARSE_FAILED",
            message=f"Cannot parse resource '{path}': {reason}",
            domain=FaultDomain.RESOURCES,
            severity=Severity.WARN,
            metadata={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


# ============================================================================
# WIRING Faults
# ============================================================================

class ScaffoldWriteFailure(Fault):
    """Generated test files could not be written."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code="SCAFFOLD_WRITE_FAILED",
            message=f"Cannot write '{path}': {reason}",
            domain=FaultDomain.WIRING,
            metadata={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason
