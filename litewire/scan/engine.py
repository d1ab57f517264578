"""
Graph traversal engine - discovers the dependency closure of a root type.

Traversal is iterative over an explicit stack. Each popped type is
visited at most once (check-and-insert on the registry's visited set),
classified, registered when it is a bean, and expanded into:

- implementors, when it is an interface or abstract class
- the owning factory type, when a factory method provides it
- declared field types, unwrapped through arrays, generic arguments and
  wildcard bounds
- parameters of its only declared constructor
- declared supertype and interfaces
- parameter and return types of provider methods on factory types

Termination follows from the visited set only growing over a finite
set of declarations.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from ..config import ScanSettings
from ..faults import ClassificationAmbiguity, LookupFailure
from ..symbols import SymbolLookup, TypeRef, TypeUse
from .cancellation import CancellationToken
from .classifier import Classifier
from .diagnostics import ScanDiagnostics, ScanEventType
from .factories import FactoryIndex
from .kinds import BeanKind, BeanRecord, decapitalize, origin_for
from .registry import ScanRegistry
from .resolver import ImplementationResolver, TypeNameResolver

logger = logging.getLogger("litewire.scan.engine")


class GraphTraversalEngine:
    """
    Sequential, deterministic traversal.

    The per-type step (``process``) is shared with the concurrent
    scheduler; only the work-list differs.

    Args:
        lookup: Symbol lookup snapshot
        classifier: Classifier chain
        implementations: Implementation resolver
        factories: Factory binding index
        settings: Scan settings
        diagnostics: Fault and event sink
        token: Cancellation signal checked before each visit
    """

    def __init__(
        self,
        lookup: SymbolLookup,
        classifier: Classifier,
        implementations: ImplementationResolver,
        factories: FactoryIndex,
        settings: ScanSettings,
        diagnostics: Optional[ScanDiagnostics] = None,
        token: Optional[CancellationToken] = None,
        names: Optional[TypeNameResolver] = None,
    ):
        self.lookup = lookup
        self.classifier = classifier
        self.implementations = implementations
        self.factories = factories
        self.settings = settings
        self.diagnostics = diagnostics or ScanDiagnostics()
        self.token = token or CancellationToken()
        self.names = names or TypeNameResolver(lookup, settings)

    # ========================================================================
    # Traversal
    # ========================================================================

    def traverse(self, root: TypeRef, registry: ScanRegistry) -> ScanRegistry:
        """
        Visit everything reachable from ``root``.

        Raises:
            CancelledByHost: If the token is cancelled mid-scan
        """
        stack: List[TypeRef] = [root]
        while stack:
            self.token.raise_if_cancelled(root.qualified_name)
            current = stack.pop()
            # Pushed in reverse so the first-declared dependency is visited first
            stack.extend(reversed(self.process(current, registry)))
        return registry

    def process(self, type_ref: TypeRef, registry: ScanRegistry) -> List[TypeRef]:
        """
        Visit one type and return the types it leads to.

        Returns an empty list when the type was already visited.
        """
        if not type_ref.qualified_name or not registry.visit(type_ref.qualified_name):
            return []

        classification = self.classifier.classify_detailed(type_ref)
        if classification.is_ambiguous:
            self.diagnostics.record(
                ClassificationAmbiguity(
                    type_ref.qualified_name, classification.rule, classification.shadowed
                ),
                subject=type_ref.qualified_name,
            )

        self.diagnostics.emit(
            ScanEventType.TYPE_VISITED,
            qualified_name=type_ref.qualified_name,
            kind=classification.kind.value,
        )

        if classification.kind is not BeanKind.PLAIN:
            record = BeanRecord(
                id=classification.id_override or decapitalize(type_ref.simple_name),
                type_ref=type_ref,
                kind=classification.kind,
                origin=origin_for(classification.kind),
                target_class=classification.target_override,
                rule=classification.rule,
            )
            collision = registry.register(record)
            if collision is not None:
                self.diagnostics.record(collision, subject=type_ref.qualified_name)
            else:
                self.diagnostics.emit(
                    ScanEventType.BEAN_REGISTERED,
                    qualified_name=type_ref.qualified_name,
                    bean_id=record.id,
                    kind=record.kind.value,
                )

        successors: List[TypeRef] = []
        if type_ref.is_polymorphic:
            successors.extend(self.implementations.resolve(type_ref))

        binding = self.factories.binding_for(type_ref.qualified_name)
        if binding is not None:
            successors.append(binding.factory_type)

        successors.extend(self.dependencies_of(type_ref, registry))
        return successors

    # ========================================================================
    # Dependency collection
    # ========================================================================

    def referenced_uses(self, type_ref: TypeRef) -> Iterator[TypeUse]:
        """Declared type expressions this type depends on, in declaration order."""
        for field_decl in type_ref.fields:
            yield field_decl.type

        constructors = type_ref.constructors()
        if len(constructors) == 1:
            yield from constructors[0].parameter_types

        yield from type_ref.declared_supertypes()

        if type_ref.has_marker(self.settings.factory_markers):
            for method in type_ref.methods:
                if method.constructor or method.find_marker(self.settings.provider_markers) is None:
                    continue
                yield from method.parameter_types
                if method.return_type is not None:
                    yield method.return_type

    def dependencies_of(self, type_ref: TypeRef, registry: ScanRegistry) -> List[TypeRef]:
        """
        Resolve referenced names to declarations.

        Unresolvable names are recorded once per referencing type as
        ``LookupFailure`` and pruned.
        """
        resolved: List[TypeRef] = []
        seen: Set[str] = set()
        for name in _names(self.referenced_uses(type_ref)):
            if name in seen:
                continue
            seen.add(name)
            if self.names.is_skipped(name):
                continue
            target = self.names.resolve(name, type_ref)
            if target is None:
                self.diagnostics.record(
                    LookupFailure(name, referenced_by=type_ref.qualified_name),
                    subject=type_ref.qualified_name,
                )
                continue
            if self.settings.is_ignored(target.qualified_name):
                continue
            if not registry.is_visited(target.qualified_name):
                resolved.append(target)
        return resolved


def _names(uses: Iterable[TypeUse]) -> Iterator[str]:
    for use in uses:
        yield from use.referenced_names()


def resolve_root(
    lookup: SymbolLookup, qualified_name: str, method: Optional[str] = None
) -> Tuple[Optional[TypeRef], bool]:
    """
    Find the root declaration and check the optional method.

    Returns:
        ``(type_ref, method_ok)``; ``type_ref`` is None when not found
    """
    root = lookup.find(qualified_name)
    if root is None:
        return None, False
    if method is None:
        return root, True
    return root, any(m.name == method for m in root.methods)
