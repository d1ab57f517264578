"""
Type name resolution and polymorphic implementation lookup.
"""

import logging
import re
from typing import Dict, List, Optional

from ..config import ScanSettings
from ..resources import ResourceIndex
from ..symbols import PRIMITIVES, SymbolLookup, TypeRef

logger = logging.getLogger("litewire.scan.resolver")

# Implicitly imported JDK names as they appear in unresolved source.
IMPLICIT_NAMES = frozenset({
    "Object", "String", "CharSequence", "Boolean", "Byte", "Character", "Short",
    "Integer", "Long", "Float", "Double", "Number", "Void", "Class", "Enum",
    "Iterable", "Runnable", "Thread", "Exception", "RuntimeException", "Throwable",
    "StringBuilder", "Comparable",
    "List", "Map", "Set", "Collection", "Optional", "Queue", "Deque", "Iterator",
    "ArrayList", "HashMap", "HashSet", "LinkedList", "LinkedHashMap", "TreeMap",
    "Date", "BigDecimal", "BigInteger", "LocalDate", "LocalDateTime", "Instant",
    "UUID", "Function", "Supplier", "Consumer", "Predicate", "Stream",
})

_TYPE_VARIABLE = re.compile(r"^[A-Z][0-9]?$")


class TypeNameResolver:
    """
    Resolves declared type names against the symbol lookup.

    Order: exact qualified name, same package as the referencing type,
    then a unique simple-name match. Relative nested names (``Outer.Inner``)
    resolve through their outer type. Names under ignored prefixes,
    primitives, implicit JDK names and single-letter type variables are
    skipped without a lookup.
    """

    def __init__(self, lookup: SymbolLookup, settings: ScanSettings):
        self.lookup = lookup
        self.settings = settings

    def is_skipped(self, name: str) -> bool:
        if not name or name in PRIMITIVES or name == "?":
            return True
        if "." not in name:
            return name in IMPLICIT_NAMES or bool(_TYPE_VARIABLE.match(name))
        head = name.split(".", 1)[0]
        if head[:1].isupper():
            # Relative nested name (Map.Entry): skipped with its outer type
            return self.is_skipped(head)
        return self.settings.is_ignored(name)

    def resolve(self, name: str, context: Optional[TypeRef] = None) -> Optional[TypeRef]:
        found = self.lookup.find(name)
        if found is not None:
            return found
        if "." in name:
            head, _, rest = name.partition(".")
            if head[:1].isupper():
                outer = self.resolve(head, context)
                if outer is None:
                    return None
                return self.lookup.find(f"{outer.qualified_name}${rest.replace('.', '$')}")
            # Nested types may be written with a dot instead of '$'
            outer, _, inner = name.rpartition(".")
            return self.lookup.find(f"{outer}${inner}")

        if context is not None and context.package:
            found = self.lookup.find(f"{context.package}.{name}")
            if found is not None:
                return found
            found = self.lookup.find(f"{context.qualified_name}${name}")
            if found is not None:
                return found

        candidates = self.lookup.find_by_simple_name(name)
        if len(candidates) == 1:
            return candidates[0]
        if len(candidates) > 1:
            logger.debug(
                f"Simple name {name} is ambiguous ({len(candidates)} declarations); not resolved"
            )
        return None


class ImplementationResolver:
    """
    Finds the concrete implementors of an interface or abstract type.

    Merges two strategies:

    - the lookup's inheritance index (``subtypes``)
    - a scan of declared supertypes/interfaces across all declarations

    Mapper interfaces (mapping-resource namespaces or mapper-marked) are
    proxied at runtime and never resolved to implementors.
    """

    def __init__(
        self,
        lookup: SymbolLookup,
        resources: ResourceIndex,
        settings: ScanSettings,
        names: Optional[TypeNameResolver] = None,
    ):
        self.lookup = lookup
        self.resources = resources
        self.settings = settings
        self.names = names or TypeNameResolver(lookup, settings)

    def is_proxied(self, type_ref: TypeRef) -> bool:
        return (
            self.resources.has_mapper_resource(type_ref.qualified_name)
            or type_ref.has_marker(self.settings.mapper_markers)
        )

    def resolve(self, type_ref: TypeRef) -> List[TypeRef]:
        if not type_ref.is_polymorphic or self.is_proxied(type_ref):
            return []

        found: Dict[str, TypeRef] = {}
        for sub in self.lookup.subtypes(type_ref.qualified_name):
            found.setdefault(sub.qualified_name, sub)

        for candidate in self.lookup.all_types():
            if candidate.qualified_name in found or candidate == type_ref:
                continue
            for declared in candidate.declared_supertypes():
                resolved = self.names.resolve(declared.name, candidate)
                if resolved is not None and resolved == type_ref:
                    found[candidate.qualified_name] = candidate
                    break

        return sorted(
            (t for t in found.values() if not t.is_interface),
            key=lambda t: t.qualified_name,
        )
