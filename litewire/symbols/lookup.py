"""
Symbol lookup - the read-only view of a project's type declarations.

``SymbolLookup`` is the contract the scan core consumes. ``SymbolIndex``
is the bundled implementation: an immutable snapshot built from a list of
TypeRefs (or a YAML/JSON symbol dump), safe to share between worker
threads without locking.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

import yaml

from .types import (
    FieldDecl,
    Marker,
    MethodDecl,
    TypeRef,
    TypeSyntaxError,
    parse_type,
    simple_name_of,
)

logger = logging.getLogger("litewire.symbols")


class SymbolLookup(Protocol):
    """Contract for the project-wide symbol index."""

    def find(self, qualified_name: str) -> Optional[TypeRef]:
        """Declaration for a qualified name, or None."""
        ...

    def find_by_simple_name(self, simple_name: str) -> List[TypeRef]:
        """All declarations sharing a simple name."""
        ...

    def subtypes(self, qualified_name: str) -> List[TypeRef]:
        """Transitive subtypes/implementors from the inheritance index."""
        ...

    def all_types(self) -> Iterable[TypeRef]:
        """Every declaration in the snapshot."""
        ...


class SymbolIndexError(ValueError):
    """Raised when a symbol dump is malformed."""


class SymbolIndex:
    """
    Immutable in-memory symbol index.

    Two inheritance views are kept apart on purpose:

    - the inheritance index (``subtypes``) built from declarations plus
      any precomputed ``inheritors`` hints (types from compiled
      dependencies whose declarations are not in the snapshot),
    - the declarations themselves, which ``all_types`` exposes for
      declared-implements scans.

    Args:
        types: Type declarations
        inheritors: Optional extra ``supertype -> [subtype names]`` edges
    """

    def __init__(
        self,
        types: Iterable[TypeRef],
        inheritors: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._types: Dict[str, TypeRef] = {}
        self._by_simple: Dict[str, List[TypeRef]] = defaultdict(list)
        self._children: Dict[str, List[str]] = defaultdict(list)

        for type_ref in types:
            if type_ref.qualified_name in self._types:
                logger.warning(f"Duplicate declaration for {type_ref.qualified_name}; keeping first")
                continue
            self._types[type_ref.qualified_name] = type_ref
            self._by_simple[type_ref.simple_name].append(type_ref)

        for type_ref in self._types.values():
            for parent in type_ref.declared_supertypes():
                self._add_edge(self._qualify(parent.name, type_ref), type_ref.qualified_name)

        for parent, children in (inheritors or {}).items():
            for child in children:
                self._add_edge(parent, child)

    def _add_edge(self, parent: str, child: str) -> None:
        if child not in self._children[parent]:
            self._children[parent].append(child)

    def _qualify(self, name: str, context: TypeRef) -> str:
        """Best-effort qualification of a supertype name while indexing."""
        if "." in name or name in self._types:
            return name
        same_package = f"{context.package}.{name}" if context.package else name
        if same_package in self._types:
            return same_package
        candidates = self._by_simple.get(name, [])
        if len(candidates) == 1:
            return candidates[0].qualified_name
        return name

    # ------------------------------------------------------------------
    # SymbolLookup
    # ------------------------------------------------------------------

    def find(self, qualified_name: str) -> Optional[TypeRef]:
        return self._types.get(qualified_name)

    def find_by_simple_name(self, simple_name: str) -> List[TypeRef]:
        return list(self._by_simple.get(simple_name, ()))

    def subtypes(self, qualified_name: str) -> List[TypeRef]:
        result: List[TypeRef] = []
        seen = {qualified_name}
        stack = list(reversed(self._children.get(qualified_name, [])))
        while stack:
            name = stack.pop()
            if name in seen:
                continue
            seen.add(name)
            declared = self._types.get(name)
            if declared is not None:
                result.append(declared)
            stack.extend(reversed(self._children.get(name, [])))
        return result

    def all_types(self) -> Iterable[TypeRef]:
        return self._types.values()

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._types

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: str | Path) -> "SymbolIndex":
        """
        Load a YAML or JSON symbol dump.

        Expected layout::

            types:
              - name: com.acme.OrderService
                kind: class            # class | interface | abstract
                markers: [org.springframework.stereotype.Service]
                extends: com.acme.BaseService
                implements: [com.acme.Api]
                fields:
                  - {name: mapper, type: com.acme.OrderMapper, markers: [Autowired]}
                methods:
                  - {name: find, returns: com.acme.Order, params: [long], markers: []}
                  - {name: <init>, constructor: true, params: [com.acme.OrderMapper]}
            inheritors:
              com.acme.Api: [com.vendor.ApiImpl]
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {}, source=str(path))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: str = "<dict>") -> "SymbolIndex":
        if not isinstance(data, Mapping):
            raise SymbolIndexError(f"{source}: top level must be a mapping")
        types = []
        for i, entry in enumerate(data.get("types") or []):
            if not isinstance(entry, Mapping):
                raise SymbolIndexError(f"{source}: type entry #{i} must be a mapping, got {entry!r}")
            try:
                types.append(_type_from_dict(entry))
            except (AttributeError, KeyError, TypeError, TypeSyntaxError) as e:
                raise SymbolIndexError(f"{source}: invalid type entry #{i}: {e}") from e
        inheritors = data.get("inheritors") or {}
        logger.debug(f"Loaded {len(types)} type declarations from {source}")
        return cls(types, inheritors=inheritors)


def _markers_from(raw: Any) -> tuple[Marker, ...]:
    markers = []
    for item in raw or []:
        if isinstance(item, str):
            markers.append(Marker(item.lstrip("@")))
        else:
            markers.append(Marker(item["name"].lstrip("@"), dict(item.get("attributes") or {})))
    return tuple(markers)


def _type_from_dict(entry: Mapping[str, Any]) -> TypeRef:
    kind = entry.get("kind", "class")
    if kind not in ("class", "interface", "abstract", "enum"):
        raise TypeError(f"unknown kind '{kind}'")

    fields = tuple(
        FieldDecl(
            name=f["name"],
            type=parse_type(f["type"]),
            markers=_markers_from(f.get("markers")),
        )
        for f in entry.get("fields") or []
    )
    methods = tuple(
        MethodDecl(
            name=m["name"],
            return_type=parse_type(m["returns"]) if m.get("returns") else None,
            parameter_types=tuple(parse_type(p) for p in m.get("params") or []),
            markers=_markers_from(m.get("markers")),
            constructor=bool(m.get("constructor", False)),
        )
        for m in entry.get("methods") or []
    )
    extends = entry.get("extends")
    return TypeRef(
        qualified_name=entry["name"],
        is_interface=kind == "interface",
        is_abstract=kind == "abstract",
        markers=_markers_from(entry.get("markers")),
        fields=fields,
        methods=methods,
        supertype=parse_type(extends) if extends else None,
        interfaces=tuple(parse_type(i) for i in entry.get("implements") or []),
    )


__all__ = [
    "SymbolLookup",
    "SymbolIndex",
    "SymbolIndexError",
    "simple_name_of",
]
