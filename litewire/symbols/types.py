"""
Symbol types - immutable views of declared types.

A TypeRef is a snapshot of one type declaration as the symbol index saw
it: name, interface/abstract flags, markers (annotations), fields, methods,
supertype and interfaces. Declared types of fields, parameters and returns
are kept as parsed ``TypeUse`` expressions so generic arguments, arrays and
wildcard bounds can be unwrapped during traversal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple


PRIMITIVES = frozenset({
    "boolean", "byte", "char", "short", "int", "long", "float", "double", "void",
})


# ============================================================================
# Type expressions
# ============================================================================

@dataclass(frozen=True)
class TypeUse:
    """
    A declared type expression such as ``Map<String, List<? extends Foo>>[]``.

    Attributes:
        name: Raw type name ("?" for wildcards)
        args: Generic arguments
        array_depth: Number of trailing ``[]``
        wildcard: None, "?" (unbounded), "extends" or "super"
        bound: Wildcard bound
    """

    name: str
    args: Tuple["TypeUse", ...] = ()
    array_depth: int = 0
    wildcard: Optional[str] = None
    bound: Optional["TypeUse"] = None

    @property
    def is_wildcard(self) -> bool:
        return self.wildcard is not None

    @property
    def is_primitive(self) -> bool:
        return self.name in PRIMITIVES

    def referenced_names(self) -> Iterator[str]:
        """
        Yield every type name this expression references.

        Arrays are reduced to their component, wildcards to their bound,
        and generic types yield their raw name followed by each argument,
        outermost layer first.
        """
        if self.is_wildcard:
            if self.bound is not None:
                yield from self.bound.referenced_names()
            return
        if not self.is_primitive:
            yield self.name
        for arg in self.args:
            yield from arg.referenced_names()

    def __str__(self) -> str:
        if self.is_wildcard:
            if self.bound is None:
                return "?"
            return f"? {self.wildcard} {self.bound}"
        text = self.name
        if self.args:
            text += "<" + ", ".join(str(a) for a in self.args) + ">"
        return text + "[]" * self.array_depth


class TypeSyntaxError(ValueError):
    """Raised when a type expression cannot be parsed."""


class _TypeParser:
    """Recursive-descent parser for declared type expressions."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> TypeUse:
        result = self._type()
        self._skip_ws()
        if self.pos != len(self.text):
            raise TypeSyntaxError(
                f"Unexpected '{self.text[self.pos:]}' in type expression '{self.text}'"
            )
        return result

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _peek(self) -> str:
        self._skip_ws()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            raise TypeSyntaxError(f"Expected '{char}' at {self.pos} in '{self.text}'")
        self.pos += 1

    def _identifier(self) -> str:
        self._skip_ws()
        start = self.pos
        while self.pos < len(self.text) and (
            self.text[self.pos].isalnum() or self.text[self.pos] in "._$"
        ):
            self.pos += 1
        if start == self.pos:
            raise TypeSyntaxError(f"Expected type name at {start} in '{self.text}'")
        return self.text[start:self.pos]

    def _type(self) -> TypeUse:
        if self._peek() == "?":
            self.pos += 1
            self._skip_ws()
            for keyword in ("extends", "super"):
                if self.text.startswith(keyword, self.pos):
                    self.pos += len(keyword)
                    return TypeUse(name="?", wildcard=keyword, bound=self._type())
            return TypeUse(name="?", wildcard="?")

        name = self._identifier()
        args: list[TypeUse] = []
        if self._peek() == "<":
            self.pos += 1
            if self._peek() != ">":
                args.append(self._type())
                while self._peek() == ",":
                    self.pos += 1
                    args.append(self._type())
            self._expect(">")

        depth = 0
        while self._peek() == "[":
            self.pos += 1
            self._expect("]")
            depth += 1
        # Varargs are arrays.
        self._skip_ws()
        if self.text.startswith("...", self.pos):
            self.pos += 3
            depth += 1
        return TypeUse(name=name, args=tuple(args), array_depth=depth)


def parse_type(text: str) -> TypeUse:
    """
    Parse a declared type expression.

    Args:
        text: e.g. ``java.util.List<? extends com.acme.Foo>[]``

    Returns:
        Parsed TypeUse

    Raises:
        TypeSyntaxError: If the expression is malformed
    """
    return _TypeParser(text.strip()).parse()


# ============================================================================
# Declarations
# ============================================================================

def simple_name_of(qualified_name: str) -> str:
    """Last segment of a dotted (or ``$``-nested) name."""
    return qualified_name.rsplit(".", 1)[-1].rsplit("$", 1)[-1]


def package_of(qualified_name: str) -> str:
    """Package part of a qualified name; empty for the default package."""
    head, _, _ = qualified_name.rpartition(".")
    return head


def marker_matches(marker_name: str, wanted: str) -> bool:
    """
    True if a declared marker denotes the wanted qualified marker.

    Unqualified markers (as written in source without imports resolved)
    match by simple name.
    """
    if marker_name == wanted:
        return True
    return "." not in marker_name and simple_name_of(wanted) == marker_name


@dataclass(frozen=True)
class Marker:
    """A declared annotation with its attribute values."""

    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def matches(self, wanted: str) -> bool:
        return marker_matches(self.name, wanted)

    def __str__(self) -> str:
        return f"@{self.name}"


def _any_marker(markers: Iterable[Marker], wanted: Iterable[str]) -> Optional[Marker]:
    wanted = tuple(wanted)
    for marker in markers:
        for name in wanted:
            if marker.matches(name):
                return marker
    return None


@dataclass(frozen=True)
class FieldDecl:
    """Declared field."""

    name: str
    type: TypeUse
    markers: Tuple[Marker, ...] = ()

    def find_marker(self, wanted: Iterable[str]) -> Optional[Marker]:
        return _any_marker(self.markers, wanted)


@dataclass(frozen=True)
class MethodDecl:
    """Declared method or constructor."""

    name: str
    return_type: Optional[TypeUse] = None
    parameter_types: Tuple[TypeUse, ...] = ()
    markers: Tuple[Marker, ...] = ()
    constructor: bool = False

    def find_marker(self, wanted: Iterable[str]) -> Optional[Marker]:
        return _any_marker(self.markers, wanted)


@dataclass(frozen=True, eq=False)
class TypeRef:
    """
    Opaque handle to a declared type.

    Equality and hashing use the qualified name only: the symbol index
    holds one declaration per name.
    """

    qualified_name: str
    is_interface: bool = False
    is_abstract: bool = False
    markers: Tuple[Marker, ...] = ()
    fields: Tuple[FieldDecl, ...] = ()
    methods: Tuple[MethodDecl, ...] = ()
    supertype: Optional[TypeUse] = None
    interfaces: Tuple[TypeUse, ...] = ()

    @property
    def simple_name(self) -> str:
        return simple_name_of(self.qualified_name)

    @property
    def package(self) -> str:
        return package_of(self.qualified_name)

    @property
    def is_polymorphic(self) -> bool:
        """Interfaces and abstract classes need implementors to be wired."""
        return self.is_interface or self.is_abstract

    def find_marker(self, wanted: Iterable[str]) -> Optional[Marker]:
        return _any_marker(self.markers, wanted)

    def has_marker(self, wanted: Iterable[str]) -> bool:
        return self.find_marker(wanted) is not None

    def constructors(self) -> Tuple[MethodDecl, ...]:
        return tuple(m for m in self.methods if m.constructor)

    def find_method(self, name: str) -> Optional[MethodDecl]:
        for method in self.methods:
            if method.name == name and not method.constructor:
                return method
        return None

    def declared_supertypes(self) -> Tuple[TypeUse, ...]:
        """Supertype first, then interfaces, in declaration order."""
        if self.supertype is None:
            return self.interfaces
        return (self.supertype, *self.interfaces)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, TypeRef):
            return self.qualified_name == other.qualified_name
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.qualified_name)

    def __repr__(self) -> str:
        kind = "interface" if self.is_interface else ("abstract" if self.is_abstract else "class")
        return f"TypeRef({self.qualified_name!r}, {kind})"
