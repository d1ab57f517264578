"""
LiteWire symbols - declared types and the symbol lookup contract.
"""

from .types import (
    PRIMITIVES,
    TypeUse,
    TypeSyntaxError,
    parse_type,
    Marker,
    FieldDecl,
    MethodDecl,
    TypeRef,
    marker_matches,
    simple_name_of,
    package_of,
)

from .lookup import (
    SymbolLookup,
    SymbolIndex,
    SymbolIndexError,
)

__all__ = [
    "PRIMITIVES",
    "TypeUse",
    "TypeSyntaxError",
    "parse_type",
    "Marker",
    "FieldDecl",
    "MethodDecl",
    "TypeRef",
    "marker_matches",
    "simple_name_of",
    "package_of",
    "SymbolLookup",
    "SymbolIndex",
    "SymbolIndexError",
]
