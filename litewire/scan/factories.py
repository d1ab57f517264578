"""
Factory binding index - which factory type provides which type.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from ..config import ScanSettings
from ..symbols import SymbolLookup, TypeRef
from .resolver import TypeNameResolver

logger = logging.getLogger("litewire.scan.factories")


@dataclass(frozen=True)
class FactoryBinding:
    """A provided type and the factory method producing it."""

    provided_type: str
    factory_type: TypeRef
    method_name: str


class FactoryIndex:
    """
    Read-only ``provided qualified name -> FactoryBinding`` map.

    Built once per scan from every factory-marked declaration: each
    provider-marked method with a resolvable return type contributes a
    binding. The first binding for a provided type wins.
    """

    def __init__(self, bindings: Dict[str, FactoryBinding]):
        self._bindings = dict(bindings)

    @classmethod
    def build(
        cls,
        lookup: SymbolLookup,
        settings: ScanSettings,
        names: Optional[TypeNameResolver] = None,
    ) -> "FactoryIndex":
        names = names or TypeNameResolver(lookup, settings)
        bindings: Dict[str, FactoryBinding] = {}

        for factory in lookup.all_types():
            if not factory.has_marker(settings.factory_markers):
                continue
            for method in factory.methods:
                if method.constructor or method.return_type is None:
                    continue
                if method.find_marker(settings.provider_markers) is None:
                    continue
                provided = names.resolve(method.return_type.name, factory)
                if provided is None:
                    continue
                existing = bindings.get(provided.qualified_name)
                if existing is not None:
                    logger.debug(
                        f"{provided.qualified_name} also provided by "
                        f"{factory.qualified_name}#{method.name}; keeping "
                        f"{existing.factory_type.qualified_name}#{existing.method_name}"
                    )
                    continue
                bindings[provided.qualified_name] = FactoryBinding(
                    provided.qualified_name, factory, method.name
                )

        logger.debug(f"Factory index: {len(bindings)} provided types")
        return cls(bindings)

    def binding_for(self, qualified_name: str) -> Optional[FactoryBinding]:
        return self._bindings.get(qualified_name)

    def provides(self, qualified_name: str) -> bool:
        return qualified_name in self._bindings

    def __iter__(self) -> Iterator[FactoryBinding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)
