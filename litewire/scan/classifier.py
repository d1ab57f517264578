"""
Classifier chain - decides the BeanKind of a discovered type.

Rules are evaluated in a fixed order and the first match wins:

1. factory_provided    returned by a provider method on a factory type
2. resource_mapper     interface bound to a mapping resource namespace
3. annotation_marker   managed-component, factory or generated-implementation marker
4. mapper_convention   interface named like a mapper or mapper-marked
5. plain               everything else

Classification is pure: it reads the type, the resource index and the
factory index and never touches the registry.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..config import ScanSettings
from ..resources import ResourceIndex
from ..symbols import TypeRef
from .factories import FactoryIndex
from .kinds import BeanKind, decapitalize


@dataclass(frozen=True)
class Classification:
    """
    Outcome of running the chain on one type.

    Attributes:
        kind: Winning kind
        rule: Winning rule name
        id_override: Bean id replacing the decapitalized simple name
        target_override: Class replacing the qualified name in the descriptor
        shadowed: Later rules that matched with a different kind
    """

    kind: BeanKind
    rule: str
    id_override: Optional[str] = None
    target_override: Optional[str] = None
    shadowed: Tuple[str, ...] = ()

    @property
    def is_ambiguous(self) -> bool:
        return bool(self.shadowed)


_Rule = Callable[[TypeRef], Optional[Classification]]


class Classifier:
    """
    Ordered rule table over declarative marker sets.

    Args:
        settings: Marker sets and mapper suffixes
        resources: Mapping-resource index
        factories: Factory binding index
    """

    def __init__(
        self,
        settings: ScanSettings,
        resources: Optional[ResourceIndex] = None,
        factories: Optional[FactoryIndex] = None,
    ):
        self.settings = settings
        self.resources = resources or ResourceIndex.empty()
        self.factories = factories or FactoryIndex({})
        self.rules: List[Tuple[str, _Rule]] = [
            ("factory_provided", self._factory_provided),
            ("resource_mapper", self._resource_mapper),
            ("annotation_marker", self._annotation_marker),
            ("mapper_convention", self._mapper_convention),
        ]

    def classify(self, type_ref: TypeRef) -> BeanKind:
        return self.classify_detailed(type_ref).kind

    def classify_detailed(self, type_ref: TypeRef) -> Classification:
        winner: Optional[Classification] = None
        shadowed: List[str] = []
        for name, rule in self.rules:
            result = rule(type_ref)
            if result is None:
                continue
            if winner is None:
                winner = result
            elif result.kind is not winner.kind:
                shadowed.append(name)

        if winner is None:
            return Classification(BeanKind.PLAIN, "plain")
        if shadowed:
            return Classification(
                winner.kind,
                winner.rule,
                winner.id_override,
                winner.target_override,
                tuple(shadowed),
            )
        return winner

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _factory_provided(self, type_ref: TypeRef) -> Optional[Classification]:
        if self.factories.provides(type_ref.qualified_name):
            return Classification(BeanKind.FACTORY_PROVIDED, "factory_provided")
        return None

    def _resource_mapper(self, type_ref: TypeRef) -> Optional[Classification]:
        if type_ref.is_interface and self.resources.has_mapper_resource(type_ref.qualified_name):
            return Classification(BeanKind.MAPPER_BACKED_BY_RESOURCE, "resource_mapper")
        return None

    def _annotation_marker(self, type_ref: TypeRef) -> Optional[Classification]:
        # Factory-marked types are managed components
        if type_ref.has_marker(self.settings.managed_markers) or type_ref.has_marker(
            self.settings.factory_markers
        ):
            return Classification(BeanKind.MANAGED_COMPONENT, "annotation_marker")

        for marker_name, required in self.settings.generated_impl_markers.items():
            marker = type_ref.find_marker([marker_name])
            if marker is None:
                continue
            if all(str(marker.attributes.get(k)) == str(v) for k, v in required.items()):
                return Classification(
                    BeanKind.MANAGED_COMPONENT,
                    "annotation_marker",
                    id_override=decapitalize(type_ref.simple_name) + "Impl",
                    target_override=type_ref.qualified_name + "Impl",
                )
        return None

    def _mapper_convention(self, type_ref: TypeRef) -> Optional[Classification]:
        if not type_ref.is_interface:
            return None
        by_name = type_ref.simple_name.endswith(tuple(self.settings.mapper_suffixes))
        if not by_name and not type_ref.has_marker(self.settings.mapper_markers):
            return None
        generates_sql = any(
            m.find_marker(self.settings.generated_sql_markers) is not None
            for m in type_ref.methods
        )
        if generates_sql:
            return Classification(BeanKind.MAPPER_WITH_GENERATED_SQL, "mapper_convention")
        return Classification(BeanKind.MAPPER_BACKED_BY_RESOURCE, "mapper_convention")
