"""
Bean kinds and registry records.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..symbols import TypeRef


class BeanKind(str, Enum):
    """How a discovered type participates in the wiring."""

    MANAGED_COMPONENT = "managed_component"
    FACTORY_PROVIDED = "factory_provided"
    MAPPER_WITH_GENERATED_SQL = "mapper_with_generated_sql"
    MAPPER_BACKED_BY_RESOURCE = "mapper_backed_by_resource"
    PLAIN = "plain"

    @property
    def is_mapper(self) -> bool:
        return self in (BeanKind.MAPPER_WITH_GENERATED_SQL, BeanKind.MAPPER_BACKED_BY_RESOURCE)


class Origin(str, Enum):
    """Where a bean definition came from."""

    DECLARED_RESOURCE = "declared_resource"
    ANNOTATION_MARKER = "annotation_marker"
    FACTORY_METHOD = "factory_method"


def origin_for(kind: BeanKind) -> Origin:
    if kind is BeanKind.FACTORY_PROVIDED:
        return Origin.FACTORY_METHOD
    if kind.is_mapper:
        return Origin.DECLARED_RESOURCE
    return Origin.ANNOTATION_MARKER


def decapitalize(name: str) -> str:
    """
    Bean-id convention: lower the first character unless the first two
    characters are both upper case (``URLParser`` stays ``URLParser``).
    """
    if not name:
        return name
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[0].lower() + name[1:]


@dataclass(frozen=True)
class BeanRecord:
    """
    A registered bean.

    Attributes:
        id: Bean id (unique within a registry)
        type_ref: The discovered type
        kind: Classified kind
        origin: How the definition is sourced
        target_class: Class written to the descriptor
        rule: Name of the classifier rule that matched
    """

    id: str
    type_ref: TypeRef
    kind: BeanKind
    origin: Origin
    target_class: Optional[str] = None
    rule: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return self.type_ref.qualified_name

    @property
    def class_name(self) -> str:
        return self.target_class or self.type_ref.qualified_name
