"""
Wiring descriptor - ordered bean definitions rendered as a Spring
``beans`` document.

Fragments are plain data (``BeanDefinition``, ``ImportDefinition``) until
rendered through the Jinja2 templates bundled with this package.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

logger = logging.getLogger("litewire.wiring")

_env: Optional[Environment] = None


def template_environment() -> Environment:
    """Shared Jinja2 environment for the bundled templates."""
    global _env
    if _env is None:
        _env = Environment(
            loader=PackageLoader("litewire.wiring", "templates"),
            autoescape=select_autoescape(
                enabled_extensions=("xml", "xml.j2"),
                default_for_string=True,
                default=False,
            ),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
    return _env


# ============================================================================
# Fragments
# ============================================================================

@dataclass(frozen=True)
class PropertyValue:
    """One ``<property>``: exactly one of ``ref``, ``value`` or ``values``."""

    name: str
    ref: Optional[str] = None
    value: Optional[str] = None
    values: Optional[Tuple[str, ...]] = None


@dataclass
class BeanDefinition:
    """A ``<bean>`` element."""

    id: str
    class_name: Optional[str] = None
    factory_bean: Optional[str] = None
    factory_method: Optional[str] = None
    constructor_args: List[str] = field(default_factory=list)
    properties: List[PropertyValue] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.constructor_args and not self.properties

    def property_ref(self, name: str, ref: str) -> "BeanDefinition":
        self.properties.append(PropertyValue(name, ref=ref))
        return self

    def property_value(self, name: str, value: str) -> "BeanDefinition":
        self.properties.append(PropertyValue(name, value=value))
        return self

    def property_list(self, name: str, values: List[str]) -> "BeanDefinition":
        self.properties.append(PropertyValue(name, values=tuple(values)))
        return self


@dataclass(frozen=True)
class ImportDefinition:
    """An ``<import resource>`` element."""

    resource: str


Fragment = Union[BeanDefinition, ImportDefinition]


# ============================================================================
# Descriptor
# ============================================================================

class WiringDescriptor:
    """
    Ordered ``id -> fragment`` mapping.

    Import fragments are keyed by their resource location. The first
    fragment added under an id wins.
    """

    def __init__(self):
        self._fragments: Dict[str, Fragment] = {}

    def add(self, fragment: Fragment) -> bool:
        key = fragment.resource if isinstance(fragment, ImportDefinition) else fragment.id
        if key in self._fragments:
            logger.warning(f"Descriptor already holds '{key}'; later definition dropped")
            return False
        self._fragments[key] = fragment
        return True

    def get(self, key: str) -> Optional[Fragment]:
        return self._fragments.get(key)

    @property
    def ids(self) -> List[str]:
        return list(self._fragments)

    def items(self) -> Iterator[Tuple[str, Fragment]]:
        return iter(list(self._fragments.items()))

    def __contains__(self, key: str) -> bool:
        return key in self._fragments

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fragments))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def fragment(self, key: str) -> str:
        """Render one fragment as XML."""
        return str(self._render_fragment(self._fragments[key])).rstrip("\n")

    def fragments(self) -> Dict[str, str]:
        """Ordered ``id -> XML fragment``."""
        return {key: self.fragment(key) for key in self._fragments}

    def render(self) -> str:
        """Render the complete ``beans`` document."""
        env = template_environment()
        rendered = [self._render_fragment(f).rstrip("\n") for f in self._fragments.values()]
        return env.get_template("beans.xml.j2").render(fragments=rendered)

    @staticmethod
    def _render_fragment(fragment: Fragment) -> Markup:
        macros = template_environment().get_template("fragments.xml.j2").module
        if isinstance(fragment, ImportDefinition):
            return macros.import_resource(fragment)
        return macros.bean(fragment)
