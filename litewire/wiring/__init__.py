"""
LiteWire wiring - descriptor synthesis, rendering and scaffold output.
"""

from .descriptor import (
    BeanDefinition,
    Fragment,
    ImportDefinition,
    PropertyValue,
    WiringDescriptor,
    template_environment,
)
from .synthesizer import (
    ConfigSynthesizer,
    DEFAULT_MAPPER_LOCATION,
    DRIVER_MANAGER_DATASOURCE,
    MAPPER_FACTORY_BEAN,
    SESSION_FACTORY_BEAN,
)
from .writer import ScaffoldPaths, ScaffoldWriter

__all__ = [
    "BeanDefinition",
    "Fragment",
    "ImportDefinition",
    "PropertyValue",
    "WiringDescriptor",
    "template_environment",
    "ConfigSynthesizer",
    "DEFAULT_MAPPER_LOCATION",
    "DRIVER_MANAGER_DATASOURCE",
    "MAPPER_FACTORY_BEAN",
    "SESSION_FACTORY_BEAN",
    "ScaffoldPaths",
    "ScaffoldWriter",
]
