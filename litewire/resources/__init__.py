"""
LiteWire resources - package reduction, location matching and the
resource index (mapping resources and data-source configuration).
"""

from .packages import PackagePrefixReducer, reduce
from .paths import ResourcePathMatcher, compile_pattern, match, normalize_path
from .parsers import DataSourceConfig, DEFAULT_NAME
from .index import MapperLocationSet, MapperResource, ResourceIndex

__all__ = [
    "PackagePrefixReducer",
    "reduce",
    "ResourcePathMatcher",
    "compile_pattern",
    "match",
    "normalize_path",
    "DataSourceConfig",
    "DEFAULT_NAME",
    "MapperLocationSet",
    "MapperResource",
    "ResourceIndex",
]
