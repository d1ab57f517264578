"""
Resource index - mapping resources and data-source configuration.

Built once per scan by walking the project's resource roots; read-only
afterwards. Unparseable files are recorded as ``ResourceParseFailure``
and skipped.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..faults import FaultRecord, ResourceParseFailure
from .parsers import (
    DataSourceConfig,
    mapper_namespace,
    parse_properties,
    parse_spring_xml,
    parse_yaml,
    profile_of,
    read_properties,
    read_xml_root,
    read_yaml,
)
from .paths import ResourcePathMatcher

logger = logging.getLogger("litewire.resources")


@dataclass(frozen=True)
class MapperResource:
    """A mapping resource bound to an interface by its namespace."""

    namespace: str
    classpath: str
    path: Optional[Path] = None

    @property
    def location(self) -> str:
        return f"classpath:{self.classpath}"


class MapperLocationSet:
    """
    Ordered ``(pattern, data-source name)`` pairs.

    ``owner_of`` returns the first data source whose pattern matches a
    mapping resource location.
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()):
        self.pairs: List[Tuple[str, str]] = list(pairs)
        self._matchers = [(ResourcePathMatcher([p]), name) for p, name in self.pairs]

    @classmethod
    def from_datasources(cls, datasources: Sequence[DataSourceConfig]) -> "MapperLocationSet":
        return cls(
            (pattern, ds.name)
            for ds in datasources
            for pattern in ds.mapper_locations
        )

    def owner_of(self, classpath: str) -> Optional[str]:
        for matcher, name in self._matchers:
            if matcher.matches(classpath):
                return name
        return None

    def __iter__(self):
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)


class ResourceIndex:
    """
    Index of mapping resources and configured data sources.

    Args:
        mappers: Mapping resources (first namespace wins)
        datasources: Data-source configs in configuration order
        failures: Recorded parse failures
    """

    def __init__(
        self,
        mappers: Iterable[MapperResource] = (),
        datasources: Iterable[DataSourceConfig] = (),
        failures: Iterable[FaultRecord] = (),
    ):
        self._mappers: Dict[str, MapperResource] = {}
        for resource in mappers:
            existing = self._mappers.get(resource.namespace)
            if existing is not None:
                logger.warning(
                    f"Namespace {resource.namespace} mapped by both "
                    f"{existing.classpath} and {resource.classpath}; keeping first"
                )
                continue
            self._mappers[resource.namespace] = resource

        self._datasources: Dict[str, DataSourceConfig] = {}
        for ds in datasources:
            if ds.name in self._datasources:
                self._datasources[ds.name].merge(ds)
            else:
                self._datasources[ds.name] = ds

        self.failures: List[FaultRecord] = list(failures)

    @classmethod
    def empty(cls) -> "ResourceIndex":
        return cls()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def mapper_for(self, qualified_name: str) -> Optional[MapperResource]:
        return self._mappers.get(qualified_name)

    def has_mapper_resource(self, qualified_name: str) -> bool:
        return qualified_name in self._mappers

    @property
    def mapper_resources(self) -> List[MapperResource]:
        return list(self._mappers.values())

    @property
    def datasources(self) -> List[DataSourceConfig]:
        return list(self._datasources.values())

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_roots(cls, roots: Iterable[str | Path]) -> "ResourceIndex":
        """
        Walk resource roots and index what they declare.

        Paths are made classpath-relative to the root they were found in.
        Files are visited directory by directory in sorted order, with a
        base ``application.*`` file ahead of its ``application-<profile>.*``
        siblings.
        """
        mappers: List[MapperResource] = []
        datasources: List[DataSourceConfig] = []
        failures: List[FaultRecord] = []

        for root in roots:
            root = Path(root)
            if not root.is_dir():
                logger.warning(f"Resource root {root} is not a directory; skipped")
                continue
            for path in sorted((p for p in root.rglob("*") if p.is_file()), key=_walk_order):
                classpath = path.relative_to(root).as_posix()
                try:
                    found_mapper, found_ds = _index_file(path, classpath)
                except ResourceParseFailure as fault:
                    logger.warning(str(fault))
                    failures.append(FaultRecord(fault, subject=classpath))
                    continue
                if found_mapper is not None:
                    mappers.append(found_mapper)
                datasources.extend(found_ds)

        index = cls(mappers, datasources, failures)
        logger.info(
            f"Indexed {len(index.mapper_resources)} mapping resources and "
            f"{len(index.datasources)} data sources ({len(failures)} unreadable files)"
        )
        return index


def _index_file(
    path: Path, classpath: str
) -> Tuple[Optional[MapperResource], List[DataSourceConfig]]:
    name = path.name
    suffix = path.suffix.lower()

    if suffix == ".xml":
        root = read_xml_root(path)
        namespace = mapper_namespace(root)
        if namespace is not None:
            return MapperResource(namespace, classpath, path), []
        return None, parse_spring_xml(root, classpath)

    if not name.startswith("application"):
        return None, []

    if suffix == ".properties":
        return None, parse_properties(read_properties(path), profile_of(path))
    if suffix in (".yml", ".yaml"):
        return None, parse_yaml(read_yaml(path), profile_of(path))
    return None, []


def _walk_order(path: Path) -> Tuple[str, bool, str]:
    return path.parent.as_posix(), path.name.startswith("application-"), path.name
