"""
Resource file parsers.

Extracts the two facts the synthesizer needs from a project's resources:

- mapping resources: XML files rooted at ``<mapper namespace="...">``
- data-source configuration, from any of
    * ``application*.properties``
    * ``application*.yml`` / ``application*.yaml``
    * Spring XML (``SqlSessionFactoryBean`` / ``MapperScannerConfigurer`` /
      ``DriverManagerDataSource`` beans)

Every parser raises ``ResourceParseFailure`` on unreadable input; the
index records the fault and skips the file.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..faults import ResourceParseFailure

logger = logging.getLogger("litewire.resources")

DEFAULT_NAME = "default"


@dataclass
class DataSourceConfig:
    """
    One configured data source and its session factory.

    Attributes:
        name: "default" or the configured data-source name
        datasource_id: Data-source bean id
        session_factory_id: Session-factory bean id
        driver/url/username/password: Connection properties (may be None)
        mapper_locations: Mapper-location glob patterns
        base_packages: Mapper interface base packages
        imported_from: Classpath location of the Spring XML declaring it
    """

    name: str
    datasource_id: str
    session_factory_id: str
    driver: Optional[str] = None
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    mapper_locations: List[str] = field(default_factory=list)
    base_packages: List[str] = field(default_factory=list)
    imported_from: Optional[str] = None

    @property
    def imported(self) -> bool:
        return self.imported_from is not None

    @classmethod
    def named(cls, name: str, **kwargs: Any) -> "DataSourceConfig":
        """Build a config with conventional bean ids for ``name``."""
        if name == DEFAULT_NAME:
            return cls(name, "dataSource", "sqlSessionFactory", **kwargs)
        return cls(name, f"{name}DataSource", f"{name}SqlSessionFactory", **kwargs)

    def owns_package(self, qualified_name: str) -> bool:
        return any(
            qualified_name == pkg or qualified_name.startswith(pkg.rstrip(".") + ".")
            for pkg in self.base_packages
        )

    def merge(self, other: "DataSourceConfig") -> None:
        """Fill unset connection properties and append new patterns."""
        for attr in ("driver", "url", "username", "password", "imported_from"):
            if getattr(self, attr) is None:
                setattr(self, attr, getattr(other, attr))
        for location in other.mapper_locations:
            if location not in self.mapper_locations:
                self.mapper_locations.append(location)
        for pkg in other.base_packages:
            if pkg not in self.base_packages:
                self.base_packages.append(pkg)


def _split_locations(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = str(value).split(",")
    return [item.strip() for item in items if item and item.strip()]


def profile_of(path: Path) -> str:
    """``application-dev.yml`` -> "dev"; ``application.yml`` -> "default"."""
    stem = path.stem
    if stem.startswith("application-") and len(stem) > len("application-"):
        return stem[len("application-"):]
    return DEFAULT_NAME


# ============================================================================
# XML
# ============================================================================

def _local(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def read_xml_root(path: Path) -> ET.Element:
    try:
        return ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise ResourceParseFailure(str(path), str(e)) from e


def mapper_namespace(root: ET.Element) -> Optional[str]:
    """Namespace of a mapping resource, or None if ``root`` is not one."""
    if _local(root.tag) != "mapper":
        return None
    namespace = (root.get("namespace") or "").strip()
    return namespace or None


def _property_values(prop: ET.Element) -> List[str]:
    values: List[str] = []
    if prop.get("value"):
        values.append(prop.get("value").strip())
    for child in prop:
        tag = _local(child.tag)
        if tag in ("list", "array", "set"):
            values.extend((v.text or "").strip() for v in _children(child, "value"))
        elif tag == "value":
            values.append((child.text or "").strip())
    return [v for v in values if v]


def parse_spring_xml(root: ET.Element, classpath: str) -> List[DataSourceConfig]:
    """
    Data sources declared in a Spring ``beans`` document.

    Session-factory beans key the result; a mapper scanner referencing a
    session factory contributes its ``;``-separated base packages.
    """
    if _local(root.tag) != "beans":
        return []

    connections: Dict[str, Dict[str, str]] = {}
    configs: Dict[str, DataSourceConfig] = {}
    beans = _children(root, "bean")

    for bean in beans:
        cls = bean.get("class") or ""
        if cls.endswith("DataSource"):
            props = {
                p.get("name"): p.get("value")
                for p in _children(bean, "property")
                if p.get("name") and p.get("value") is not None
            }
            connections[bean.get("id") or ""] = props

    for bean in beans:
        cls = bean.get("class") or ""
        if not cls.endswith("SqlSessionFactoryBean"):
            continue
        factory_id = bean.get("id") or "sqlSessionFactory"
        config = DataSourceConfig(
            name=factory_id,
            datasource_id="dataSource",
            session_factory_id=factory_id,
            imported_from=classpath,
        )
        for prop in _children(bean, "property"):
            name = prop.get("name")
            if name == "mapperLocations":
                config.mapper_locations.extend(_property_values(prop))
            elif name == "dataSource" and prop.get("ref"):
                config.datasource_id = prop.get("ref")
        connection = connections.get(config.datasource_id, {})
        config.driver = connection.get("driverClassName")
        config.url = connection.get("url")
        config.username = connection.get("username")
        config.password = connection.get("password")
        configs[factory_id] = config

    for bean in beans:
        cls = bean.get("class") or ""
        if not cls.endswith("MapperScannerConfigurer"):
            continue
        props = {p.get("name"): p.get("value") for p in _children(bean, "property")}
        factory_ref = props.get("sqlSessionFactoryBeanName")
        base_package = props.get("basePackage")
        if not factory_ref or not base_package:
            continue
        config = configs.get(factory_ref)
        if config is None:
            config = DataSourceConfig(
                name=factory_ref,
                datasource_id="dataSource",
                session_factory_id=factory_ref,
                imported_from=classpath,
            )
            configs[factory_ref] = config
        config.base_packages.extend(
            pkg.strip() for pkg in base_package.replace(",", ";").split(";") if pkg.strip()
        )

    if configs:
        logger.debug(f"{classpath}: session factories {list(configs)}")
    return list(configs.values())


# ============================================================================
# Properties
# ============================================================================

def read_properties(path: Path) -> Dict[str, str]:
    """
    Read a ``.properties`` file.

    Supports ``key=value`` and ``key: value``, ``#``/``!`` comments and
    backslash line continuations.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceParseFailure(str(path), str(e)) from e

    props: Dict[str, str] = {}
    pending = ""
    for raw in text.splitlines():
        line = pending + raw.strip()
        pending = ""
        if not line or line[0] in "#!":
            continue
        if line.endswith("\\"):
            pending = line[:-1]
            continue
        positions = [p for p in (line.find("="), line.find(":")) if p >= 0]
        if not positions:
            props[line] = ""
            continue
        split = min(positions)
        props[line[:split].strip()] = line[split + 1:].strip()
    return props


def parse_properties(props: Mapping[str, str], profile: str = DEFAULT_NAME) -> List[DataSourceConfig]:
    """
    Data sources from Spring Boot style properties.

    Recognized keys:
        spring.datasource.{url,username,password,driver-class-name}
        spring.datasource.<name>.{url,username,password,driver-class-name}
        mybatis.mapper-locations / mybatis-plus.mapper-locations
        mybatis.<name>.mapper-locations

    Mapper base packages are never read from properties: they come from
    ``MapperScannerConfigurer`` beans and ``@MapperScan`` markers.
    """
    configs: Dict[str, DataSourceConfig] = {}

    def config_for(name: str) -> DataSourceConfig:
        if name not in configs:
            configs[name] = DataSourceConfig.named(name)
        return configs[name]

    connection_keys = {
        "url": "url",
        "username": "username",
        "password": "password",
        "driver-class-name": "driver",
    }

    for key, value in props.items():
        if key.startswith("spring.datasource."):
            rest = key[len("spring.datasource."):]
            if rest in connection_keys:
                setattr(config_for(profile), connection_keys[rest], value)
                continue
            name, _, prop = rest.partition(".")
            if prop in connection_keys:
                setattr(config_for(name), connection_keys[prop], value)
        elif key in ("mybatis.mapper-locations", "mybatis-plus.mapper-locations"):
            config_for(profile).mapper_locations.extend(_split_locations(value))
        elif key.startswith("mybatis.") and key.endswith(".mapper-locations"):
            name = key[len("mybatis."):-len(".mapper-locations")]
            config_for(name).mapper_locations.extend(_split_locations(value))

    return list(configs.values())


# ============================================================================
# YAML
# ============================================================================

def read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
        raise ResourceParseFailure(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ResourceParseFailure(str(path), "top level is not a mapping")
    return data


def _connection_from(node: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    def text(key: str) -> Optional[str]:
        value = node.get(key)
        return None if value is None else str(value)

    return {
        "url": text("url"),
        "username": text("username"),
        "password": text("password"),
        "driver": text("driver-class-name"),
    }


def _is_connection(node: Any) -> bool:
    return isinstance(node, dict) and any(
        k in node for k in ("url", "username", "password", "driver-class-name")
    )


def parse_yaml(data: Mapping[str, Any], profile: str = DEFAULT_NAME) -> List[DataSourceConfig]:
    """
    Data sources from Spring Boot style YAML.

    ``spring.datasource`` is either a single connection or a mapping of
    named connections. Mapper locations come from ``mybatis``,
    ``mybatis-plus`` or ``spring.mybatis`` (flat or per data-source name).
    """
    configs: Dict[str, DataSourceConfig] = {}

    def config_for(name: str) -> DataSourceConfig:
        if name not in configs:
            configs[name] = DataSourceConfig.named(name)
        return configs[name]

    spring = data.get("spring") or {}
    datasource = spring.get("datasource") if isinstance(spring, dict) else None
    if _is_connection(datasource):
        for attr, value in _connection_from(datasource).items():
            setattr(config_for(profile), attr, value)
    elif isinstance(datasource, dict):
        for name, node in datasource.items():
            if _is_connection(node):
                for attr, value in _connection_from(node).items():
                    setattr(config_for(str(name)), attr, value)

    sections = [data.get("mybatis"), data.get("mybatis-plus")]
    if isinstance(spring, dict):
        sections.append(spring.get("mybatis"))
    for section in sections:
        if not isinstance(section, dict):
            continue
        if "mapper-locations" in section:
            config_for(profile).mapper_locations.extend(
                _split_locations(section["mapper-locations"])
            )
        for name, node in section.items():
            if isinstance(node, dict) and "mapper-locations" in node:
                config_for(str(name)).mapper_locations.extend(
                    _split_locations(node["mapper-locations"])
                )

    return list(configs.values())
