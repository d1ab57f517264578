"""
Shared test fixtures and helpers for LiteWire test suite.
"""

import textwrap
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from litewire.config import ScanSettings
from litewire.resources import ResourceIndex
from litewire.symbols import SymbolIndex


# ============================================================================
# Symbol helpers
# ============================================================================


def type_entry(
    name: str,
    kind: str = "class",
    markers: Optional[List[Any]] = None,
    fields: Optional[List[Dict[str, Any]]] = None,
    methods: Optional[List[Dict[str, Any]]] = None,
    extends: Optional[str] = None,
    implements: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build one entry of a symbol dump."""
    entry: Dict[str, Any] = {"name": name, "kind": kind}
    if markers:
        entry["markers"] = markers
    if fields:
        entry["fields"] = fields
    if methods:
        entry["methods"] = methods
    if extends:
        entry["extends"] = extends
    if implements:
        entry["implements"] = implements
    return entry


def field_entry(name: str, type_: str, *markers: str) -> Dict[str, Any]:
    return {"name": name, "type": type_, "markers": list(markers)}


def method_entry(
    name: str,
    params: Optional[List[str]] = None,
    returns: Optional[str] = None,
    markers: Optional[List[str]] = None,
    constructor: bool = False,
) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"name": name, "params": params or [], "markers": markers or []}
    if returns:
        entry["returns"] = returns
    if constructor:
        entry["constructor"] = True
    return entry


def make_index(*entries: Dict[str, Any], inheritors: Optional[Dict[str, List[str]]] = None) -> SymbolIndex:
    """Build a SymbolIndex from ``type_entry`` dicts."""
    data: Dict[str, Any] = {"types": list(entries)}
    if inheritors:
        data["inheritors"] = inheritors
    return SymbolIndex.from_dict(data, source="<test>")


def write_file(base: Path, relative: str, content: str) -> Path:
    path = base / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


# ============================================================================
# Order service project
# ============================================================================

ORDER_TYPES = [
    type_entry(
        "com.acme.order.OrderService",
        markers=["Service"],
        fields=[
            field_entry("orderMapper", "com.acme.order.mapper.OrderMapper", "Autowired"),
            field_entry("auditMapper", "com.acme.order.mapper.AuditMapper", "Autowired"),
            field_entry("userClient", "com.acme.user.UserClient", "Autowired"),
            field_entry("converter", "com.acme.order.OrderConverter", "Autowired"),
            field_entry("cache", "java.util.Map<String, com.acme.order.Order>"),
        ],
        methods=[
            method_entry("placeOrder", params=["com.acme.order.Order"], returns="long"),
            method_entry("setOrderMapper", params=["com.acme.order.mapper.OrderMapper"], returns="void"),
            method_entry("setUserClient", params=["com.acme.user.UserClient"], returns="void"),
        ],
    ),
    type_entry("com.acme.order.mapper.OrderMapper", kind="interface"),
    type_entry(
        "com.acme.order.mapper.AuditMapper",
        kind="interface",
        methods=[method_entry("insert", params=["String"], returns="int", markers=["Insert"])],
    ),
    type_entry("com.acme.user.UserClient", kind="interface"),
    type_entry(
        "com.acme.user.HttpUserClient",
        markers=["org.springframework.stereotype.Component"],
        implements=["com.acme.user.UserClient"],
        methods=[method_entry("<init>", params=["com.acme.http.RestTemplate"], constructor=True)],
    ),
    type_entry(
        "com.acme.config.ClientConfig",
        markers=["Configuration"],
        methods=[method_entry("restTemplate", returns="com.acme.http.RestTemplate", markers=["Bean"])],
    ),
    type_entry("com.acme.http.RestTemplate"),
    type_entry(
        "com.acme.order.OrderConverter",
        kind="interface",
        markers=[{"name": "org.mapstruct.Mapper", "attributes": {"componentModel": "spring"}}],
    ),
    type_entry("com.acme.order.Order"),
]

ORDER_CLASSES = sorted(entry["name"] for entry in ORDER_TYPES)


@pytest.fixture
def settings() -> ScanSettings:
    return ScanSettings()


@pytest.fixture
def order_symbols() -> SymbolIndex:
    return make_index(*ORDER_TYPES)


@pytest.fixture
def resource_root(tmp_path) -> Path:
    """Resource directory with one mapping resource and an application.yml."""
    root = tmp_path / "resources"
    write_file(root, "mapper/OrderMapper.xml", """
        <?xml version="1.0" encoding="UTF-8"?>
        <mapper namespace="com.acme.order.mapper.OrderMapper">
            <select id="findById" resultType="map">select * from orders where id = #{id}</select>
        </mapper>
    """)
    write_file(root, "application.yml", """
        spring:
          datasource:
            url: jdbc:mysql://db:3306/orders
            username: orders
            password: secret
            driver-class-name: com.mysql.cj.jdbc.Driver
        mybatis:
          mapper-locations: classpath:mapper/*.xml
    """)
    return root


@pytest.fixture
def order_resources(resource_root) -> ResourceIndex:
    return ResourceIndex.from_roots([resource_root])
