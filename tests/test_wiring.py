"""
Wiring descriptor and config synthesizer (wiring/descriptor.py,
wiring/synthesizer.py).
"""

import xml.etree.ElementTree as ET

import pytest

from litewire.config import ScanSettings
from litewire.resources import ResourceIndex
from litewire.scan import ScanRegistry
from litewire.wiring import (
    BeanDefinition,
    ConfigSynthesizer,
    ImportDefinition,
    MAPPER_FACTORY_BEAN,
    SESSION_FACTORY_BEAN,
    WiringDescriptor,
)
from tests.conftest import field_entry, make_index, method_entry, type_entry, write_file
from tests.test_engine import make_engine

BEANS_NS = "{http://www.springframework.org/schema/beans}"


def synthesize(lookup, settings, root, resources=None):
    resources = resources or ResourceIndex.empty()
    registry = make_engine(lookup, settings, resources=resources).traverse(
        lookup.find(root), ScanRegistry()
    )
    return ConfigSynthesizer(lookup, resources, settings).synthesize(registry)


def parse(descriptor: WiringDescriptor) -> ET.Element:
    return ET.fromstring(descriptor.render().encode("utf-8"))


def bean_elements(descriptor: WiringDescriptor):
    return {b.get("id"): b for b in parse(descriptor).findall(f"{BEANS_NS}bean")}


# ============================================================================
# WiringDescriptor
# ============================================================================

class TestWiringDescriptor:

    def test_first_fragment_wins(self):
        descriptor = WiringDescriptor()
        assert descriptor.add(BeanDefinition("a", class_name="x.A"))
        assert not descriptor.add(BeanDefinition("a", class_name="x.Other"))
        assert descriptor.get("a").class_name == "x.A"
        assert len(descriptor) == 1

    def test_insertion_order(self):
        descriptor = WiringDescriptor()
        for bean_id in ("c", "a", "b"):
            descriptor.add(BeanDefinition(bean_id, class_name=f"x.{bean_id}"))
        assert descriptor.ids == ["c", "a", "b"]
        assert list(descriptor.fragments()) == ["c", "a", "b"]

    def test_empty_bean_self_closes(self):
        descriptor = WiringDescriptor()
        descriptor.add(BeanDefinition("clientConfig", class_name="com.acme.ClientConfig"))
        assert descriptor.fragment("clientConfig") == (
            '<bean id="clientConfig" class="com.acme.ClientConfig"/>'
        )

    def test_bean_with_members(self):
        descriptor = WiringDescriptor()
        bean = BeanDefinition("svc", class_name="a.Svc", constructor_args=["dep"])
        bean.property_ref("other", "otherBean").property_value("name", "x")
        descriptor.add(bean)
        assert descriptor.fragment("svc") == "\n".join([
            '<bean id="svc" class="a.Svc">',
            '    <constructor-arg ref="dep"/>',
            '    <property name="other" ref="otherBean"/>',
            '    <property name="name" value="x"/>',
            '</bean>',
        ])

    def test_list_property(self):
        descriptor = WiringDescriptor()
        descriptor.add(
            BeanDefinition("f", class_name=SESSION_FACTORY_BEAN)
            .property_list("mapperLocations", ["classpath:a.xml", "classpath:b.xml"])
        )
        assert "<value>classpath:a.xml</value>" in descriptor.fragment("f")
        element = bean_elements(descriptor)["f"]
        values = element.findall(f"{BEANS_NS}property/{BEANS_NS}list/{BEANS_NS}value")
        assert [v.text for v in values] == ["classpath:a.xml", "classpath:b.xml"]

    def test_factory_bean(self):
        descriptor = WiringDescriptor()
        descriptor.add(BeanDefinition("client", factory_bean="appConfig", factory_method="client"))
        assert descriptor.fragment("client") == (
            '<bean id="client" factory-bean="appConfig" factory-method="client"/>'
        )

    def test_import(self):
        descriptor = WiringDescriptor()
        descriptor.add(ImportDefinition("classpath:spring/db.xml"))
        assert "classpath:spring/db.xml" in descriptor
        assert descriptor.fragment("classpath:spring/db.xml") == (
            '<import resource="classpath:spring/db.xml"/>'
        )

    def test_values_are_escaped(self):
        descriptor = WiringDescriptor()
        descriptor.add(
            BeanDefinition("ds", class_name="x.DS").property_value("url", 'jdbc:x?a=1&b="2"')
        )
        assert "&amp;" in descriptor.fragment("ds")
        element = bean_elements(descriptor)["ds"]
        assert element.find(f"{BEANS_NS}property").get("value") == 'jdbc:x?a=1&b="2"'

    def test_document(self):
        descriptor = WiringDescriptor()
        descriptor.add(BeanDefinition("a", class_name="x.A"))
        text = descriptor.render()
        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert "spring-beans.xsd" in text
        assert '    <bean id="a" class="x.A"/>' in text
        assert text.rstrip().endswith("</beans>")

    def test_empty_document_is_well_formed(self):
        assert parse(WiringDescriptor()).tag == f"{BEANS_NS}beans"


# ============================================================================
# ConfigSynthesizer
# ============================================================================

class TestOrderServiceWiring:

    @pytest.fixture
    def descriptor(self, order_symbols, order_resources, settings):
        return synthesize(order_symbols, settings, "com.acme.order.OrderService", order_resources)

    def test_fragment_order(self, descriptor):
        assert descriptor.ids == [
            "orderService",
            "httpUserClient",
            "clientConfig",
            "orderConverterImpl",
            "restTemplate",
            "auditMapper",
            "orderMapper",
            "dataSource",
            "sqlSessionFactory",
        ]

    def test_setter_injection(self, descriptor):
        assert descriptor.fragment("orderService") == "\n".join([
            '<bean id="orderService" class="com.acme.order.OrderService">',
            '    <property name="orderMapper" ref="orderMapper"/>',
            '    <property name="userClient" ref="httpUserClient"/>',
            '</bean>',
        ])

    def test_constructor_injection(self, descriptor):
        assert '<constructor-arg ref="restTemplate"/>' in descriptor.fragment("httpUserClient")

    def test_factory_provided(self, descriptor):
        bean = descriptor.get("restTemplate")
        assert bean.factory_bean == "clientConfig"
        assert bean.factory_method == "restTemplate"
        assert bean.class_name is None

    def test_generated_implementation(self, descriptor):
        assert descriptor.fragment("orderConverterImpl") == (
            '<bean id="orderConverterImpl" class="com.acme.order.OrderConverterImpl"/>'
        )

    def test_mappers(self, descriptor):
        beans = bean_elements(descriptor)
        for bean_id, interface in (
            ("orderMapper", "com.acme.order.mapper.OrderMapper"),
            ("auditMapper", "com.acme.order.mapper.AuditMapper"),
        ):
            element = beans[bean_id]
            assert element.get("class") == MAPPER_FACTORY_BEAN
            props = {p.get("name"): p for p in element.findall(f"{BEANS_NS}property")}
            assert props["mapperInterface"].get("value") == interface
            assert props["sqlSessionFactory"].get("ref") == "sqlSessionFactory"

    def test_datasource_group(self, descriptor):
        beans = bean_elements(descriptor)
        ds_props = {
            p.get("name"): p.get("value")
            for p in beans["dataSource"].findall(f"{BEANS_NS}property")
        }
        assert ds_props == {
            "driverClassName": "com.mysql.cj.jdbc.Driver",
            "url": "jdbc:mysql://db:3306/orders",
            "username": "orders",
            "password": "secret",
        }
        factory = beans["sqlSessionFactory"]
        assert factory.get("class") == SESSION_FACTORY_BEAN
        values = factory.findall(f"{BEANS_NS}property/{BEANS_NS}list/{BEANS_NS}value")
        assert [v.text for v in values] == ["classpath:mapper/OrderMapper.xml"]

    def test_plain_types_not_wired(self, descriptor):
        assert "order" not in descriptor
        assert "userClient" not in descriptor


class TestSynthesizerDataSources:

    def test_default_datasource_when_none_configured(self, settings):
        index = make_index(
            type_entry("a.Svc", markers=["Service"], fields=[field_entry("m", "a.OrderMapper")]),
            type_entry("a.OrderMapper", kind="interface"),
        )
        descriptor = synthesize(index, settings, "a.Svc")
        assert descriptor.ids == ["svc", "orderMapper", "dataSource", "sqlSessionFactory"]
        props = {
            p.get("name"): p.get("value")
            for p in bean_elements(descriptor)["dataSource"].findall(f"{BEANS_NS}property")
        }
        assert props["url"] == settings.default_datasource["url"]
        assert descriptor.get("sqlSessionFactory").properties[0].ref == "dataSource"

    def test_no_mappers_no_datasource(self, settings):
        index = make_index(type_entry("a.Svc", markers=["Service"]))
        assert synthesize(index, settings, "a.Svc").ids == ["svc"]

    def test_unmatched_resource_mapper_omitted(self, tmp_path, order_symbols, settings):
        root = tmp_path / "res"
        write_file(root, "mapper/OrderMapper.xml", '<mapper namespace="com.acme.order.mapper.OrderMapper"/>')
        write_file(root, "application.properties", "mybatis.mapper-locations=classpath:other/*.xml\n")
        descriptor = synthesize(
            order_symbols, settings, "com.acme.order.OrderService", ResourceIndex.from_roots([root])
        )
        assert "orderMapper" not in descriptor
        assert "auditMapper" in descriptor

    def test_owner_by_mapper_scan(self, tmp_path, settings):
        root = tmp_path / "res"
        write_file(root, "application.properties", "spring.datasource.url=jdbc:order\n")
        write_file(root, "application-report.properties", "spring.datasource.url=jdbc:report\n")
        index = make_index(
            type_entry("a.Svc", markers=["Service"], fields=[field_entry("m", "a.report.ReportMapper")]),
            type_entry("a.report.ReportMapper", kind="interface"),
            type_entry("a.ReportConfig", markers=[{
                "name": "org.mybatis.spring.annotation.MapperScan",
                "attributes": {
                    "basePackages": ["a.report"],
                    "sqlSessionFactoryRef": "reportSqlSessionFactory",
                },
            }]),
        )
        resources = ResourceIndex.from_roots([root])
        descriptor = synthesize(index, settings, "a.Svc", resources)
        mapper = descriptor.get("reportMapper")
        assert mapper.properties[1].ref == "reportSqlSessionFactory"
        assert "reportDataSource" in descriptor
        assert "dataSource" not in descriptor
        assert all(ds.base_packages == [] for ds in resources.datasources)

    def test_mapper_scan_value_string(self, settings):
        index = make_index(
            type_entry("a.MapperConfig", markers=[
                {"name": "MapperScan", "attributes": {"value": "a.order; a.report"}},
            ]),
        )
        synthesizer = ConfigSynthesizer(index, ResourceIndex.empty(), settings)
        [default] = synthesizer.datasources()
        assert default.base_packages == ["a.order", "a.report"]

    def test_mapper_scan_unknown_factory_ignored(self, settings):
        index = make_index(
            type_entry("a.MapperConfig", markers=[{
                "name": "MapperScan",
                "attributes": {"basePackages": "a.report", "sqlSessionFactoryRef": "missingFactory"},
            }]),
        )
        [default] = ConfigSynthesizer(index, ResourceIndex.empty(), settings).datasources()
        assert default.base_packages == []

    def test_type_aliases_do_not_route_mappers(self, tmp_path, settings):
        root = tmp_path / "res"
        write_file(root, "application.properties", "spring.datasource.url=jdbc:order\n")
        write_file(root, "application-report.properties", """
            spring.datasource.url=jdbc:report
            mybatis.type-aliases-package=com.acme
        """)
        index = make_index(
            type_entry("com.acme.Svc", markers=["Service"], fields=[
                field_entry("orderDao", "com.acme.order.OrderDao"),
            ]),
            type_entry("com.acme.order.OrderDao", kind="interface", methods=[
                method_entry("insert", ["long"], "int", ["Insert"]),
                method_entry("count", [], "long", ["Select"]),
            ]),
        )
        descriptor = synthesize(index, settings, "com.acme.Svc", ResourceIndex.from_roots([root]))
        assert descriptor.ids == ["svc", "orderDao", "dataSource", "sqlSessionFactory"]
        assert descriptor.get("orderDao").properties[1].ref == "sqlSessionFactory"

    def test_imported_datasource(self, tmp_path, settings):
        root = tmp_path / "res"
        write_file(root, "spring/report.xml", """
            <beans xmlns="http://www.springframework.org/schema/beans">
                <bean id="reportSqlSessionFactory" class="org.mybatis.spring.SqlSessionFactoryBean">
                    <property name="dataSource" ref="reportDataSource"/>
                </bean>
                <bean class="org.mybatis.spring.mapper.MapperScannerConfigurer">
                    <property name="sqlSessionFactoryBeanName" value="reportSqlSessionFactory"/>
                    <property name="basePackage" value="a.report"/>
                </bean>
            </beans>
        """)
        index = make_index(
            type_entry("a.Svc", markers=["Service"], fields=[
                field_entry("m", "a.report.ReportMapper"),
                field_entry("d", "a.report.DetailDao"),
            ]),
            type_entry("a.report.ReportMapper", kind="interface"),
            type_entry("a.report.DetailDao", kind="interface"),
        )
        descriptor = synthesize(index, settings, "a.Svc", ResourceIndex.from_roots([root]))
        assert descriptor.ids == [
            "svc", "reportMapper", "detailDao", "classpath:spring/report.xml",
        ]
        assert isinstance(descriptor.get("classpath:spring/report.xml"), ImportDefinition)
        assert descriptor.get("detailDao").properties[1].ref == "reportSqlSessionFactory"


class TestSynthesizerInjection:

    def test_constructor_args_all_or_nothing(self, settings):
        index = make_index(
            type_entry("a.Svc", markers=["Service"], methods=[
                method_entry("<init>", params=["a.DepService", "a.Value"], constructor=True),
            ]),
            type_entry("a.DepService", markers=["Service"]),
            type_entry("a.Value"),
        )
        descriptor = synthesize(index, settings, "a.Svc")
        assert descriptor.get("svc").constructor_args == []
        assert "depService" in descriptor

    def test_field_without_setter_not_wired(self, settings):
        index = make_index(
            type_entry("a.Svc", markers=["Service"],
                       fields=[field_entry("dep", "a.DepService", "Autowired")]),
            type_entry("a.DepService", markers=["Service"]),
        )
        assert synthesize(index, settings, "a.Svc").get("svc").properties == []

    def test_unmarked_field_not_wired(self, settings):
        index = make_index(
            type_entry("a.Svc", markers=["Service"],
                       fields=[field_entry("dep", "a.DepService")],
                       methods=[method_entry("setDep", params=["a.DepService"])]),
            type_entry("a.DepService", markers=["Service"]),
        )
        assert synthesize(index, settings, "a.Svc").get("svc").properties == []

    def test_resource_marker_with_setter(self, settings):
        index = make_index(
            type_entry("a.Svc", markers=["Service"],
                       fields=[field_entry("dep", "a.DepService", "javax.annotation.Resource")],
                       methods=[method_entry("setDep", params=["a.DepService"])]),
            type_entry("a.DepService", markers=["Service"]),
        )
        [prop] = synthesize(index, settings, "a.Svc").get("svc").properties
        assert (prop.name, prop.ref) == ("dep", "depService")

    def test_custom_factory_marker_wired(self):
        settings = ScanSettings(factory_markers=["com.acme.Factory"])
        index = make_index(
            type_entry("a.Svc", markers=["Service"], fields=[field_entry("clock", "a.Clock")]),
            type_entry("a.Fac", markers=["com.acme.Factory"],
                       methods=[method_entry("clock", returns="a.Clock", markers=["Bean"])]),
            type_entry("a.Clock"),
        )
        descriptor = synthesize(index, settings, "a.Svc")
        assert "fac" in descriptor
        assert descriptor.get("fac").class_name == "a.Fac"
        clock = descriptor.get("clock")
        assert (clock.factory_bean, clock.factory_method) == ("fac", "clock")


# ============================================================================
# Unannotated root
# ============================================================================

class TestUnannotatedRootWiring:

    @pytest.fixture
    def index(self):
        return make_index(
            type_entry("com.acme.order.OrderService", fields=[
                field_entry("orderMapper", "com.acme.order.mapper.OrderMapper"),
                field_entry("paymentGateway", "com.acme.pay.PaymentGateway"),
            ]),
            type_entry("com.acme.order.mapper.OrderMapper", kind="interface"),
            type_entry("com.acme.pay.PaymentGateway", markers=["Component"]),
        )

    def _resources(self, tmp_path, pattern):
        root = tmp_path / "res"
        write_file(root, "mapper/OrderMapper.xml", """
            <?xml version="1.0" encoding="UTF-8"?>
            <mapper namespace="com.acme.order.mapper.OrderMapper">
                <select id="count" resultType="long">select count(*) from orders</select>
            </mapper>
        """)
        write_file(root, "application.properties", f"""
            spring.datasource.url=jdbc:mysql://db:3306/orders
            mybatis.mapper-locations={pattern}
        """)
        return ResourceIndex.from_roots([root])

    def test_matching_mapper_location(self, tmp_path, settings, index):
        resources = self._resources(tmp_path, "classpath:mapper/*.xml")
        descriptor = synthesize(index, settings, "com.acme.order.OrderService", resources)
        assert descriptor.ids == ["paymentGateway", "orderMapper", "dataSource", "sqlSessionFactory"]
        assert "orderService" not in descriptor
        assert descriptor.get("orderMapper").properties[1].ref == "sqlSessionFactory"

    def test_unmatched_mapper_location(self, tmp_path, settings, index):
        resources = self._resources(tmp_path, "classpath:other/*.xml")
        descriptor = synthesize(index, settings, "com.acme.order.OrderService", resources)
        assert descriptor.ids == ["paymentGateway"]
