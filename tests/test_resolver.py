"""
Name resolution, implementation lookup and the factory index
(scan/resolver.py, scan/factories.py).
"""

from litewire.resources import ResourceIndex
from litewire.resources.index import MapperResource
from litewire.scan import FactoryIndex, ImplementationResolver, TypeNameResolver
from tests.conftest import make_index, method_entry, type_entry


class TestTypeNameResolver:

    def test_skipped_names(self, settings):
        names = TypeNameResolver(make_index(), settings)
        for name in ("int", "?", "String", "List", "T", "K2", "java.util.Map", "jakarta.inject.Provider"):
            assert names.is_skipped(name), name
        assert not names.is_skipped("com.acme.Foo")
        assert not names.is_skipped("Foo")

    def test_resolution_order(self, settings):
        index = make_index(
            type_entry("a.Foo"),
            type_entry("b.Foo"),
            type_entry("b.Outer"),
            type_entry("b.Outer$Inner"),
            type_entry("c.Unique"),
        )
        names = TypeNameResolver(index, settings)
        context = index.find("b.Outer")
        assert names.resolve("a.Foo", context).qualified_name == "a.Foo"
        assert names.resolve("Foo", context).qualified_name == "b.Foo"
        assert names.resolve("Inner", context).qualified_name == "b.Outer$Inner"
        assert names.resolve("b.Outer.Inner").qualified_name == "b.Outer$Inner"
        assert names.resolve("Unique", context).qualified_name == "c.Unique"

    def test_relative_nested_names(self, settings):
        index = make_index(
            type_entry("b.Outer"),
            type_entry("b.Outer$Inner"),
            type_entry("b.Outer$Inner$Leaf"),
            type_entry("b.Ctx"),
        )
        names = TypeNameResolver(index, settings)
        context = index.find("b.Ctx")
        assert names.is_skipped("Map.Entry")
        assert not names.is_skipped("Outer.Inner")
        assert names.resolve("Outer.Inner", context).qualified_name == "b.Outer$Inner"
        assert names.resolve("Outer.Inner.Leaf", context).qualified_name == "b.Outer$Inner$Leaf"
        assert names.resolve("Missing.Inner", context) is None

    def test_ambiguous_simple_name(self, settings):
        index = make_index(type_entry("a.Foo"), type_entry("b.Foo"), type_entry("c.Ctx"))
        names = TypeNameResolver(index, settings)
        assert names.resolve("Foo", index.find("c.Ctx")) is None

    def test_unknown(self, settings):
        assert TypeNameResolver(make_index(), settings).resolve("com.acme.Nope") is None


class TestImplementationResolver:

    def test_sorted_concrete_implementors(self, settings):
        index = make_index(
            type_entry("a.Api", kind="interface"),
            type_entry("a.SubApi", kind="interface", implements=["a.Api"]),
            type_entry("z.ZImpl", implements=["a.Api"]),
            type_entry("b.BImpl", implements=["a.SubApi"]),
        )
        resolver = ImplementationResolver(index, ResourceIndex.empty(), settings)
        assert [t.qualified_name for t in resolver.resolve(index.find("a.Api"))] == ["b.BImpl", "z.ZImpl"]

    def test_abstract_base_includes_subclasses(self, settings):
        index = make_index(
            type_entry("a.Base", kind="abstract"),
            type_entry("a.Impl", extends="a.Base"),
        )
        resolver = ImplementationResolver(index, ResourceIndex.empty(), settings)
        assert [t.qualified_name for t in resolver.resolve(index.find("a.Base"))] == ["a.Impl"]

    def test_concrete_type_has_no_implementors(self, settings):
        index = make_index(type_entry("a.Base"), type_entry("a.Impl", extends="a.Base"))
        resolver = ImplementationResolver(index, ResourceIndex.empty(), settings)
        assert resolver.resolve(index.find("a.Base")) == []

    def test_same_package_simple_names(self, settings):
        index = make_index(
            type_entry("a.Api", kind="interface"),
            type_entry("b.Api", kind="interface"),
            type_entry("a.Impl", implements=["Api"]),
        )
        resolver = ImplementationResolver(index, ResourceIndex.empty(), settings)
        assert [t.qualified_name for t in resolver.resolve(index.find("a.Api"))] == ["a.Impl"]
        assert resolver.resolve(index.find("b.Api")) == []

    def test_mappers_are_proxied(self, settings):
        index = make_index(
            type_entry("a.OrderMapper", kind="interface"),
            type_entry("a.Marked", kind="interface", markers=["Mapper"]),
            type_entry("a.Impl", implements=["a.OrderMapper", "a.Marked"]),
        )
        resources = ResourceIndex(mappers=[MapperResource("a.OrderMapper", "m/OrderMapper.xml")])
        resolver = ImplementationResolver(index, resources, settings)
        assert resolver.resolve(index.find("a.OrderMapper")) == []
        assert resolver.resolve(index.find("a.Marked")) == []


class TestFactoryIndex:

    def test_bindings(self, settings):
        index = make_index(
            type_entry("a.AppConfig", markers=["Configuration"], methods=[
                method_entry("client", returns="a.Client", markers=["Bean"]),
                method_entry("helper", returns="a.Helper"),
                method_entry("count", returns="int", markers=["Bean"]),
            ]),
            type_entry("a.Client"),
            type_entry("a.Helper"),
        )
        factories = FactoryIndex.build(index, settings)
        assert len(factories) == 1
        binding = factories.binding_for("a.Client")
        assert binding.factory_type.qualified_name == "a.AppConfig"
        assert binding.method_name == "client"
        assert not factories.provides("a.Helper")

    def test_unmarked_factory_ignored(self, settings):
        index = make_index(
            type_entry("a.NotConfig", methods=[method_entry("client", returns="a.Client", markers=["Bean"])]),
            type_entry("a.Client"),
        )
        assert len(FactoryIndex.build(index, settings)) == 0

    def test_first_binding_wins(self, settings):
        index = make_index(
            type_entry("a.First", markers=["Configuration"],
                       methods=[method_entry("client", returns="a.Client", markers=["Bean"])]),
            type_entry("a.Second", markers=["Configuration"],
                       methods=[method_entry("otherClient", returns="a.Client", markers=["Bean"])]),
            type_entry("a.Client"),
        )
        binding = FactoryIndex.build(index, settings).binding_for("a.Client")
        assert binding.factory_type.qualified_name == "a.First"
