"""
Config synthesizer - turns a finished scan registry into a wiring
descriptor.

Fragment order:

1. managed components
2. factory-provided beans
3. mappers with generated SQL
4. mappers backed by mapping resources
5. one data-source group per data source that owns a mapper, in
   configuration order

Registry insertion order is kept within each kind.
"""

import logging
import re
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..config import ScanSettings
from ..resources import DEFAULT_NAME, DataSourceConfig, MapperLocationSet, ResourceIndex
from ..scan import (
    BeanKind,
    BeanRecord,
    ImplementationResolver,
    ScanRegistry,
    TypeNameResolver,
    decapitalize,
)
from ..scan.factories import FactoryIndex
from ..symbols import SymbolLookup, TypeRef, TypeUse
from .descriptor import BeanDefinition, ImportDefinition, WiringDescriptor

logger = logging.getLogger("litewire.wiring")

MAPPER_FACTORY_BEAN = "org.mybatis.spring.mapper.MapperFactoryBean"
SESSION_FACTORY_BEAN = "org.mybatis.spring.SqlSessionFactoryBean"
DRIVER_MANAGER_DATASOURCE = "org.springframework.jdbc.datasource.DriverManagerDataSource"

DEFAULT_MAPPER_LOCATION = "classpath*:**/*.xml"


class ConfigSynthesizer:
    """
    Builds the minimal wiring descriptor for a scan.

    Args:
        lookup: Symbol lookup (resolves cross-reference types)
        resources: Resource index (mapping resources, data sources)
        settings: Scan settings (markers, default data source)
        factories: Factory index (factory-bean/factory-method wiring)
    """

    def __init__(
        self,
        lookup: SymbolLookup,
        resources: ResourceIndex,
        settings: ScanSettings,
        factories: Optional[FactoryIndex] = None,
        implementations: Optional[ImplementationResolver] = None,
    ):
        self.lookup = lookup
        self.resources = resources
        self.settings = settings
        self.names = TypeNameResolver(lookup, settings)
        self.factories = factories or FactoryIndex.build(lookup, settings, self.names)
        self.implementations = implementations or ImplementationResolver(
            lookup, resources, settings, self.names
        )

    def datasources(self) -> List[DataSourceConfig]:
        """
        Configured data sources, or the default one built from settings.

        ``@MapperScan`` declarations in the symbol snapshot add their base
        packages to the data source whose session factory they name.
        """
        datasources = self.resources.datasources
        if not datasources:
            datasources = [DataSourceConfig.named(
                DEFAULT_NAME,
                driver=self.settings.default_datasource["driver"],
                url=self.settings.default_datasource["url"],
                username=self.settings.default_datasource["username"],
                password=self.settings.default_datasource["password"],
                mapper_locations=[DEFAULT_MAPPER_LOCATION],
            )]
        return self._with_scanned_packages(datasources)

    def _with_scanned_packages(self, datasources: List[DataSourceConfig]) -> List[DataSourceConfig]:
        scanned: Dict[str, List[str]] = {}
        for type_ref in self.lookup.all_types():
            marker = type_ref.find_marker(self.settings.mapper_scan_markers)
            if marker is None:
                continue
            attributes = marker.attributes
            packages = _package_list(attributes.get("basePackages", attributes.get("value")))
            if not packages:
                continue
            factory_ref = str(attributes.get("sqlSessionFactoryRef") or "sqlSessionFactory")
            scanned.setdefault(factory_ref, []).extend(packages)
        if not scanned:
            return datasources

        result = []
        for ds in datasources:
            packages = scanned.pop(ds.session_factory_id, None)
            if packages:
                merged = list(ds.base_packages)
                merged.extend(p for p in dict.fromkeys(packages) if p not in merged)
                # Resource-index configs stay unchanged
                ds = replace(ds, mapper_locations=list(ds.mapper_locations), base_packages=merged)
            result.append(ds)
        for factory_ref in scanned:
            logger.debug(f"@MapperScan names unknown session factory '{factory_ref}'; ignored")
        return result

    def synthesize(self, registry: ScanRegistry) -> WiringDescriptor:
        descriptor = WiringDescriptor()

        for record in registry.records(BeanKind.MANAGED_COMPONENT):
            descriptor.add(self._managed(record, registry))

        for record in registry.records(BeanKind.FACTORY_PROVIDED):
            descriptor.add(self._factory_provided(record, registry))

        datasources = self.datasources()
        locations = MapperLocationSet.from_datasources(datasources)
        by_name = {ds.name: ds for ds in datasources}
        owned: Dict[str, List[str]] = {ds.name: [] for ds in datasources}
        used: Dict[str, bool] = {ds.name: False for ds in datasources}

        for kind in (BeanKind.MAPPER_WITH_GENERATED_SQL, BeanKind.MAPPER_BACKED_BY_RESOURCE):
            for record in registry.records(kind):
                resource = self.resources.mapper_for(record.qualified_name)
                if resource is not None:
                    owner_name = locations.owner_of(resource.classpath)
                    owner = by_name.get(owner_name) if owner_name else None
                    if owner is None:
                        logger.debug(
                            f"Mapper {record.qualified_name} ({resource.classpath}) matches no "
                            f"mapper location; omitted"
                        )
                        continue
                    owned[owner.name].append(resource.location)
                else:
                    owner = self._owner_by_package(record, datasources)
                descriptor.add(self._mapper(record, owner))
                used[owner.name] = True

        imported = set()
        for ds in datasources:
            if not used[ds.name]:
                continue
            if ds.imported:
                if ds.imported_from in imported:
                    continue
                imported.add(ds.imported_from)
                descriptor.add(ImportDefinition(f"classpath:{ds.imported_from}"))
                continue
            descriptor.add(self._datasource(ds))
            descriptor.add(self._session_factory(ds, owned[ds.name]))

        logger.debug(f"Synthesized {len(descriptor)} fragments from {len(registry)} beans")
        return descriptor

    # ------------------------------------------------------------------
    # Fragments
    # ------------------------------------------------------------------

    def _managed(self, record: BeanRecord, registry: ScanRegistry) -> BeanDefinition:
        bean = BeanDefinition(record.id, class_name=record.class_name)
        if record.target_class is not None:
            # Generated implementations: no declared members to wire
            return bean

        type_ref = record.type_ref
        constructors = type_ref.constructors()
        if len(constructors) == 1 and constructors[0].parameter_types:
            refs = [self._bean_ref(p, type_ref, registry) for p in constructors[0].parameter_types]
            if all(refs):
                bean.constructor_args.extend(refs)

        for field_decl in type_ref.fields:
            if field_decl.find_marker(self.settings.injection_markers) is None:
                continue
            setter = "set" + field_decl.name[:1].upper() + field_decl.name[1:]
            if type_ref.find_method(setter) is None:
                continue
            ref = self._bean_ref(field_decl.type, type_ref, registry)
            if ref is not None:
                bean.property_ref(field_decl.name, ref)
        return bean

    def _factory_provided(self, record: BeanRecord, registry: ScanRegistry) -> BeanDefinition:
        binding = self.factories.binding_for(record.qualified_name)
        if binding is None:
            return BeanDefinition(record.id, class_name=record.class_name)
        factory = registry.record_for_type(binding.factory_type.qualified_name)
        factory_id = factory.id if factory is not None else decapitalize(
            binding.factory_type.simple_name
        )
        return BeanDefinition(
            record.id,
            factory_bean=factory_id,
            factory_method=binding.method_name,
        )

    def _mapper(self, record: BeanRecord, owner: DataSourceConfig) -> BeanDefinition:
        return (
            BeanDefinition(record.id, class_name=MAPPER_FACTORY_BEAN)
            .property_value("mapperInterface", record.qualified_name)
            .property_ref("sqlSessionFactory", owner.session_factory_id)
        )

    def _datasource(self, ds: DataSourceConfig) -> BeanDefinition:
        defaults = self.settings.default_datasource
        return (
            BeanDefinition(ds.datasource_id, class_name=DRIVER_MANAGER_DATASOURCE)
            .property_value("driverClassName", ds.driver or defaults["driver"])
            .property_value("url", ds.url or defaults["url"])
            .property_value("username", ds.username or defaults["username"])
            .property_value("password", ds.password or defaults["password"])
        )

    def _session_factory(self, ds: DataSourceConfig, locations: List[str]) -> BeanDefinition:
        bean = BeanDefinition(ds.session_factory_id, class_name=SESSION_FACTORY_BEAN)
        bean.property_ref("dataSource", ds.datasource_id)
        if locations:
            bean.property_list("mapperLocations", locations)
        return bean

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _owner_by_package(
        self, record: BeanRecord, datasources: List[DataSourceConfig]
    ) -> DataSourceConfig:
        for ds in datasources:
            if ds.owns_package(record.qualified_name):
                return ds
        return datasources[0]

    def _bean_ref(
        self, use: TypeUse, context: TypeRef, registry: ScanRegistry
    ) -> Optional[str]:
        """Bean id registered for a declared type, directly or via an implementor."""
        if use.is_primitive or use.is_wildcard or self.names.is_skipped(use.name):
            return None
        target = self.names.resolve(use.name, context)
        if target is None:
            return None
        record = registry.record_for_type(target.qualified_name)
        if record is not None:
            return record.id
        for implementor in self.implementations.resolve(target):
            record = registry.record_for_type(implementor.qualified_name)
            if record is not None:
                return record.id
        return None


def _package_list(value: Any) -> List[str]:
    """``basePackages`` as a list; strings may hold several separated names."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    packages = []
    for item in items:
        packages.extend(p for p in re.split(r"[,;\s]+", str(item)) if p)
    return packages
