"""
Config system - Layered typed configuration with validation.

Merge precedence (later overrides earlier):
defaults > config files (YAML/JSON) > LW_* environment variables > overrides
"""

from typing import Any, Dict, List, Optional, Type, get_args, get_origin
from dataclasses import dataclass, field, fields, is_dataclass, MISSING
from pathlib import Path
import os
import json
import logging

import yaml

from .faults import ConfigInvalid

logger = logging.getLogger("litewire.config")

DEFAULT_CONFIG_FILES = ("litewire.yaml", "litewire.yml", "litewire.json")

STRATEGIES = ("sequential", "concurrent")


class ConfigError(ConfigInvalid):
    """Raised when configuration validation fails."""


# ============================================================================
# Typed settings
# ============================================================================

@dataclass
class ScanSettings:
    """
    Settings for one scan.

    Marker names are qualified; declarations that carry unqualified
    markers match by simple name.
    """

    managed_markers: List[str] = field(default_factory=lambda: [
        "org.springframework.stereotype.Component",
        "org.springframework.stereotype.Service",
        "org.springframework.stereotype.Repository",
        "org.springframework.stereotype.Controller",
        "org.springframework.web.bind.annotation.RestController",
        "org.springframework.context.annotation.Configuration",
    ])
    factory_markers: List[str] = field(default_factory=lambda: [
        "org.springframework.context.annotation.Configuration",
    ])
    provider_markers: List[str] = field(default_factory=lambda: [
        "org.springframework.context.annotation.Bean",
    ])
    mapper_markers: List[str] = field(default_factory=lambda: [
        "org.apache.ibatis.annotations.Mapper",
    ])
    mapper_scan_markers: List[str] = field(default_factory=lambda: [
        "org.mybatis.spring.annotation.MapperScan",
    ])
    generated_sql_markers: List[str] = field(default_factory=lambda: [
        "org.apache.ibatis.annotations.Select",
        "org.apache.ibatis.annotations.Insert",
        "org.apache.ibatis.annotations.Update",
        "org.apache.ibatis.annotations.Delete",
        "org.apache.ibatis.annotations.SelectProvider",
        "org.apache.ibatis.annotations.InsertProvider",
        "org.apache.ibatis.annotations.UpdateProvider",
        "org.apache.ibatis.annotations.DeleteProvider",
    ])
    injection_markers: List[str] = field(default_factory=lambda: [
        "org.springframework.beans.factory.annotation.Autowired",
        "javax.annotation.Resource",
        "jakarta.annotation.Resource",
        "javax.inject.Inject",
        "jakarta.inject.Inject",
    ])
    generated_impl_markers: Dict[str, Dict[str, str]] = field(default_factory=lambda: {
        "org.mapstruct.Mapper": {"componentModel": "spring"},
    })
    mapper_suffixes: List[str] = field(default_factory=lambda: ["Mapper", "Dao"])
    ignored_prefixes: List[str] = field(default_factory=lambda: ["java.", "javax.", "jakarta."])
    strategy: str = "sequential"
    max_workers: int = 4
    timeout: float = 30.0
    default_datasource: Dict[str, str] = field(default_factory=lambda: {
        "driver": "com.mysql.cj.jdbc.Driver",
        "url": "jdbc:mysql://localhost:3306/test",
        "username": "root",
        "password": "root",
    })

    def validate(self) -> "ScanSettings":
        if self.strategy not in STRATEGIES:
            raise ConfigError("scan.strategy", f"must be one of {STRATEGIES}, got '{self.strategy}'")
        if isinstance(self.max_workers, bool) or self.max_workers < 1:
            raise ConfigError("scan.max_workers", f"must be a positive integer, got {self.max_workers!r}")
        if self.timeout <= 0:
            raise ConfigError("scan.timeout", f"must be positive, got {self.timeout!r}")
        for name in ("driver", "url", "username", "password"):
            if name not in self.default_datasource:
                raise ConfigError("scan.default_datasource", f"missing '{name}'")
        return self

    def is_ignored(self, qualified_name: str) -> bool:
        return any(qualified_name.startswith(prefix) for prefix in self.ignored_prefixes)


# ============================================================================
# Loader
# ============================================================================

class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > config files > defaults
    """

    def __init__(self, env_prefix: str = "LW_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "LW_",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: Config file paths (glob patterns supported). When omitted,
                the first of ``litewire.yaml``/``.yml``/``.json`` found in the
                working directory is used.
            env_prefix: Prefix for environment variables
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        if not paths:
            paths = [p for p in DEFAULT_CONFIG_FILES if Path(p).exists()][:1]

        for pattern in paths:
            loader._load_from_files(pattern)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        matched = glob(pattern)
        if not matched and not any(ch in pattern for ch in "*?["):
            raise ConfigError("config", f"file '{pattern}' does not exist")

        for path_str in sorted(matched):
            path = Path(path_str)

            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                logger.warning(f"Ignoring config file with unknown extension: {path}")

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(str(path), f"invalid JSON: {e}") from e
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(str(path), f"invalid YAML: {e}") from e
            if data:
                self._merge_dict(self.config_data, data)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert LW_SCAN__MAX_WORKERS to nested dict."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nesting levels
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        # Comma-separated lists
        if "," in value:
            return [item.strip() for item in value.split(",") if item.strip()]

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        parts = path.split(".")
        current = self.config_data

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def scan_settings(self) -> ScanSettings:
        """
        Build validated ``ScanSettings`` from the ``scan`` section.

        Raises:
            ConfigError: On unknown keys, type mismatches or invalid values
        """
        data = dict(self.get("scan", {}) or {})
        known = {f.name for f in fields(ScanSettings)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"scan.{unknown[0]}", "unknown setting")

        # Integral timeouts are accepted
        if isinstance(data.get("timeout"), int) and not isinstance(data["timeout"], bool):
            data["timeout"] = float(data["timeout"])
        for key in ("managed_markers", "factory_markers", "provider_markers", "mapper_markers",
                    "mapper_scan_markers", "generated_sql_markers", "injection_markers",
                    "mapper_suffixes", "ignored_prefixes"):
            if isinstance(data.get(key), str):
                data[key] = [data[key]]

        settings = self._instantiate_dataclass(ScanSettings, data)
        if "default_datasource" in data:
            settings.default_datasource = {
                **ScanSettings().default_datasource,
                **{k: str(v) for k, v in data["default_datasource"].items()},
            }
        return settings.validate()

    def _instantiate_dataclass(self, config_class: Type, data: dict):
        """Instantiate dataclass config with validation."""
        if not is_dataclass(config_class):
            raise TypeError(f"{config_class!r} is not a dataclass")
        kwargs = {}

        for field_info in fields(config_class):
            field_name = field_info.name
            field_type = field_info.type

            if field_name in data:
                value = data[field_name]

                if not self._check_type(value, field_type):
                    raise ConfigError(
                        f"scan.{field_name}",
                        f"expected {getattr(field_type, '__name__', field_type)}, "
                        f"got {type(value).__name__}",
                    )

                kwargs[field_name] = value
            elif field_info.default is not MISSING:
                kwargs[field_name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[field_name] = field_info.default_factory()
            else:
                raise ConfigError(f"scan.{field_name}", "required but not provided")

        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Type) -> bool:
        """Basic type checking."""
        import types
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == 'typing.Union':
            args = get_args(expected_type)
            if value is None:
                return True
            if args:
                return self._check_type(value, args[0])

        # Handle generic types
        if origin:
            return isinstance(value, origin)

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()
