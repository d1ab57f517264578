"""Scan command - root type to wiring descriptor."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from ...config import ConfigError, ConfigLoader
from ...resources import ResourceIndex
from ...service import LiteScanService, ScanResult
from ...symbols import SymbolIndex, SymbolIndexError

logger = logging.getLogger("litewire.cli.scan")


class SymbolLoadError(ConfigError):
    """Symbol dump could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__("symbols", f"{path}: {reason}")


def build_overrides(
    strategy: Optional[str] = None,
    workers: Optional[int] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Collect explicitly given command-line options into a ``scan`` override."""
    scan: Dict[str, Any] = {}
    if strategy is not None:
        scan["strategy"] = strategy
    if workers is not None:
        scan["max_workers"] = workers
    if timeout is not None:
        scan["timeout"] = timeout
    return {"scan": scan} if scan else {}


def load_symbols(path: str) -> SymbolIndex:
    try:
        return SymbolIndex.from_file(path)
    except (OSError, yaml.YAMLError, SymbolIndexError) as e:
        raise SymbolLoadError(path, str(e)) from e


def run_scan(
    root: str,
    symbols: str,
    resources: Sequence[str] = (),
    method: Optional[str] = None,
    config_paths: Optional[Sequence[str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ScanResult:
    """
    Load inputs and run one scan.

    Args:
        root: Qualified name of the root type
        symbols: Path to the symbol dump (YAML or JSON)
        resources: Resource roots to index
        method: Root method the generated stub should target
        config_paths: Config files; auto-detected when omitted
        overrides: Highest-precedence config values

    Returns:
        ScanResult of the scan

    Raises:
        ConfigError: Invalid configuration or unreadable symbol dump
        ScanFailure: Unresolvable root, timeout
        CancelledByHost: Scan was interrupted
    """
    loader = ConfigLoader.load(
        paths=list(config_paths) if config_paths else None,
        overrides=overrides,
    )
    settings = loader.scan_settings()
    lookup = load_symbols(symbols)

    roots = [Path(r) for r in resources]
    index = ResourceIndex.from_roots(roots) if roots else ResourceIndex.empty()
    logger.debug(
        f"Loaded {len(lookup)} types and {len(index.mapper_resources)} mapper resources"
    )

    return LiteScanService(lookup, index, settings).scan(root, method=method)
