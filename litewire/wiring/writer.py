"""
Scaffold writer - persists a scan's outputs next to a project's tests.

Layout under the base directory::

    src/test/resources/<package path>/<Root>Test.xml     wiring descriptor
    src/test/java/<package path>/<Root>Test.java         JUnit stub (never overwritten)
    .litewire/<root qualified name>/classes.txt          visited classes
    .litewire/<root qualified name>/packages.txt         reduced package roots
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from ..faults import ScaffoldWriteFailure
from ..scan import decapitalize
from .descriptor import template_environment

if TYPE_CHECKING:
    from ..service import ScanResult

logger = logging.getLogger("litewire.wiring.writer")


@dataclass(frozen=True)
class ScaffoldPaths:
    """Files produced by one ``ScaffoldWriter.write`` call."""

    descriptor: Path
    test_stub: Path
    classes: Path
    packages: Path
    stub_created: bool


class ScaffoldWriter:
    """
    Writes descriptor, class list, package roots and a JUnit stub.

    Directories are created with ``exist_ok`` so concurrent writers for
    different roots never race on a shared parent. Files are written to a
    temporary sibling and renamed into place.

    Args:
        base_dir: Project (or module) directory
    """

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def write(self, result: "ScanResult") -> ScaffoldPaths:
        root = result.root
        package_path = Path(*root.package.split(".")) if root.package else Path()
        test_class = f"{root.simple_name}Test"

        resources_dir = self.base_dir / "src" / "test" / "resources" / package_path
        java_dir = self.base_dir / "src" / "test" / "java" / package_path
        meta_dir = self.base_dir / ".litewire" / root.qualified_name

        descriptor_path = resources_dir / f"{test_class}.xml"
        stub_path = java_dir / f"{test_class}.java"
        classes_path = meta_dir / "classes.txt"
        packages_path = meta_dir / "packages.txt"

        self._write(descriptor_path, result.descriptor.render())
        self._write(classes_path, _lines(result.class_names))
        self._write(packages_path, _lines(sorted(result.package_roots)))

        created = False
        if stub_path.exists():
            logger.info(f"{stub_path} exists; test stub left untouched")
        else:
            descriptor_location = (package_path / f"{test_class}.xml").as_posix()
            self._write(stub_path, self.render_stub(result, descriptor_location))
            created = True

        logger.info(f"Wrote wiring for {root.qualified_name} to {descriptor_path}")
        return ScaffoldPaths(descriptor_path, stub_path, classes_path, packages_path, created)

    def render_stub(self, result: "ScanResult", descriptor_location: str) -> str:
        root = result.root
        method = result.method
        test_method = f"test{method[:1].upper()}{method[1:]}" if method else "testContextLoads"
        return template_environment().get_template("test_stub.java.j2").render(
            package=root.package,
            descriptor_location=descriptor_location,
            test_class=f"{root.simple_name}Test",
            simple_name=root.simple_name,
            field_name=decapitalize(root.simple_name),
            test_method=test_method,
        )

    def _write(self, path: Path, text: str) -> None:
        temp_path: Optional[Path] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
            temp_path.write_text(text, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            raise ScaffoldWriteFailure(str(path), str(e)) from e


def _lines(items: Iterable[str]) -> str:
    text = "\n".join(items)
    return text + "\n" if text else ""
