"""
Mod registry and discovery.

Handles finding mod packages on disk, reading and validating their
manifests, and remembering which package every script file belongs to.
The two built-in packages (core and base) are always registered first.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Optional

import jsonschema

from modloader.core.config import LoaderConfig
from modloader.core.errors import DiscoveryError, ResolutionError
from modloader.core.events import EventBus, LoaderEvent
from modloader.mods.dependency import Dependency, Version


SCHEMA_PATH = Path(__file__).parent / "schemas" / "info.schema.json"

BUILTIN_PACKAGES = ("core", "base")

MOD_PATH_ROOT = re.compile(r'^__(.+)__$')


@dataclass(eq=False)
class Package:
    """
    A discovered mod package.

    Attributes:
        name: Unique package name
        root: Package directory
        declared_dependencies: Dependencies as written in the manifest
        resolved_dependencies: Installed packages this one loads after
        load_stage: Last stage the package was loaded in (None = never)
        version: Manifest version, if declared
        title: Display title, if declared
        builtin: True for core and base
    """
    name: str
    root: Path
    declared_dependencies: list[Dependency] = field(default_factory=list)
    resolved_dependencies: list[Package] = field(default_factory=list)
    load_stage: Optional[str] = None
    version: Optional[Version] = None
    title: str = ""
    builtin: bool = False

    def script(self, name: str, extension: str = ".lua") -> Path:
        """Path of a top-level script of this package (may not exist)."""
        return self.root / f"{name}{extension}"

    def __repr__(self) -> str:
        return f"Package({self.name!r}, {str(self.root)!r})"


def _load_schema() -> dict[str, Any]:
    with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
        return json.load(f)


class ModRegistry:
    """
    In-memory model of all installed packages.

    Owns every Package for the lifetime of the load. Other components look
    packages up by name (get) or by script path (owner_of).

    Usage:
        registry = ModRegistry(config)
        registry.discover()
        order = DependencyResolver(registry).resolve()
    """

    def __init__(self, config: LoaderConfig, events: EventBus | None = None):
        self.config = config
        self.events = events
        self.logger = logging.getLogger(__name__)

        self._schema = _load_schema()
        self._packages: dict[str, Package] = {}
        self._script_owner: dict[Path, Package] = {}

        self._register_builtins()

    # Queries

    def get(self, name: str) -> Package | None:
        return self._packages.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

    @property
    def packages(self) -> list[Package]:
        return list(self._packages.values())

    @property
    def user_packages(self) -> list[Package]:
        """Discovered packages, excluding core and base."""
        return [p for p in self._packages.values() if not p.builtin]

    def owner_of(self, script_path: Path | str) -> Package | None:
        """Get the package a script file belongs to."""
        try:
            key = Path(script_path).resolve()
        except OSError:
            return None
        return self._script_owner.get(key)

    def resolve_mod_path(self, raw: str) -> Path:
        """
        Map a mod-relative asset path to the filesystem.

        Args:
            raw: Path such as "__base__/graphics/icons/iron-plate.png"

        Returns:
            The path under the owning package's root

        Raises:
            ResolutionError: If the path has no __name__ root or the package
                is not installed
        """
        head, _, rest = raw.replace("\\", "/").partition("/")
        match = MOD_PATH_ROOT.match(head)
        if not match:
            raise ResolutionError(f"Not a mod path: {raw!r}")

        package = self.get(match.group(1))
        if package is None:
            raise ResolutionError(
                f"Unknown mod '{match.group(1)}' in path {raw!r}"
            )
        return package.root.joinpath(*[p for p in rest.split("/") if p])

    # Discovery

    def discover(self, mod_dir: Path | str | None = None) -> list[Package]:
        """
        Find and register all mods in a directory.

        Every immediate subdirectory holding a manifest becomes a package.
        Either all of them are registered or, on the first bad manifest,
        none are.

        Args:
            mod_dir: Directory to scan (defaults to config.mod_dir)

        Returns:
            The newly registered packages

        Raises:
            DiscoveryError: For an unreadable or invalid manifest
        """
        mod_dir = Path(mod_dir) if mod_dir is not None else self.config.mod_dir
        if not mod_dir.is_dir():
            self.logger.warning(f"Mod directory not found: {mod_dir}")
            return []

        found: list[Package] = []
        names: set[str] = set(self._packages)
        for entry in sorted(mod_dir.iterdir()):
            manifest_path = entry / self.config.manifest_name
            if not entry.is_dir() or not manifest_path.is_file():
                continue

            package = self._read_package(entry, manifest_path)
            if package.name in names:
                raise DiscoveryError(
                    manifest_path, f"Duplicate mod name '{package.name}'"
                )
            names.add(package.name)
            found.append(package)

        for package in found:
            self._register(package)

        self.logger.info(
            f"Discovered {len(found)} mods in {mod_dir} "
            f"({len(self._script_owner)} scripts indexed)."
        )
        return found

    def _register_builtins(self) -> None:
        roots = {"core": self.config.core_dir, "base": self.config.base_dir}
        for name in BUILTIN_PACKAGES:
            root = roots[name]
            manifest_path = root / self.config.manifest_name
            if manifest_path.is_file():
                package = self._read_package(root, manifest_path, builtin=True)
                package.name = name
            else:
                package = Package(name=name, root=root)
            package.builtin = True
            self._register(package)

    def _register(self, package: Package) -> None:
        self._packages[package.name] = package
        self._index_scripts(package)
        if self.events:
            self.events.publish(LoaderEvent.MOD_DISCOVERED, package=package)

    def _index_scripts(self, package: Package) -> None:
        """Record the owner of every script file under the package root."""
        if not package.root.is_dir():
            return
        pattern = f"*{self.config.script_extension}"
        for script in package.root.rglob(pattern):
            if script.is_file():
                self._script_owner.setdefault(script.resolve(), package)

    def _read_package(
        self, root: Path, manifest_path: Path, builtin: bool = False
    ) -> Package:
        """
        Load, validate and parse one manifest.

        Built-in manifests may leave out the dependency list.
        """
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DiscoveryError(manifest_path, f"Could not load manifest: {e}") from e

        if builtin and isinstance(data, dict):
            data.setdefault("dependencies", [])

        try:
            jsonschema.validate(instance=data, schema=self._schema)
        except jsonschema.ValidationError as e:
            raise DiscoveryError(manifest_path, f"Invalid manifest: {e.message}") from e

        dependencies = []
        for text in data["dependencies"]:
            try:
                dependencies.append(Dependency.parse(text))
            except ValueError as e:
                raise DiscoveryError(manifest_path, str(e)) from e

        version = Version.parse(data["version"]) if "version" in data else None
        return Package(
            name=data["name"],
            root=root,
            declared_dependencies=dependencies,
            version=version,
            title=data.get("title", ""),
        )
