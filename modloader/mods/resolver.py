"""
Dependency resolution.

Turns the registry's declared dependencies into links between packages and
computes the load order: a post-order depth-first walk, so every package
comes after everything it depends on. Names are sorted at every level so the
order does not depend on how the filesystem lists directories.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

from modloader.core.errors import (
    CircularDependencyError,
    MissingDependencyError,
    ResolutionError,
)
from modloader.core.events import EventBus, LoaderEvent
from modloader.mods.dependency import Dependency, DependencyKind
from modloader.mods.registry import BUILTIN_PACKAGES, ModRegistry, Package


class _Mark(Enum):
    """DFS colouring."""
    WHITE = auto()  # not visited
    GREY = auto()   # on the current path
    BLACK = auto()  # finished


class DependencyResolver:
    """
    Computes a valid load order over a ModRegistry.

    Usage:
        order = DependencyResolver(registry).resolve()
        names = [p.name for p in order]
    """

    def __init__(self, registry: ModRegistry, events: EventBus | None = None):
        self.registry = registry
        self.events = events
        self.logger = logging.getLogger(__name__)

    def link(self) -> None:
        """
        Fill in resolved_dependencies for every package.

        Raises:
            MissingDependencyError: A required dependency is not installed
            ResolutionError: A forbidden package is installed, or an installed
                dependency fails its version constraint
        """
        for package in self.registry:
            resolved = []
            for dependency in package.declared_dependencies:
                target = self._lookup(package, dependency)
                if target is not None and target not in resolved:
                    resolved.append(target)
            resolved.sort(key=lambda p: p.name)
            package.resolved_dependencies = resolved

    def resolve(self) -> list[Package]:
        """
        Link dependencies and compute the load order.

        core and base come first, then the user packages sorted by name,
        each preceded by its (transitive) dependencies.

        Returns:
            Every package exactly once, dependencies before dependents

        Raises:
            MissingDependencyError: A required dependency is not installed
            CircularDependencyError: The dependency graph has a cycle
            ResolutionError: Forbidden package present or version mismatch
        """
        self.link()

        roots = [self.registry.get(name) for name in BUILTIN_PACKAGES]
        roots += sorted(self.registry.user_packages, key=lambda p: p.name)

        marks = {package.name: _Mark.WHITE for package in self.registry}
        order: list[Package] = []
        path: list[Package] = []

        def visit(package: Package) -> None:
            mark = marks[package.name]
            if mark is _Mark.BLACK:
                return
            if mark is _Mark.GREY:
                start = path.index(package)
                cycle = [p.name for p in path[start:]] + [package.name]
                raise CircularDependencyError(cycle)

            marks[package.name] = _Mark.GREY
            path.append(package)
            for dependency in package.resolved_dependencies:
                visit(dependency)
            path.pop()
            marks[package.name] = _Mark.BLACK
            order.append(package)

        for package in roots:
            if package is not None:
                visit(package)

        self.logger.info("Load order: " + ", ".join(p.name for p in order))
        if self.events:
            self.events.publish(LoaderEvent.ORDER_RESOLVED, order=list(order))
        return order

    def _lookup(self, package: Package, dependency: Dependency) -> Package | None:
        target = self.registry.get(dependency.name)

        if dependency.kind is DependencyKind.FORBIDDEN:
            if target is not None:
                raise ResolutionError(
                    f"Mod '{package.name}' is incompatible with installed mod '{target.name}'"
                )
            return None

        if target is None:
            if not dependency.kind.is_optional:
                raise MissingDependencyError(package.name, dependency.name)
            self.logger.debug(
                f"Skipping missing optional dependency '{dependency.name}' of '{package.name}'"
            )
            return None

        if dependency.constraint is not None and target.version is not None:
            if not dependency.constraint.allows(target.version):
                raise ResolutionError(
                    f"Mod '{package.name}' requires {dependency.name} "
                    f"{dependency.constraint}, found {target.version}"
                )
        return target
