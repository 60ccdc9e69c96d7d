"""
Mod packages: manifests, discovery and load order.

Exports:
- Dependency, DependencyKind, Version, VersionConstraint: Manifest declarations
- Package, ModRegistry: Discovered packages and script ownership
- DependencyResolver: Load order computation
"""

from modloader.mods.dependency import (
    Dependency,
    DependencyKind,
    Version,
    VersionConstraint,
)
from modloader.mods.registry import Package, ModRegistry, BUILTIN_PACKAGES
from modloader.mods.resolver import DependencyResolver

__all__ = [
    "Dependency",
    "DependencyKind",
    "Version",
    "VersionConstraint",
    "Package",
    "ModRegistry",
    "BUILTIN_PACKAGES",
    "DependencyResolver",
]
