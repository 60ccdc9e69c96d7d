"""
require() path resolution.

A logical module name such as "prototypes.item" becomes the relative path
"prototypes/item.lua", which is then looked for in:
1. the directory of the script calling require
2. the root of the package that owns that script
3. the core package's lualib directory
"""

from __future__ import annotations

import logging
from pathlib import Path

from modloader.core.config import LoaderConfig
from modloader.core.errors import ModuleResolutionError
from modloader.mods.registry import ModRegistry


class ModuleResolver:
    """Maps require() names to script files."""

    def __init__(self, registry: ModRegistry, config: LoaderConfig):
        self.registry = registry
        self.config = config
        self.logger = logging.getLogger(__name__)

    def relative_path(self, name: str) -> Path:
        """Turn a dotted logical name into a relative script path."""
        return Path(name.replace(".", "/") + self.config.script_extension)

    def search_path(self, requester: Path | str | None) -> list[Path]:
        """
        Directories searched for a require issued by a script.

        Args:
            requester: File of the calling script, or None for string chunks
        """
        directories: list[Path] = []
        if requester is not None:
            requester = Path(requester)
            directories.append(requester.parent)
            owner = self.registry.owner_of(requester)
            if owner is not None and owner.root not in directories:
                directories.append(owner.root)
        directories.append(self.config.lualib_path)
        return directories

    def resolve_module(self, name: str, requester: Path | str | None) -> Path:
        """
        Find the file for a require() call.

        Args:
            name: Logical module name, e.g. "util" or "prototypes.item"
            requester: File of the calling script (None if unknown)

        Returns:
            Absolute path of the first matching file

        Raises:
            ModuleResolutionError: Reserved-prefix name or no file found
        """
        if not name:
            raise ModuleResolutionError(name, "empty module name")
        if name.startswith(self.config.reserved_prefix):
            raise ModuleResolutionError(name, "mod-relative paths are not supported")

        relative = self.relative_path(name)
        tried = []
        for directory in self.search_path(requester):
            candidate = directory / relative
            tried.append(candidate)
            if candidate.is_file():
                self.logger.debug(f"require('{name}') -> {candidate}")
                return candidate.resolve()

        raise ModuleResolutionError(
            name,
            "not found in " + ", ".join(str(p) for p in tried),
            tried,
        )
