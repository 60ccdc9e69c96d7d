"""
Loader configuration.

Describes where the game and its mods live and which file names the
pipeline looks for. The defaults match the usual install layout:

    <game>/data/core   built-in core package (lualib, data.lua, ...)
    <game>/data/base   built-in base package
    <game>/mods        third-party mods, one directory each
"""

from __future__ import annotations

from pathlib import Path


DEFAULT_STAGES = ("data", "data-updates", "data-final-fixes")


class LoaderConfig:
    """Configuration for the mod loader."""

    def __init__(
        self,
        game_dir: Path | str = ".",
        mod_dir: Path | str | None = None,
        manifest_name: str = "info.json",
        script_extension: str = ".lua",
        stages: tuple[str, ...] = DEFAULT_STAGES,
        lualib_dir: str = "lualib",
        data_loader: str = "lualib/dataloader.lua",
        reserved_prefix: str = "_",
        data_root: tuple[str, ...] = ("data", "raw"),
    ):
        self.game_dir = Path(game_dir)
        self.mod_dir = Path(mod_dir) if mod_dir is not None else self.game_dir / "mods"
        self.manifest_name = manifest_name
        self.script_extension = script_extension
        self.stages = tuple(stages)
        self.lualib_dir = lualib_dir
        self.data_loader = data_loader
        self.reserved_prefix = reserved_prefix
        self.data_root = tuple(data_root)

    @property
    def core_dir(self) -> Path:
        """Root of the built-in core package."""
        return self.game_dir / "data" / "core"

    @property
    def base_dir(self) -> Path:
        """Root of the built-in base package."""
        return self.game_dir / "data" / "base"

    @property
    def lualib_path(self) -> Path:
        """Shared library directory used as the last require fallback."""
        return self.core_dir / self.lualib_dir

    @property
    def data_loader_path(self) -> Path:
        return self.core_dir / self.data_loader

    def __repr__(self) -> str:
        return f"LoaderConfig(game_dir={str(self.game_dir)!r}, mod_dir={str(self.mod_dir)!r})"
