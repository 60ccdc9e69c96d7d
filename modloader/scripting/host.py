"""
Lua script host.

Owns the single Lua runtime used for a load and drives script execution:
- Bootstrap: serializer, host callables (require, log), mods table,
  shared environment
- Data stages: the game's data loader, then every package's stage script
  in dependency order
- Conversion of data.raw into the value model

Usage:
    host = ScriptHost(registry, config)
    host.bootstrap()
    host.run_data_stage(order)
    data_raw = host.get_data_raw()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import lupa

from modloader.core.config import LoaderConfig
from modloader.core.errors import MarshalError, ScriptError
from modloader.core.events import EventBus, LoaderEvent
from modloader.core.values import FObject, FValue
from modloader.mods.registry import ModRegistry, Package
from modloader.scripting.marshal import LuaMarshaller
from modloader.scripting.module_resolver import ModuleResolver


LUA_DIR = Path(__file__).parent / "lua"

script_logger = logging.getLogger("modloader.lua")


class ScriptHost:
    """
    Runs mod scripts inside one Lua runtime.

    The runtime must only be used from the thread that created the host.
    Every failure (missing file, syntax error, runtime error, unresolved
    require) raises ScriptError; nothing is retried.
    """

    def __init__(
        self,
        registry: ModRegistry,
        config: LoaderConfig,
        events: EventBus | None = None,
        resolver: ModuleResolver | None = None,
    ):
        self.registry = registry
        self.config = config
        self.events = events
        self.resolver = resolver or ModuleResolver(registry, config)
        self.logger = logging.getLogger(__name__)

        self.lua = lupa.LuaRuntime(register_eval=False, register_builtins=False)
        if self.lua.lua_version < (5, 3):
            self.logger.warning(
                f"Lua {self.lua.lua_version} has no integer subtype; "
                "integral floats will convert as unsigned"
            )
        self.marshaller = LuaMarshaller(self.lua)

        self._load = self.lua.globals().load
        self._loading: list[str] = []
        self._bootstrapped = False

        # logical module name -> file it was loaded from
        self.module_paths: dict[str, Path] = {}

    @property
    def globals(self) -> Any:
        return self.lua.globals()

    @property
    def loaded(self) -> Any:
        """The package.loaded table (the require cache)."""
        return self.lua.globals().package.loaded

    # Script execution

    def compile_file(self, path: Path | str) -> Any:
        """
        Load a script file as a Lua function without running it.

        Raises:
            ScriptError: If the file cannot be read or does not compile
        """
        path = Path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScriptError(f"Cannot read script {path}: {e}") from e

        result = self._load(source, "@" + str(path), "t")
        if isinstance(result, tuple):
            message = result[1] if len(result) > 1 else "unknown error"
            raise ScriptError(f"Failed to load {path}:\n{message}")
        return result

    def run_file(self, path: Path | str, *args: Any) -> Any:
        """
        Load and run a script file.

        Args:
            path: Script to run
            *args: Values passed to the chunk as '...'

        Returns:
            The chunk's first return value (None if it returns nothing)
        """
        chunk = self.compile_file(path)
        try:
            result = chunk(*args)
        except lupa.LuaError as e:
            raise ScriptError(f"Error running {path}:\n{e}") from e

        if self.events:
            self.events.publish(LoaderEvent.SCRIPT_LOADED, path=Path(path))
        if isinstance(result, tuple):
            return result[0] if result else None
        return result

    # Host callables

    def require(self, name: Any, source: Any = None) -> Any:
        """
        Backing function of the scripts' require().

        A module runs at most once; later calls return the cached value from
        package.loaded. A module that returns nothing is cached as true.

        Args:
            name: Logical module name
            source: Lua chunk name of the caller ("@<path>" for files)
        """
        if not isinstance(name, str):
            raise ScriptError(f"require expects a string, got {name!r}")

        loaded = self.loaded
        cached = loaded[name]
        if cached is not None:
            return cached

        if name in self._loading:
            chain = " -> ".join(self._loading + [name])
            raise ScriptError(f"Circular require: {chain}")

        requester = None
        if isinstance(source, str) and source.startswith("@"):
            requester = Path(source[1:])
        path = self.resolver.resolve_module(name, requester)

        self._loading.append(name)
        try:
            value = self.run_file(path)
        finally:
            self._loading.pop()

        if value is None:
            value = True
        loaded[name] = value
        self.module_paths[name] = path

        if self.events:
            self.events.publish(LoaderEvent.MODULE_LOADED, name=name, path=path)
        return value

    def log(self, *args: Any) -> None:
        """Backing function of the scripts' log() and log_localised()."""
        message = " ".join(self._describe(arg) for arg in args)
        script_logger.info(message)
        if self.events:
            self.events.publish(LoaderEvent.SCRIPT_LOG, message=message)

    def _describe(self, value: Any) -> str:
        if lupa.lua_type(value) == "table":
            serpent = self.lua.globals().serpent
            if serpent is not None:
                return serpent.line(value)
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    # Phases

    def bootstrap(self) -> None:
        """
        Prepare the environment. Runs once; later calls do nothing.
        """
        if self._bootstrapped:
            return

        g = self.lua.globals()
        g.serpent = self.run_file(LUA_DIR / "serialize.lua")
        self.run_file(LUA_DIR / "prelude.lua", self.require, self.log)
        g.mods = self._mods_table()
        self.run_file(LUA_DIR / "bootstrap.lua")

        self._bootstrapped = True
        self.logger.debug("Lua environment bootstrapped")

    def _mods_table(self) -> Any:
        mods = self.lua.table()
        for package in self.registry:
            if package.name == "core":
                continue
            mods[package.name] = str(package.version) if package.version else ""
        return mods

    def run_data_stage(self, order: Sequence[Package]) -> None:
        """
        Run the data loader and every stage script of every package.

        Args:
            order: Load order from DependencyResolver.resolve()

        Raises:
            ScriptError: If the data loader is missing or any script fails
        """
        self.bootstrap()

        loader = self.config.data_loader_path
        if not loader.is_file():
            raise ScriptError(f"Data loader not found: {loader}")
        self.run_file(loader)

        for stage in self.config.stages:
            self.logger.info(f"Running stage '{stage}'")
            if self.events:
                self.events.publish(LoaderEvent.STAGE_STARTED, stage=stage)
            self.load_packages(order, stage)

    def load_packages(self, packages: Sequence[Package], stage: str) -> None:
        """
        Run one stage script per package, dependencies first.

        A package is marked with the stage once run so shared dependencies
        only run once per stage.
        """
        for package in packages:
            if package.load_stage == stage:
                continue
            self.load_packages(package.resolved_dependencies, stage)

            script = package.script(stage, self.config.script_extension)
            if script.is_file():
                self.logger.debug(f"{package.name}: {script.name}")
                self.run_file(script)
            else:
                self.logger.debug(f"{package.name}: no {script.name}, skipped")
            package.load_stage = stage

    # Conversion

    def get_global(self, path: Sequence[str]) -> Any:
        """
        Look up a nested global, e.g. ("data", "raw").

        Raises:
            ScriptError: If any step of the path is missing
        """
        value = self.lua.globals()
        for i, key in enumerate(path):
            if lupa.lua_type(value) != "table":
                raise ScriptError(f"Global {'.'.join(path[:i])} is not a table")
            value = value[key]
            if value is None:
                raise ScriptError(f"Global {'.'.join(path[:i + 1])} is not defined")
        return value

    def convert_global(self, path: Sequence[str]) -> FValue:
        """Convert a nested global into the value model."""
        return self.marshaller.convert(self.get_global(path), ".".join(path))

    def get_data_raw(self) -> FObject:
        """
        Convert the data.raw table.

        Raises:
            ScriptError: If data.raw does not exist
            MarshalError: If it is not a table or holds unsupported values
        """
        path = self.config.data_root
        value = self.convert_global(path)
        data_raw = value.as_object()
        if data_raw is None:
            raise MarshalError(".".join(path), f"expected a table, got {value.kind.name}")

        self.logger.info(
            f"Converted {'.'.join(path)}: {len(data_raw)} prototype types, "
            f"{self.marshaller.tables_converted} tables"
        )
        if self.events:
            self.events.publish(LoaderEvent.DATA_CONVERTED, data_raw=data_raw)
        return data_raw
