"""
Mod Loader

Loads a data-driven game and its mods: discovers mod packages, orders them
by dependency, runs their Lua data scripts and converts the result into a
read-only value tree.

Quick Start:
    from modloader import DataLoader, LoaderConfig

    loader = DataLoader(LoaderConfig(game_dir="/games/factorio"))
    data_raw = loader.load()

    for entry in data_raw.table("item"):
        print(entry.key, entry.table().child("stack_size").to_string())
"""

__version__ = "0.1.0"

from modloader.core import (
    FValue,
    FObject,
    FKeyValue,
    ValueKind,
    VisitDirection,
    VisitResult,
    LoaderConfig,
    EventBus,
    Event,
    LoaderEvent,
    ModLoaderError,
)
from modloader.mods import (
    Dependency,
    DependencyKind,
    Package,
    ModRegistry,
    DependencyResolver,
)
from modloader.scripting import ScriptHost, ModuleResolver, LuaMarshaller
from modloader.loader import DataLoader

__all__ = [
    # Values
    "FValue",
    "FObject",
    "FKeyValue",
    "ValueKind",
    "VisitDirection",
    "VisitResult",
    # Config / events / errors
    "LoaderConfig",
    "EventBus",
    "Event",
    "LoaderEvent",
    "ModLoaderError",
    # Mods
    "Dependency",
    "DependencyKind",
    "Package",
    "ModRegistry",
    "DependencyResolver",
    # Scripting
    "ScriptHost",
    "ModuleResolver",
    "LuaMarshaller",
    # Pipeline
    "DataLoader",
]
