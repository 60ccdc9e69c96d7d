import json
import os
import sys
from pathlib import Path

import pytest

# Ensure modloader and dump_data can be imported
sys.path.append(os.getcwd())

from modloader.core.config import LoaderConfig
from modloader.core.events import EventBus
from modloader.core.values import FObject, FValue


DATALOADER_LUA = """
data = {}
data.raw = {}

function data:extend(otherdata)
  for _, e in ipairs(otherdata) do
    local t = e.type
    if not self.raw[t] then self.raw[t] = {} end
    self.raw[t][e.name] = e
  end
end
"""

UTIL_LUA = """
local util = {}
util.source = "core"

function util.by_pixel(x, y)
  return {x / 32, y / 32}
end

return util
"""

CORE_DATA_LUA = """
data:extend({
  { type = "font", name = "default", size = 14 },
})
"""

BASE_DATA_LUA = """
local util = require("util")

data:extend({
  {
    type = "item",
    name = "iron-plate",
    icon = "__base__/graphics/icons/iron-plate.png",
    icon_size = 32,
    stack_size = 100,
    fuel_value = "4MJ",
    order = "a[iron-plate]",
    shift = util.by_pixel(16, 8),
  },
})
"""


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_mod(
    mod_dir: Path,
    name: str,
    dependencies: list[str] | None = None,
    files: dict[str, str] | None = None,
    version: str | None = "1.0.0",
) -> Path:
    """Create a mod directory with an info.json and optional scripts."""
    root = mod_dir / name
    info = {"name": name, "dependencies": dependencies or []}
    if version is not None:
        info["version"] = version
    write_file(root / "info.json", json.dumps(info))
    for relative, content in (files or {}).items():
        write_file(root / relative, content)
    return root


def make_object(data: dict) -> FObject:
    """Build an FObject from plain Python values (ints >= 0 are unsigned)."""
    obj = FObject()
    for key, value in data.items():
        obj.add(str(key), make_value(value))
    return obj.finish()


def make_value(value) -> FValue:
    if value is None:
        return FValue.NIL
    if isinstance(value, bool):
        return FValue.from_bool(value)
    if isinstance(value, int) and value >= 0:
        return FValue.from_unsigned(value)
    if isinstance(value, (int, float)):
        return FValue.from_float(value)
    if isinstance(value, str):
        return FValue.from_string(value)
    if isinstance(value, dict):
        return FValue.from_object(make_object(value))
    if isinstance(value, (list, tuple)):
        return FValue.from_object(make_object({i + 1: v for i, v in enumerate(value)}))
    raise TypeError(value)


@pytest.fixture
def game_dir(tmp_path):
    """A minimal game install: core with lualib, base, empty mods dir."""
    game = tmp_path / "game"
    core = game / "data" / "core"
    base = game / "data" / "base"

    write_file(core / "lualib" / "dataloader.lua", DATALOADER_LUA)
    write_file(core / "lualib" / "util.lua", UTIL_LUA)
    write_file(core / "data.lua", CORE_DATA_LUA)
    write_file(base / "data.lua", BASE_DATA_LUA)
    write_file(base / "graphics" / "icons" / "iron-plate.png", "")
    (game / "mods").mkdir(parents=True)
    return game


@pytest.fixture
def mod_dir(game_dir):
    return game_dir / "mods"


@pytest.fixture
def config(game_dir):
    return LoaderConfig(game_dir=game_dir)


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def registry(config, event_bus):
    """Registry holding only the built-in packages (call discover() to add mods)."""
    from modloader.mods.registry import ModRegistry
    return ModRegistry(config, event_bus)


@pytest.fixture
def build_object():
    """make_object as a fixture: dict -> frozen FObject."""
    return make_object


@pytest.fixture
def add_mod(mod_dir):
    """Create a mod under the game's mods directory."""
    def _add(name, dependencies=None, files=None, version="1.0.0"):
        return write_mod(mod_dir, name, dependencies, files, version)
    return _add
