import json

import pytest

from modloader.core.errors import DiscoveryError, ResolutionError
from modloader.core.events import LoaderEvent
from modloader.mods.dependency import DependencyKind, Version
from modloader.mods.registry import ModRegistry


def test_builtins_always_registered(registry, config):
    assert "core" in registry
    assert "base" in registry
    assert registry.get("core").root == config.core_dir
    assert registry.get("core").builtin
    assert registry.user_packages == []


def test_discover(registry, add_mod):
    add_mod("A", version="1.2.0")
    add_mod("B", ["A", "? X"])

    found = registry.discover()

    assert [p.name for p in found] == ["A", "B"]
    assert len(registry) == 4
    a = registry.get("A")
    assert a.version == Version(1, 2, 0)
    assert a.load_stage is None
    assert a.resolved_dependencies == []
    b = registry.get("B")
    assert [(d.name, d.kind) for d in b.declared_dependencies] == [
        ("A", DependencyKind.REQUIRED),
        ("X", DependencyKind.OPTIONAL),
    ]


def test_directories_without_manifest_are_ignored(registry, mod_dir, add_mod):
    add_mod("A")
    (mod_dir / "not-a-mod").mkdir()
    (mod_dir / "stray.txt").write_text("hello")

    found = registry.discover()
    assert [p.name for p in found] == ["A"]


def test_missing_mod_dir(registry, mod_dir, caplog):
    mod_dir.rmdir()
    assert registry.discover() == []
    assert "Mod directory not found" in caplog.text


def test_invalid_json_fails_whole_discovery(registry, mod_dir, add_mod):
    add_mod("A")
    broken = mod_dir / "Z"
    broken.mkdir()
    (broken / "info.json").write_text("{ not json")

    with pytest.raises(DiscoveryError) as exc_info:
        registry.discover()

    assert exc_info.value.path == broken / "info.json"
    # Nothing was registered, not even the valid mod
    assert "A" not in registry
    assert len(registry) == 2


@pytest.mark.parametrize("manifest", [
    {"dependencies": []},
    {"name": "M"},
    {"name": "M", "dependencies": "base"},
    {"name": "M", "dependencies": [3]},
    {"name": "bad name", "dependencies": []},
    {"name": "M", "dependencies": [], "version": "one"},
    ["M"],
])
def test_schema_violations(registry, mod_dir, manifest):
    (mod_dir / "M").mkdir()
    (mod_dir / "M" / "info.json").write_text(json.dumps(manifest))

    with pytest.raises(DiscoveryError):
        registry.discover()


def test_bad_dependency_string(registry, add_mod):
    add_mod("M", ["base >=> 1.0"])
    with pytest.raises(DiscoveryError):
        registry.discover()


def test_duplicate_name(registry, mod_dir):
    for folder in ("first", "second"):
        (mod_dir / folder).mkdir()
        (mod_dir / folder / "info.json").write_text(
            json.dumps({"name": "same", "dependencies": []})
        )

    with pytest.raises(DiscoveryError, match="Duplicate mod name 'same'"):
        registry.discover()
    assert "same" not in registry


def test_mod_cannot_shadow_builtin(registry, add_mod):
    add_mod("base")
    with pytest.raises(DiscoveryError):
        registry.discover()


def test_builtin_manifest_without_dependencies(config, game_dir):
    (config.base_dir / "info.json").write_text(
        json.dumps({"name": "base", "version": "0.18.0", "title": "Base Mod"})
    )

    registry = ModRegistry(config)
    base = registry.get("base")
    assert base.version == Version(0, 18, 0)
    assert base.title == "Base Mod"
    assert base.declared_dependencies == []
    assert base.builtin


def test_owner_of(registry, config, add_mod):
    root = add_mod("A", files={"data.lua": "", "prototypes/item.lua": ""})
    registry.discover()

    assert registry.owner_of(root / "prototypes" / "item.lua").name == "A"
    assert registry.owner_of(config.core_dir / "lualib" / "util.lua").name == "core"
    assert registry.owner_of(config.base_dir / "data.lua").name == "base"
    assert registry.owner_of(root / "missing.lua") is None


def test_resolve_mod_path(registry, config, add_mod):
    root = add_mod("A")
    registry.discover()

    assert registry.resolve_mod_path("__base__/graphics/icons/iron-plate.png") == (
        config.base_dir / "graphics" / "icons" / "iron-plate.png"
    )
    assert registry.resolve_mod_path("__A__/x.png") == root / "x.png"

    with pytest.raises(ResolutionError):
        registry.resolve_mod_path("graphics/x.png")
    with pytest.raises(ResolutionError):
        registry.resolve_mod_path("__missing__/x.png")


def test_discovery_events(config, event_bus, add_mod):
    seen = []
    event_bus.subscribe(LoaderEvent.MOD_DISCOVERED, lambda e: seen.append(e["package"].name))

    add_mod("A")
    registry = ModRegistry(config, event_bus)
    registry.discover()

    assert seen == ["core", "base", "A"]
