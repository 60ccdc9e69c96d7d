"""
Dump the converted data.raw tree of a game install.

Usage:
    python dump_data.py /games/factorio --depth 2
    python dump_data.py /games/factorio --path item/iron-plate
    python dump_data.py /games/factorio --mods ~/mods --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from modloader import DataLoader, LoaderConfig, ModLoaderError
from modloader.core.values import FObject, VisitDirection, VisitResult


def format_tree(root: FObject, max_depth: int | None = None, limit: int | None = None) -> list[str]:
    """
    Render a tree as indented 'key: value' lines.

    Args:
        root: Object to render
        max_depth: Do not descend below this many levels (None = no limit)
        limit: Stop after this many lines (None = no limit)
    """
    lines: list[str] = []
    depth = 0

    def on_node(direction, key, value):
        nonlocal depth
        if direction is VisitDirection.LEAVE:
            depth -= 1
            return VisitResult.CONTINUE
        if limit is not None and len(lines) >= limit:
            return VisitResult.EXIT

        indent = "  " * depth
        if direction is VisitDirection.LEAF:
            lines.append(f"{indent}{key}: {value.to_string()}")
            return VisitResult.CONTINUE

        lines.append(f"{indent}{key}")
        if max_depth is not None and depth + 1 >= max_depth:
            return VisitResult.CONTINUE
        depth += 1
        return VisitResult.DESCEND

    root.visit(on_node)
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump data.raw of a game install")
    parser.add_argument("game_dir", type=Path, help="Game install directory")
    parser.add_argument("--mods", type=Path, default=None, help="Mod directory (default <game>/mods)")
    parser.add_argument("--path", default="", help="Only dump this subtree, e.g. item/iron-plate")
    parser.add_argument("--depth", type=int, default=None, help="Maximum depth")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of lines")
    parser.add_argument("--json", action="store_true", help="Print the subtree as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger("DataDump")

    try:
        loader = DataLoader(LoaderConfig(game_dir=args.game_dir, mod_dir=args.mods))
        data_raw = loader.load()
    except ModLoaderError as e:
        logger.critical(f"LOAD FAILED: {e}")
        return 1

    value = data_raw.find(args.path)
    if not value:
        logger.error(f"Nothing at path '{args.path}'")
        return 1

    if args.json:
        print(json.dumps(value.to_python(), indent=2))
    elif value.as_object() is not None:
        for line in format_tree(value.obj(), args.depth, args.limit):
            print(line)
    else:
        print(value.to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
