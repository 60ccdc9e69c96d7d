"""
End-to-end data loading.

DataLoader wires the pipeline together:
1. ModRegistry: core, base and every mod under mod_dir
2. DependencyResolver: load order
3. ScriptHost: bootstrap, data stages
4. LuaMarshaller: data.raw -> FObject

Usage:
    loader = DataLoader(LoaderConfig(game_dir="/games/factorio"))
    data_raw = loader.load()
    iron = data_raw.table("item").table("iron-plate")
"""

from __future__ import annotations

import logging

from modloader.core.config import LoaderConfig
from modloader.core.events import EventBus
from modloader.core.values import FObject
from modloader.mods.registry import ModRegistry, Package
from modloader.mods.resolver import DependencyResolver
from modloader.scripting.host import ScriptHost


class DataLoader:
    """
    One-shot loader for a game install.

    Each component is built explicitly and kept on the loader so callers can
    inspect the registry, the order or the host after loading.
    """

    def __init__(self, config: LoaderConfig, events: EventBus | None = None):
        self.config = config
        self.events = events or EventBus()
        self.logger = logging.getLogger(__name__)

        self.registry: ModRegistry | None = None
        self.order: list[Package] = []
        self.host: ScriptHost | None = None
        self.data_raw: FObject | None = None

    def load(self) -> FObject:
        """
        Run the whole pipeline.

        Returns:
            The converted data.raw tree

        Raises:
            ModLoaderError: From whichever step failed
        """
        if self.data_raw is not None:
            return self.data_raw

        self.registry = ModRegistry(self.config, self.events)
        self.registry.discover()

        self.order = DependencyResolver(self.registry, self.events).resolve()

        self.host = ScriptHost(self.registry, self.config, self.events)
        self.host.bootstrap()
        self.host.run_data_stage(self.order)

        self.data_raw = self.host.get_data_raw()
        return self.data_raw
