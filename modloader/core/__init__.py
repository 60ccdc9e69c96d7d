"""
Core loader module.

Exports:
- FValue, FObject: Converted value tree
- ValueKind, VisitDirection, VisitResult: Value tags and traversal protocol
- LoaderConfig: Paths and file names used by the pipeline
- EventBus, Event, LoaderEvent: Progress notifications
- ModLoaderError and subclasses: Error taxonomy
"""

from modloader.core.values import (
    FValue,
    FObject,
    FKeyValue,
    ValueKind,
    VisitDirection,
    VisitResult,
)
from modloader.core.config import LoaderConfig
from modloader.core.events import EventBus, Event, LoaderEvent
from modloader.core.errors import (
    ModLoaderError,
    DiscoveryError,
    ResolutionError,
    MissingDependencyError,
    CircularDependencyError,
    ScriptError,
    ModuleResolutionError,
    MarshalError,
)

__all__ = [
    # Values
    "FValue",
    "FObject",
    "FKeyValue",
    "ValueKind",
    "VisitDirection",
    "VisitResult",
    # Config
    "LoaderConfig",
    # Events
    "EventBus",
    "Event",
    "LoaderEvent",
    # Errors
    "ModLoaderError",
    "DiscoveryError",
    "ResolutionError",
    "MissingDependencyError",
    "CircularDependencyError",
    "ScriptError",
    "ModuleResolutionError",
    "MarshalError",
]
