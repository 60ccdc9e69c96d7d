"""Loader exception hierarchy.

Every stage of the pipeline fails fast: errors are raised where they are
found and propagate to whoever started the load.
"""


class ModLoaderError(Exception):
    """Base loader exception."""


class DiscoveryError(ModLoaderError):
    """Raised when a mod manifest cannot be read or understood.

    Typical reasons: malformed JSON, schema violation, bad dependency string,
    two packages with the same name.
    """

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class ResolutionError(ModLoaderError):
    """Raised when the dependency graph cannot be turned into a load order."""


class MissingDependencyError(ResolutionError):
    """A package requires another package that is not installed."""

    def __init__(self, package: str, dependency: str):
        self.package = package
        self.dependency = dependency
        super().__init__(
            f"Missing required dependency '{dependency}' of mod '{package}'"
        )


class CircularDependencyError(ResolutionError):
    """The dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__("Circular dependency: " + " -> ".join(cycle))


class ScriptError(ModLoaderError):
    """Raised when a script fails to load, compile or run."""


class ModuleResolutionError(ScriptError):
    """A require() call could not be mapped to a file."""

    def __init__(self, name: str, message: str, tried=()):
        self.name = name
        self.tried = list(tried)
        super().__init__(f"Cannot require '{name}': {message}")


class MarshalError(ModLoaderError):
    """Raised when a script value cannot be converted into the value model."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path or '<root>'}: {message}")
