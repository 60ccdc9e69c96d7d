"""
Dependency declarations from mod manifests.

Each entry of a manifest's "dependencies" list is a short string:

```
base               required
? bobplates        optional
(?) angelsrefining hidden optional
! oldmod           forbidden (incompatible)
base >= 0.18.1     required, with a version constraint
```
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class DependencyKind(Enum):
    """How a package relates to one of its declared dependencies."""
    REQUIRED = ""
    OPTIONAL = "?"
    OPTIONAL_HIDDEN = "(?)"
    FORBIDDEN = "!"

    @property
    def is_optional(self) -> bool:
        return self in (DependencyKind.OPTIONAL, DependencyKind.OPTIONAL_HIDDEN)


@dataclass(frozen=True, order=True)
class Version:
    """A dotted major.minor[.patch] version."""
    major: int
    minor: int
    patch: int = 0

    PATTERN = re.compile(r'^(\d+)\.(\d+)(?:\.(\d+))?$')

    @classmethod
    def parse(cls, text: str) -> Version:
        match = cls.PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid version: {text!r}")
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch or 0))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


_OPERATORS: dict[str, Callable[[Version, Version], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
    ">=": operator.ge,
    ">": operator.gt,
}


@dataclass(frozen=True)
class VersionConstraint:
    """A comparison such as '>= 0.18.1' attached to a dependency."""
    operator: str
    version: Version

    def allows(self, version: Version) -> bool:
        return _OPERATORS[self.operator](version, self.version)

    def __str__(self) -> str:
        return f"{self.operator} {self.version}"


@dataclass(frozen=True)
class Dependency:
    """One parsed dependency declaration."""
    name: str
    kind: DependencyKind = DependencyKind.REQUIRED
    constraint: Optional[VersionConstraint] = None

    PATTERN = re.compile(
        r'^(?:(!|\?|\(\?\)) *)?'
        r'([A-Za-z0-9_-]+)'
        r'(?: *(<=|>=|<|>|=) *((?:\d+\.){1,2}\d+))?$'
    )

    @classmethod
    def parse(cls, text: str) -> Dependency:
        """
        Parse a declaration string.

        Args:
            text: e.g. "? foo", "bar >= 1.0", "!baz"

        Returns:
            The parsed Dependency

        Raises:
            ValueError: If the string does not follow the grammar
        """
        match = cls.PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Invalid dependency declaration: {text!r}")

        prefix, name, op, version = match.groups()
        constraint = None
        if op is not None:
            constraint = VersionConstraint(op, Version.parse(version))
        return cls(name=name, kind=DependencyKind(prefix or ""), constraint=constraint)

    def __str__(self) -> str:
        parts = [self.kind.value, self.name]
        if self.constraint:
            parts.append(str(self.constraint))
        return " ".join(p for p in parts if p)
