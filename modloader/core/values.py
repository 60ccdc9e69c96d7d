"""
Value model for converted script data.

Everything the scripts leave behind in the VM is turned into a tree of
FObjects whose leaves are FValues. The tree is read-only once built:
- FValue: closed tagged union (nil, object, string, unsigned, float, bool)
- FObject: key-sorted children plus a name index for O(1) lookup
- visit(): enter/leaf/leave traversal with early exit

Usage:
    item = data_raw.table("item").table("iron-plate")
    stack = item.child("stack_size").as_unsigned()

    def show(direction, key, value):
        if direction is VisitDirection.LEAF:
            print(key, value.to_string())
        return VisitResult.DESCEND

    data_raw.visit(show)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, ClassVar, Iterator, Sequence


UINT64_MAX = 2**64 - 1

NIL_TEXT = "!<>"
TABLE_TEXT = "table"


class ValueKind(Enum):
    """The closed set of value variants."""
    NIL = auto()
    OBJECT = auto()
    STRING = auto()
    UNSIGNED = auto()
    FLOAT = auto()
    BOOLEAN = auto()


class VisitDirection(Enum):
    """Why the visit callback is being invoked."""
    ENTER = auto()
    LEAF = auto()
    LEAVE = auto()


class VisitResult(Enum):
    """What the visit callback wants to happen next."""
    DESCEND = auto()
    CONTINUE = auto()
    EXIT = auto()


VisitCallback = Callable[[VisitDirection, str, "FValue"], "VisitResult | None"]


@dataclass(frozen=True)
class FValue:
    """
    A single converted value.

    Attributes:
        kind: Which variant this value holds
        data: The payload (None for nil, an FObject for objects)

    Use the from_* constructors rather than building one directly so the
    payload is checked against the kind.
    """
    kind: ValueKind = ValueKind.NIL
    data: Any = None

    NIL: ClassVar[FValue]

    def __post_init__(self) -> None:
        if not _payload_matches(self.kind, self.data):
            raise TypeError(
                f"Payload {self.data!r} is not valid for {self.kind.name}"
            )

    # Construction

    @classmethod
    def from_object(cls, obj: FObject) -> FValue:
        return cls(ValueKind.OBJECT, obj)

    @classmethod
    def from_string(cls, text: str) -> FValue:
        return cls(ValueKind.STRING, text)

    @classmethod
    def from_unsigned(cls, number: int) -> FValue:
        return cls(ValueKind.UNSIGNED, number)

    @classmethod
    def from_float(cls, number: float) -> FValue:
        return cls(ValueKind.FLOAT, float(number))

    @classmethod
    def from_bool(cls, flag: bool) -> FValue:
        return cls(ValueKind.BOOLEAN, flag)

    # Typed access

    def as_object(self) -> FObject | None:
        return self.data if self.kind is ValueKind.OBJECT else None

    def as_string(self) -> str | None:
        return self.data if self.kind is ValueKind.STRING else None

    def as_unsigned(self) -> int | None:
        return self.data if self.kind is ValueKind.UNSIGNED else None

    def as_float(self) -> float | None:
        return self.data if self.kind is ValueKind.FLOAT else None

    def as_bool(self) -> bool | None:
        return self.data if self.kind is ValueKind.BOOLEAN else None

    @property
    def is_nil(self) -> bool:
        return self.kind is ValueKind.NIL

    @property
    def is_number(self) -> bool:
        return self.kind in (ValueKind.UNSIGNED, ValueKind.FLOAT)

    def obj(self) -> FObject:
        """Get the referenced object, or the invalid object for non-tables."""
        if self.kind is ValueKind.OBJECT:
            return self.data
        return FObject.INVALID

    def to_float(self) -> float:
        """
        Widen a numeric value to float.

        Raises:
            TypeError: If the value is not a number
        """
        if not self.is_number:
            raise TypeError(f"{self.kind.name} value is not a number")
        return float(self.data)

    def to_string(self) -> str:
        """Human readable text for display (tables render as 'table')."""
        if self.kind is ValueKind.NIL:
            return NIL_TEXT
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.data else "false"
        if self.kind is ValueKind.FLOAT:
            return repr(self.data)
        if self.kind is ValueKind.UNSIGNED:
            return str(self.data)
        if self.kind is ValueKind.STRING:
            return self.data
        if self.kind is ValueKind.OBJECT:
            return TABLE_TEXT
        raise AssertionError(f"Unhandled value kind {self.kind}")

    def to_python(self) -> Any:
        """Plain Python form: objects become dicts, nil becomes None."""
        if self.kind is ValueKind.OBJECT:
            return self.data.to_dict()
        return self.data

    def __bool__(self) -> bool:
        return self.kind is not ValueKind.NIL

    def __repr__(self) -> str:
        if self.kind is ValueKind.OBJECT:
            return f"FValue(OBJECT, <{len(self.data)} children>)"
        return f"FValue({self.kind.name}, {self.data!r})"


def _payload_matches(kind: ValueKind, data: Any) -> bool:
    if kind is ValueKind.NIL:
        return data is None
    if kind is ValueKind.OBJECT:
        return isinstance(data, FObject)
    if kind is ValueKind.STRING:
        return isinstance(data, str)
    if kind is ValueKind.UNSIGNED:
        return (
            isinstance(data, int)
            and not isinstance(data, bool)
            and 0 <= data <= UINT64_MAX
        )
    if kind is ValueKind.FLOAT:
        return isinstance(data, float)
    if kind is ValueKind.BOOLEAN:
        return isinstance(data, bool)
    return False


@dataclass(frozen=True)
class FKeyValue:
    """One (key, value) child of an FObject."""
    key: str
    value: FValue

    def table(self) -> FObject:
        return self.value.obj()


class FObject:
    """
    A keyed container of FValues.

    Children are kept sorted by key (plain code point order, so "10" comes
    before "2") and name_to_index always matches that order. Build an object
    with add(), then call finish() to sort, index and freeze it.

    FObject.INVALID is the shared empty, falsy object returned by failed
    table lookups.
    """

    INVALID: ClassVar[FObject]

    def __init__(self, valid: bool = True):
        self.valid = valid
        self.children: list[FKeyValue] = []
        self.name_to_index: dict[str, int] = {}
        self._frozen = False

    # Construction

    def add(self, key: str, value: FValue) -> None:
        """Append a child. Order does not matter until sort()."""
        if self._frozen:
            raise RuntimeError("FObject is frozen")
        self.children.append(FKeyValue(key, value))

    def sort(self) -> None:
        """
        Sort children by key and rebuild the name index.

        If a key was added twice the last value wins.
        """
        if self._frozen:
            raise RuntimeError("FObject is frozen")
        latest: dict[str, FKeyValue] = {}
        for entry in self.children:
            latest[entry.key] = entry
        self.children = sorted(latest.values(), key=lambda entry: entry.key)
        self.name_to_index = {
            entry.key: index for index, entry in enumerate(self.children)
        }

    def freeze(self) -> None:
        self._frozen = True

    def finish(self) -> FObject:
        """Sort and freeze; returns self for chaining."""
        self.sort()
        self.freeze()
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # Queries

    def child(self, key: str) -> FValue:
        """Get a child value, or nil if the key is absent."""
        index = self.name_to_index.get(key)
        if index is None:
            return FValue.NIL
        return self.children[index].value

    def table(self, key: str) -> FObject:
        """Get a child object, or FObject.INVALID if absent or not a table."""
        return self.child(key).obj()

    def find(self, path: str | Sequence[str]) -> FValue:
        """
        Follow a path of keys down the tree.

        Args:
            path: Either "a/b/c" or a sequence of keys

        Returns:
            The value at the end of the path, or nil if any step is missing
        """
        keys = [k for k in path.split("/") if k] if isinstance(path, str) else list(path)
        current = FValue.from_object(self) if self.valid else FValue.NIL
        for key in keys:
            current = current.obj().child(key)
            if not current:
                break
        return current

    def keys(self) -> list[str]:
        return [entry.key for entry in self.children]

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of the subtree as nested dicts (keys in sorted order)."""
        return {entry.key: entry.value.to_python() for entry in self.children}

    def __getitem__(self, key: str) -> FValue:
        return self.child(key)

    def __contains__(self, key: object) -> bool:
        return key in self.name_to_index

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[FKeyValue]:
        return iter(self.children)

    def __bool__(self) -> bool:
        return self.valid

    def __repr__(self) -> str:
        if not self.valid:
            return "FObject(<invalid>)"
        return f"FObject({len(self.children)} children)"

    # Traversal

    def visit(self, callback: VisitCallback) -> VisitResult:
        """
        Walk the tree depth first.

        For every child that is an object the callback gets ENTER. Returning
        DESCEND (or None) walks into it and is followed by LEAVE once the
        subtree is done; returning CONTINUE skips the subtree and no LEAVE is
        sent. Scalar children get a single LEAF call. EXIT from any call stops
        the whole walk.

        Returns:
            VisitResult.EXIT if the walk was stopped, else VisitResult.CONTINUE
        """
        for entry in self.children:
            nested = entry.value.as_object()
            if nested is None:
                if callback(VisitDirection.LEAF, entry.key, entry.value) is VisitResult.EXIT:
                    return VisitResult.EXIT
                continue

            result = callback(VisitDirection.ENTER, entry.key, entry.value)
            if result is VisitResult.EXIT:
                return VisitResult.EXIT
            if result is VisitResult.CONTINUE:
                continue
            if nested.visit(callback) is VisitResult.EXIT:
                return VisitResult.EXIT
            if callback(VisitDirection.LEAVE, entry.key, entry.value) is VisitResult.EXIT:
                return VisitResult.EXIT
        return VisitResult.CONTINUE


FValue.NIL = FValue()
FObject.INVALID = FObject(valid=False)
FObject.INVALID.freeze()
