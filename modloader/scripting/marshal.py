"""
Lua value conversion.

Walks values pulled out of the Lua runtime and builds the FValue/FObject
tree. Number handling follows the Lua 5.3+ subtypes exposed by lupa:
- integer >= 0   -> UNSIGNED
- integer < 0    -> FLOAT
- float          -> FLOAT (5.0 stays a float)

Tables become FObjects with every key turned into a string; array parts get
no special treatment, so {10, 20} has keys "1" and "2".
"""

from __future__ import annotations

import logging
from typing import Any

import lupa

from modloader.core.errors import MarshalError
from modloader.core.values import FObject, FValue


class LuaMarshaller:
    """
    Converts lupa values into the value model.

    Usage:
        marshaller = LuaMarshaller(lua)
        data_raw = marshaller.convert(lua.globals().data.raw).obj()
    """

    def __init__(self, runtime: lupa.LuaRuntime):
        self.runtime = runtime
        self.logger = logging.getLogger(__name__)
        self.tables_converted = 0

    def convert(self, value: Any, path: str = "") -> FValue:
        """
        Convert one value (recursively for tables).

        Args:
            value: A value returned by lupa
            path: Dotted location used in error messages

        Raises:
            MarshalError: For functions, userdata, coroutines, foreign Python
                objects, self-containing tables and strings that are not
                valid UTF-8
        """
        return self._convert(value, path, self.runtime.table())

    def _convert(self, value: Any, path: str, on_path: Any) -> FValue:
        if value is None:
            return FValue.NIL
        if isinstance(value, bool):
            return FValue.from_bool(value)
        if isinstance(value, int):
            if value >= 0:
                return FValue.from_unsigned(value)
            return FValue.from_float(float(value))
        if isinstance(value, float):
            return FValue.from_float(value)
        if isinstance(value, str):
            return FValue.from_string(value)

        kind = lupa.lua_type(value)
        if kind == "table":
            return FValue.from_object(self._convert_table(value, path, on_path))
        if kind is None:
            raise MarshalError(path, f"unsupported Python value {type(value).__name__}")
        raise MarshalError(path, f"unsupported Lua type {kind}")

    def _convert_table(self, table: Any, path: str, on_path: Any) -> FObject:
        if on_path[table]:
            raise MarshalError(path, "table contains itself")
        on_path[table] = True

        obj = FObject()
        try:
            for key, item in table.items():
                name = self.key_to_string(key, path)
                child_path = f"{path}.{name}" if path else name
                obj.add(name, self._convert(item, child_path, on_path))
        except UnicodeDecodeError as e:
            # Raised by the table iterator for a key or value in this table
            raise MarshalError(path, f"string is not valid UTF-8: {e.reason}") from e

        on_path[table] = None
        self.tables_converted += 1
        return obj.finish()

    @staticmethod
    def key_to_string(key: Any, path: str = "") -> str:
        """
        String form of a table key.

        Floats use six fixed decimals, so 1.5 becomes "1.500000".

        Raises:
            MarshalError: For keys that are not strings, numbers or booleans
        """
        if isinstance(key, str):
            return key
        if isinstance(key, bool):
            return "true" if key else "false"
        if isinstance(key, int):
            return str(key)
        if isinstance(key, float):
            return f"{key:f}"
        kind = lupa.lua_type(key) or type(key).__name__
        raise MarshalError(path, f"unsupported key type {kind}")
