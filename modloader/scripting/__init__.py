"""
Lua scripting support.

Exports:
- ScriptHost: Runtime owner, bootstrap and data stages
- ModuleResolver: require() name to file mapping
- LuaMarshaller: Lua values to FValue/FObject
"""

from modloader.scripting.module_resolver import ModuleResolver
from modloader.scripting.marshal import LuaMarshaller
from modloader.scripting.host import ScriptHost

__all__ = [
    "ScriptHost",
    "ModuleResolver",
    "LuaMarshaller",
]
