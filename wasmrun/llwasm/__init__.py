"""
A Python wrapper around wasmtime.

It is called 'LL' because it exposes a low-level view on the code: the
concept of strings doesn't exist, we only have ints, floats and bytes of
memory.
"""
from .base import HostModule
from .wasmtime import (LLWasmModule, LLWasmInstance, LLWasmMemory, WasmTrap,
                       WasmtimeError)
