import struct
from typing import Any, Optional

import py.path


class LLWasmModuleBase:
    f: py.path.local

    def __repr__(self) -> str:
        return f'<LLWasmModule {self.f}>'


class LLWasmInstanceBase:
    mem: Optional['LLWasmMemoryBase']

    def get_export(self, name: str) -> Any:
        raise NotImplementedError

    def all_exports(self) -> list[str]:
        raise NotImplementedError

    def function_exports(self) -> list[str]:
        raise NotImplementedError

    def call(self, name: str, *args: Any) -> Any:
        raise NotImplementedError


class HostModule:
    """
    Base class for host modules.

    Each host module can provide one or more WASM imports, used by
    get_linker(). The import "mod"."name" is looked up as the attribute
    "mod_name": functions are plain methods whose annotations give the WASM
    signature, memories/tables/globals are wasmtime objects.
    """
    ll: 'LLWasmInstanceBase' # this attribute is set by LLWasmInstance.__init__


class LLWasmMemoryBase:

    def read(self, addr: int, n: int) -> bytearray:
        raise NotImplementedError

    def write(self, addr: int, b: bytes) -> None:
        raise NotImplementedError

    def read_i32(self, addr: int) -> int:
        rawbytes = self.read(addr, 4)
        return struct.unpack('<i', rawbytes)[0]

    def read_i8(self, addr: int) -> int:
        rawbytes = self.read(addr, 1)
        return rawbytes[0]

    def read_cstr(self, addr: int) -> bytearray:
        """
        Read the NULL-terminated string starting at addr.
        """
        n = 0
        while self.read_i8(addr + n) != 0:
            n += 1
        return self.read(addr, n)

    def write_i32(self, addr: int, v: int) -> None:
        self.write(addr, struct.pack('<i', v))
