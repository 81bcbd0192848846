"""
A pythonic wrapper around wasmtime.
"""

from typing import Any, Optional, Sequence
from typing_extensions import Self
import py.path
import wasmtime as wt
from wasmrun.errors import InstantiationError
from .base import HostModule, LLWasmModuleBase, LLWasmInstanceBase, LLWasmMemoryBase

WasmTrap = wt.Trap
WasmtimeError = wt.WasmtimeError

ENGINE = wt.Engine()


class LLWasmModule(LLWasmModuleBase):
    f: py.path.local
    mod: wt.Module

    def __init__(self, f: py.path.local | str,
                 wasm_bytes: Optional[bytes] = None) -> None:
        self.f = py.path.local(f)
        if wasm_bytes is None:
            wasm_bytes = self.f.read_binary()
        self.mod = wt.Module(ENGINE, wasm_bytes)

    @staticmethod
    def validate(wasm_bytes: bytes) -> None:
        """
        Raise WasmtimeError if wasm_bytes is not a valid WASM binary.
        """
        wt.Module.validate(ENGINE, wasm_bytes)

    def needs_wasi(self) -> bool:
        return any(imp.module.startswith('wasi_') for imp in self.mod.imports)


py2w = {
    int: wt.ValType.i32(),
    float: wt.ValType.f64(),
}

def FuncType_from_pyfunc(pyfunc: Any) -> wt.FuncType:
    annotations = pyfunc.__annotations__.copy()
    py_restype = annotations.pop('return')
    if py_restype is None:
        restypes = []
    else:
        restypes = [py2w[py_restype]]
    args = [py2w[pytype] for pytype in annotations.values()]
    return wt.FuncType(args, restypes)


EXTERN_KINDS = [
    (wt.FuncType, 'func'),
    (wt.Func, 'func'),
    (wt.GlobalType, 'global'),
    (wt.Global, 'global'),
    (wt.MemoryType, 'memory'),
    (wt.Memory, 'memory'),
    (wt.TableType, 'table'),
    (wt.Table, 'table'),
]

def extern_kind(obj: Any) -> str:
    """
    Return the kind of an import type or of a host object: 'func',
    'global', 'memory' or 'table'. Plain python callables count as 'func'.
    """
    for cls, kind in EXTERN_KINDS:
        if isinstance(obj, cls):
            return kind
    if callable(obj):
        return 'func'
    return type(obj).__name__


def get_linker(
        store: wt.Store,
        llmod: LLWasmModule,
        *,
        wasi_config: Optional[wt.WasiConfig] = None,
        hostmods: Optional[Sequence[HostModule]] = None,
    ) -> wt.Linker:
    """
    Setup a Linker which can be used to instantiate llmod.

    If wasi_config is supplied, the module will be linked against WASI.

    The remaining non-wasi imports expected by llmod are searched inside the
    HostModules.
    """
    hostmods = hostmods or []
    def find_attr(imp: Any) -> Any:
        assert hostmods is not None
        attrname = f'{imp.module}_{imp.name}'
        for hostmod in hostmods:
            obj = getattr(hostmod, attrname, None)
            if obj is not None:
                return obj
        raise InstantiationError(
            f'Missing WASM import: {imp.module}.{imp.name}')

    def get_extern(imp: Any) -> Any:
        obj = find_attr(imp)
        expected = extern_kind(imp.type)
        got = extern_kind(obj)
        if got != expected:
            raise InstantiationError(
                f'import {imp.module}.{imp.name}: expected {expected}, '
                f'got {got}')
        if isinstance(obj, wt.Func):
            return obj
        if isinstance(imp.type, wt.FuncType):
            functype = FuncType_from_pyfunc(obj)
            return wt.Func(store, functype, obj)
        return obj

    linker = wt.Linker(store.engine)
    if wasi_config:
        store.set_wasi(wasi_config)
        linker.define_wasi()

    for imp in llmod.mod.imports:
        if imp.module.startswith('wasi_'):
            continue
        assert imp.name is not None
        linker.define(store, imp.module, imp.name, get_extern(imp))

    return linker

def get_wasi_config(argv: Sequence[str]) -> wt.WasiConfig:
    wasi_config = wt.WasiConfig()
    wasi_config.argv = list(argv)
    wasi_config.inherit_stdin()
    wasi_config.inherit_stdout()
    wasi_config.inherit_stderr()
    return wasi_config


class LLWasmInstance(LLWasmInstanceBase):
    llmod: LLWasmModule
    store: wt.Store
    instance: wt.Instance
    mem: Optional['LLWasmMemory']

    def __init__(self, llmod: LLWasmModule,
                 hostmods: Sequence[HostModule] = (), *,
                 store: Optional[wt.Store] = None,
                 wasi_config: Optional[wt.WasiConfig] = None) -> None:
        self.llmod = llmod
        # memories, tables and globals provided by the hostmods must live in
        # the same store as the instance
        self.store = store if store is not None else wt.Store(ENGINE)
        linker = get_linker(
            self.store,
            self.llmod,
            wasi_config = wasi_config,
            hostmods = hostmods
        )
        self.instance = linker.instantiate(self.store, self.llmod.mod)
        memory = self.instance.exports(self.store).get('memory')
        if isinstance(memory, wt.Memory):
            self.mem = LLWasmMemory(self.store, memory)
        else:
            self.mem = None
        for hostmod in hostmods:
            hostmod.ll = self

    @classmethod
    async def async_new(cls, llmod: LLWasmModule,
                        hostmods: Sequence[HostModule] = (), *,
                        store: Optional[wt.Store] = None,
                        wasi_config: Optional[wt.WasiConfig] = None) -> Self:
        return cls(llmod, hostmods, store=store, wasi_config=wasi_config)

    @classmethod
    def from_file(cls, f: py.path.local | str,
                  hostmods: Sequence[HostModule] = ()) -> Self:
        llmod = LLWasmModule(f)
        return cls(llmod, hostmods)

    def get_export(self, name: str) -> Any:
        exports = self.instance.exports(self.store)
        wasm_obj = exports.get(name)
        if wasm_obj is None:
            raise AttributeError(name)
        return wasm_obj

    def all_exports(self) -> list[str]:
        return [exp.name for exp in self.llmod.mod.exports]

    def function_exports(self) -> list[str]:
        return [exp.name for exp in self.llmod.mod.exports
                if isinstance(exp.type, wt.FuncType)]

    def get_functype(self, name: str) -> wt.FuncType:
        func = self.get_export(name)
        assert isinstance(func, wt.Func)
        return func.type(self.store)

    def call(self, name: str, *args: Any) -> Any:
        func = self.get_export(name)
        assert isinstance(func, wt.Func)
        return func(self.store, *args)


class LLWasmMemory(LLWasmMemoryBase):
    """
    Thin wrapper around wt.Memory
    """
    store: wt.Store
    mem: wt.Memory

    def __init__(self, store: wt.Store, mem: wt.Memory):
        self.store = store
        self.mem = mem

    def read(self, addr: int, n: int) -> bytearray:
        """
        Read n bytes of memory at the given address.
        """
        return self.mem.read(self.store, addr, addr+n)

    def write(self, addr: int, b: bytes) -> None:
        self.mem.write(self.store, b, addr)
