"""
The host environment which wasmrun offers to the modules it instantiates.

It mimics the "env" namespace which old-style emscripten binaries expect:

    (import "env" "memory" (memory 256 256))
    (import "env" "table" (table 0 0 funcref))
    (import "env" "tableBase" (global i32))
    (import "env" "memoryBase" (global i32))
    (import "env" "STACKTOP" (global i32))
    (import "env" "STACK_MAX" (global i32))
    (import "env" "abortStackOverflow" (func (param i32)))

Modules which need only a subset of it (or nothing at all) are fine: only
the imports they declare are linked.
"""

from dataclasses import dataclass
import wasmtime as wt
from wasmrun.errors import StackOverflow
from wasmrun.llwasm import HostModule

PAGE_SIZE = 64 * 1024
INITIAL_PAGES = 256
MAXIMUM_PAGES = 256
TABLE_BASE = 0
MEMORY_BASE = 1024
STACKTOP = 0


@dataclass(frozen=True)
class HostEnvironment:
    store: wt.Store
    memory: wt.Memory
    table: wt.Table
    table_base: int
    memory_base: int
    stacktop: int
    stack_max: int

    @classmethod
    def new(cls, store: wt.Store) -> 'HostEnvironment':
        memtype = wt.MemoryType(wt.Limits(INITIAL_PAGES, MAXIMUM_PAGES))
        memory = wt.Memory(store, memtype)
        tabletype = wt.TableType(wt.ValType.funcref(), wt.Limits(0, 0))
        table = wt.Table(store, tabletype, None)
        return cls(
            store = store,
            memory = memory,
            table = table,
            table_base = TABLE_BASE,
            memory_base = MEMORY_BASE,
            stacktop = STACKTOP,
            stack_max = memory.data_len(store),
        )

    @property
    def memory_pages(self) -> int:
        return self.memory.size(self.store)


class EnvModule(HostModule):
    """
    Expose a HostEnvironment as the "env" import namespace.
    """
    env: HostEnvironment

    def __init__(self, env: HostEnvironment) -> None:
        self.env = env
        self.env_memory = env.memory
        self.env_table = env.table
        self.env_tableBase = self._const_i32(env.table_base)
        self.env_memoryBase = self._const_i32(env.memory_base)
        self.env_STACKTOP = self._const_i32(env.stacktop)
        self.env_STACK_MAX = self._const_i32(env.stack_max)

    def _const_i32(self, value: int) -> wt.Global:
        globaltype = wt.GlobalType(wt.ValType.i32(), False)
        return wt.Global(self.env.store, globaltype, value)

    def env_abortStackOverflow(self, allocSize: int) -> None:
        raise StackOverflow(
            f'stack overflow while allocating {allocSize} bytes '
            f'(STACK_MAX={self.env.stack_max})')
