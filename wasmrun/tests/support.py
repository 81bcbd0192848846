import textwrap
import py.path
import wasmtime as wt

MATH_WAT = r"""
(module
  (func (export "add") (param i32 i32) (result i32)
    local.get 0
    local.get 1
    i32.add)
  (func (export "div") (param i32 i32) (result i32)
    local.get 0
    local.get 1
    i32.div_s)
  (func (export "add64") (param i64 i64) (result i64)
    local.get 0
    local.get 1
    i64.add)
  (func (export "half") (param f64) (result f64)
    local.get 0
    f64.const 2
    f64.div)
  (func (export "pair") (result i32 i32)
    i32.const 1
    i32.const 2)
  (func (export "nothing"))
  (func (export "boom")
    unreachable)
  (global (export "answer") i32 (i32.const 42))
)
"""

# the "env" namespace expected by old-style emscripten binaries
EMSCRIPTEN_WAT = r"""
(module
  (import "env" "memory" (memory 256 256))
  (import "env" "table" (table 0 0 funcref))
  (import "env" "tableBase" (global $tableBase i32))
  (import "env" "memoryBase" (global $memoryBase i32))
  (import "env" "STACKTOP" (global $stacktop i32))
  (import "env" "STACK_MAX" (global $stack_max i32))
  (import "env" "abortStackOverflow" (func $abortStackOverflow (param i32)))
  (export "memory" (memory 0))
  (data (i32.const 1024) "hello\00")
  (func (export "_subject") (param i32 i32) (result i32)
    local.get 0
    local.get 1
    i32.add)
  (func (export "stack_max") (result i32)
    global.get $stack_max)
  (func (export "memory_base") (result i32)
    global.get $memoryBase)
  (func (export "overflow")
    i32.const 42
    call $abortStackOverflow)
)
"""


def write_wasm(dirpath: py.path.local, modname: str, wat: str) -> py.path.local:
    """
    Compile the given WAT source and write it to dirpath/modname.wasm
    """
    f = dirpath.join(f'{modname}.wasm')
    f.write_binary(bytes(wt.wat2wasm(textwrap.dedent(wat))))
    return f
