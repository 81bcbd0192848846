from typing import Any
import pytest
from wasmrun.errors import InstantiationError
from wasmrun.llwasm import (HostModule, LLWasmModule, LLWasmInstance,
                            WasmTrap, WasmtimeError)
from wasmrun.tests.support import MATH_WAT, write_wasm


class LogModule(HostModule):
    log: list[int]

    def __init__(self) -> None:
        self.log = []

    def env_log(self, x: int) -> None:
        self.log.append(x)

    def env_twice(self, x: int) -> int:
        return x * 2


@pytest.mark.usefixtures('init')
class TestLLWasm:
    tmpdir: Any

    @pytest.fixture
    def init(self, tmpdir):
        self.tmpdir = tmpdir

    def test_call(self):
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        ll = LLWasmInstance.from_file(f)
        assert ll.call('add', 4, 8) == 12
        assert ll.call('pair') == [1, 2]
        assert ll.call('nothing') is None

    def test_exports(self):
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        ll = LLWasmInstance.from_file(f)
        assert 'answer' in ll.all_exports()
        assert 'answer' not in ll.function_exports()
        assert ll.function_exports() == [
            'add', 'div', 'add64', 'half', 'pair', 'nothing', 'boom']
        assert ll.mem is None

    def test_get_export_missing(self):
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        ll = LLWasmInstance.from_file(f)
        with pytest.raises(AttributeError, match='sub'):
            ll.get_export('sub')

    def test_functype(self):
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        ll = LLWasmInstance.from_file(f)
        functype = ll.get_functype('add64')
        assert [str(p) for p in functype.params] == ['i64', 'i64']
        assert [str(r) for r in functype.results] == ['i64']

    def test_trap(self):
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        ll = LLWasmInstance.from_file(f)
        with pytest.raises(WasmTrap):
            ll.call('boom')

    def test_hostmods(self):
        src = r"""
        (module
          (import "env" "log" (func $log (param i32)))
          (import "env" "twice" (func $twice (param i32) (result i32)))
          (func (export "main") (param i32) (result i32)
            local.get 0
            call $log
            local.get 0
            call $twice)
        )
        """
        f = write_wasm(self.tmpdir, 'host', src)
        logmod = LogModule()
        ll = LLWasmInstance.from_file(f, [logmod])
        assert ll.call('main', 21) == 42
        assert logmod.log == [21]
        assert logmod.ll is ll

    def test_missing_import(self):
        src = r"""
        (module
          (import "env" "puts" (func $puts (param i32))))
        """
        f = write_wasm(self.tmpdir, 'puts', src)
        with pytest.raises(InstantiationError, match='Missing WASM import: env.puts'):
            LLWasmInstance.from_file(f, [LogModule()])

    def test_import_kind_mismatch(self):
        src = r"""
        (module
          (import "env" "log" (global i32)))
        """
        f = write_wasm(self.tmpdir, 'kind', src)
        with pytest.raises(InstantiationError,
                           match='import env.log: expected global, got func'):
            LLWasmInstance.from_file(f, [LogModule()])

    def test_validate(self):
        with pytest.raises(WasmtimeError):
            LLWasmModule.validate(b'this is not wasm')

    def test_needs_wasi(self):
        src = r"""
        (module
          (import "wasi_snapshot_preview1" "proc_exit" (func (param i32))))
        """
        f = write_wasm(self.tmpdir, 'wasi', src)
        assert LLWasmModule(f).needs_wasi()
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        assert not LLWasmModule(f).needs_wasi()

    def test_repr(self):
        f = write_wasm(self.tmpdir, 'math', MATH_WAT)
        assert repr(LLWasmModule(f)) == f'<LLWasmModule {f}>'
