"""
Load a WASM module, instantiate it against the HostEnvironment and call one
of its exports.

The lifecycle of an Invoker is linear:

    validated -> bytes_loaded -> instantiating -> invoked -> reported

Any failure moves it to the terminal state 'failed'. Errors which happen
before we have an instance (ModuleLoadError, InstantiationError) are raised;
errors which happen while resolving or calling the export are returned
inside the InvocationResult.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, Sequence, TextIO
import fixedint
import wasmtime as wt
from wasmrun.colors import ColorFormatter
from wasmrun.env import EnvModule, HostEnvironment
from wasmrun.errors import (WasmRunError, UsageError, ModuleLoadError,
                            InstantiationError, ExportNotFoundError,
                            ConversionError, RuntimeTrap)
from wasmrun.llwasm import (LLWasmModule, LLWasmInstance, WasmTrap,
                            WasmtimeError)
from wasmrun.llwasm.wasmtime import ENGINE, get_wasi_config

WASM_EXT = '.wasm'

State = Literal['validated', 'bytes_loaded', 'instantiating', 'invoked',
                'reported', 'failed']

FIXED_INTS = {
    'i32': fixedint.Int32,
    'i64': fixedint.Int64,
}


@dataclass(frozen=True)
class InvocationRequest:
    module_name: str
    export_name: str
    args: tuple[str, ...] = ()
    base_dir: Path = Path('.')

    def __post_init__(self) -> None:
        if not self.module_name:
            raise UsageError('the module name cannot be empty')
        if not self.export_name:
            raise UsageError('the export name cannot be empty')

    @property
    def path(self) -> Path:
        filename = self.module_name
        if not filename.endswith(WASM_EXT):
            filename += WASM_EXT
        return self.base_dir / filename


@dataclass
class InvocationResult:
    value: Any = None
    error: Optional[WasmRunError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def format_value(self) -> str:
        if self.value is None:
            return ''
        elif isinstance(self.value, (list, tuple)):
            return ' '.join(str(v) for v in self.value)
        else:
            return str(self.value)


def parse_int(token: str, kind: str) -> int:
    digits = token.lstrip('+-').lower()
    base = 16 if digits.startswith('0x') else 10
    try:
        value = int(token, base)
    except ValueError:
        raise ConversionError(f'invalid {kind} argument: {token!r}')
    if FIXED_INTS[kind](value) != value:
        raise ConversionError(f'{kind} argument out of range: {token}')
    return value

def convert_arg(token: str, valtype: wt.ValType) -> int | float:
    kind = str(valtype)
    if kind in FIXED_INTS:
        return parse_int(token, kind)
    elif kind in ('f32', 'f64'):
        try:
            return float(token)
        except ValueError:
            raise ConversionError(f'invalid {kind} argument: {token!r}')
    else:
        raise ConversionError(f'unsupported parameter type: {kind}')

def convert_args(name: str, tokens: Sequence[str],
                 functype: wt.FuncType) -> list[int | float]:
    """
    Convert the command line tokens into the values expected by the
    signature of the export.
    """
    params = functype.params
    if len(tokens) != len(params):
        sig = ', '.join(str(p) for p in params)
        raise ConversionError(
            f'{name}({sig}) takes {len(params)} argument(s), '
            f'but {len(tokens)} were given')
    return [convert_arg(tok, p) for tok, p in zip(tokens, params)]


class Invoker:
    request: InvocationRequest
    state: State
    verbose: bool
    use_colors: bool
    fmt: ColorFormatter
    store: wt.Store
    env: Optional[HostEnvironment]
    ll: Optional[LLWasmInstance]

    def __init__(self, request: InvocationRequest, *, verbose: bool = False,
                 use_colors: bool = True) -> None:
        self.request = request
        self.state = 'validated'
        self.verbose = verbose
        self.use_colors = use_colors
        self.fmt = ColorFormatter(use_colors)
        self.store = wt.Store(ENGINE)
        self.env = None
        self.ll = None

    def log(self, message: str) -> None:
        if self.verbose:
            prefix = self.fmt.set('darkgray', '[wasmrun]')
            print(f'{prefix} {message}', file=sys.stderr)

    def set_state(self, state: State) -> None:
        self.log(f'{self.state} -> {state}')
        self.state = state

    def fail(self, err: WasmRunError) -> WasmRunError:
        self.set_state('failed')
        return err

    def load(self) -> bytes:
        path = self.request.path
        self.log(f'reading {path}')
        try:
            wasm_bytes = path.read_bytes()
        except OSError as e:
            raise self.fail(ModuleLoadError(
                f'cannot read {path}: {e.strerror or e}'))
        self.set_state('bytes_loaded')
        return wasm_bytes

    async def instantiate(self, wasm_bytes: bytes) -> LLWasmInstance:
        path = self.request.path
        self.set_state('instantiating')
        try:
            LLWasmModule.validate(wasm_bytes)
            llmod = LLWasmModule(str(path), wasm_bytes)
        except WasmtimeError as e:
            raise self.fail(InstantiationError(f'invalid module {path}: {e}'))

        self.env = HostEnvironment.new(self.store)
        wasi_config = None
        if llmod.needs_wasi():
            self.log('linking WASI')
            argv = [str(path), *self.request.args]
            wasi_config = get_wasi_config(argv)
        for imp in llmod.mod.imports:
            self.log(f'import {imp.module}.{imp.name}')

        try:
            self.ll = await LLWasmInstance.async_new(
                llmod,
                [EnvModule(self.env)],
                store = self.store,
                wasi_config = wasi_config,
            )
        except InstantiationError as e:
            raise self.fail(e)
        except (WasmtimeError, WasmTrap, RuntimeTrap) as e:
            msg = e.message if isinstance(e, WasmRunError) else str(e)
            raise self.fail(InstantiationError(
                f'cannot instantiate {path}: {msg}'))
        return self.ll

    def invoke(self) -> InvocationResult:
        assert self.ll is not None, 'call instantiate() first'
        name = self.request.export_name
        if name not in self.ll.function_exports():
            available = ', '.join(self.ll.function_exports()) or '<none>'
            err = ExportNotFoundError(
                name,
                f"export '{name}' not found in {self.request.path} "
                f"(available functions: {available})")
            return InvocationResult(error=self.fail(err))

        try:
            functype = self.ll.get_functype(name)
            args = convert_args(name, self.request.args, functype)
            value = self.ll.call(name, *args)
        except (ConversionError, RuntimeTrap) as e:
            return InvocationResult(error=self.fail(e))
        except (WasmTrap, WasmtimeError) as e:
            trap = RuntimeTrap(f'{name}: {e}')
            return InvocationResult(error=self.fail(trap))
        self.set_state('invoked')
        return InvocationResult(value=value)

    async def run(self) -> InvocationResult:
        """
        Load, instantiate and invoke. ModuleLoadError and
        InstantiationError are raised, everything else is reported in the
        result.
        """
        wasm_bytes = self.load()
        await self.instantiate(wasm_bytes)
        return self.invoke()

    def report(self, result: InvocationResult, *,
               out: Optional[TextIO] = None,
               errout: Optional[TextIO] = None) -> int:
        """
        Print the result and return the exit status of the process.
        """
        out = out or sys.stdout
        errout = errout or sys.stderr
        if result.error is not None:
            print(result.error.format(use_colors=self.use_colors),
                  file=errout)
            return 1
        text = result.format_value()
        if text:
            print(text, file=out)
        self.set_state('reported')
        return 0
