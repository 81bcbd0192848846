from contextlib import contextmanager
from typing import Any, Optional

from wasmrun.colors import ColorFormatter


class WasmRunError(Exception):
    """
    Base class for all the errors which wasmrun reports to the user.

    Each subclass has an 'etype', which is the name shown in front of the
    message, e.g.:

        ExportNotFoundError: export 'sub' not found in ./dist/math.wasm
    """
    etype = 'WasmRunError'
    message: str

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.format(use_colors=False)

    def format(self, use_colors: bool = True) -> str:
        fmt = ColorFormatter(use_colors)
        prefix = fmt.set('red', self.etype)
        return f'{prefix}: {self.message}'

    @contextmanager
    @staticmethod
    def raises(etype: str, match: Optional[str] = None) -> Any:
        """
        Equivalent to pytest.raises(WasmRunError, ...), but also checks the
        etype.
        """
        import pytest

        with pytest.raises(WasmRunError, match=match) as excinfo:
            yield excinfo
        exc = excinfo.value
        assert isinstance(exc, WasmRunError)
        if exc.etype != etype:
            msg = f'Expected WasmRunError of type {etype}, but got {exc.etype}'
            pytest.fail(msg)


class UsageError(WasmRunError):
    etype = 'UsageError'


class ModuleLoadError(WasmRunError):
    etype = 'ModuleLoadError'


class InstantiationError(WasmRunError):
    etype = 'InstantiationError'


class ExportNotFoundError(WasmRunError):
    etype = 'ExportNotFoundError'
    name: str

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class ConversionError(WasmRunError):
    etype = 'ConversionError'


class RuntimeTrap(WasmRunError):
    etype = 'RuntimeTrap'


class StackOverflow(RuntimeTrap):
    etype = 'StackOverflow'
