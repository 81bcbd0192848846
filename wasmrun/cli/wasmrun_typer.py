import asyncio
from functools import wraps
from typing import Any, Callable

import typer
from typer.core import TyperCommand

from wasmrun.cli._runners import _run_command
from wasmrun.cli.args import Base_Args
from wasmrun.vendored.dataclass_typer import dataclass_typer

USAGE_EXIT_CODE = 1


def is_usage_error(e: BaseException) -> bool:
    # typer may raise the UsageError of the installed click or of its own
    # bundled copy of click: match both by name
    return any(cls.__name__ == "UsageError" for cls in type(e).__mro__)


class WasmRunCommand(TyperCommand):
    """
    Command class with make_context overridden to exit with status 1 (instead
    of click's default 2) on usage errors, e.g. when MODULE_NAME or
    EXPORT_NAME are missing.
    """

    def make_context(
        self,
        info_name: str | None,
        args: list[str],
        parent: Any = None,
        **extra: Any,
    ) -> Any:
        try:
            return super().make_context(info_name, args, parent, **extra)
        except Exception as e:
            if is_usage_error(e):
                e.exit_code = USAGE_EXIT_CODE  # type: ignore
            raise


class WasmRunTyper(typer.Typer):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["add_completion"] = (
            False  # Hide the default --install-completion and --show-completion options for cleanliness
        )
        super().__init__(*args, **kwargs)

    def wasmrun_command(self, user_func: Any, /, **cmd_kwargs: Any) -> Callable:
        """
        Turns async function into the wasmrun command
        The async function should take a single dataclass as an argument
        """

        def syncify(f: Callable[["Base_Args"], Any]) -> Callable[["Base_Args"], Any]:
            @wraps(f)
            def inner(args: "Base_Args") -> Any:
                return asyncio.run(_run_command(f, args))

            return inner

        # options go before MODULE_NAME: everything after it is passed
        # untouched, so that e.g. "-5" and "-0x1d" reach the export as ARGS
        cmd_kwargs.setdefault("context_settings", {"allow_interspersed_args": False})
        return self.command(cls=WasmRunCommand, **cmd_kwargs)(
            dataclass_typer(syncify(user_func))
        )
