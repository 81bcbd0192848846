from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

from typer import Argument, Option


@dataclass
class Base_Args:
    """These arguments can be applied to any wasmrun command"""

    pdb: Annotated[
        bool,
        Option("--pdb", help="Enter interp-level debugger in case of error"),
    ] = False

    verbose: Annotated[
        bool,
        Option("-v", "--verbose", help="Print what happens on stderr"),
    ] = False

    no_colors: Annotated[
        bool,
        Option(
            "--no-colors",
            envvar="WASMRUN_NO_COLORS",
            help="Don't use ANSI colors in error messages",
        ),
    ] = False


@dataclass
class Module_Required_Args:
    module_name: Annotated[
        str,
        Argument(
            help="Name of the module; '.wasm' is appended to find the file",
            show_default=False,
        ),
    ]
    export_name: Annotated[
        str,
        Argument(help="Name of the exported function to call", show_default=False),
    ]
    # Since these arguments don't have a default value, this class must come
    # last in the list of base classes of dataclasses that inherit from it


@dataclass
class _run_options:
    args: Annotated[
        Optional[list[str]],
        Argument(help="Arguments passed to the export", show_default=False),
    ] = None

    dir: Annotated[
        Path,
        Option(
            "-d",
            "--dir",
            envvar="WASMRUN_DIR",
            help="Directory which contains the .wasm modules",
            file_okay=False,
        ),
    ] = Path(".")

    timeit: Annotated[
        bool,
        Option("--timeit", help="Print execution time"),
    ] = False


@dataclass
class Run_Args(Base_Args, _run_options, Module_Required_Args): ...
