import pdb as stdlib_pdb  # to distinguish from the "--pdb" option
import sys
import time
import traceback
from contextlib import contextmanager
from typing import Any, Callable, Generator

from wasmrun.cli.args import Base_Args
from wasmrun.errors import WasmRunError


async def _run_command(user_func: Callable, args: "Base_Args") -> Any:
    """
    A wrapper around the user provided command,
    to catch/display wasmrun errors and to implement --pdb
    """
    try:
        return await user_func(args)
    except WasmRunError as e:
        use_colors = not args.no_colors and sys.stderr.isatty()
        print(e.format(use_colors=use_colors), file=sys.stderr)
        sys.exit(1)
    except Exception:
        if not args.pdb:
            raise
        traceback.print_exc()
        info = sys.exc_info()
        stdlib_pdb.post_mortem(info[2])
        sys.exit(1)


@contextmanager
def timer(name: str) -> Generator:
    a = time.time()
    yield
    b = time.time()
    print(f"{name}(): {b - a:.3f} seconds", file=sys.stderr)
