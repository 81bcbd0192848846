import sys
from contextlib import nullcontext

from wasmrun.cli._runners import timer
from wasmrun.cli.args import Run_Args
from wasmrun.invoker import InvocationRequest, Invoker


async def run(args: Run_Args) -> None:
    """Load MODULE_NAME.wasm and call EXPORT_NAME with the given ARGS"""
    req = InvocationRequest(
        args.module_name,
        args.export_name,
        tuple(args.args or ()),
        args.dir,
    )
    use_colors = not args.no_colors and sys.stderr.isatty()
    invoker = Invoker(req, verbose=args.verbose, use_colors=use_colors)
    wasm_bytes = invoker.load()
    await invoker.instantiate(wasm_bytes)
    with timer(req.export_name) if args.timeit else nullcontext():
        res = invoker.invoke()
    status = invoker.report(res)
    if status != 0:
        sys.exit(status)
