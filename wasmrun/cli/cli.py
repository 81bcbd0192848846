from wasmrun.cli.run import run
from wasmrun.cli.wasmrun_typer import WasmRunTyper

app = WasmRunTyper(pretty_exceptions_enable=False)

app.wasmrun_command(run, name="run")
