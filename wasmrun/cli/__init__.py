from wasmrun.cli.cli import app
