from wasmrun.cli import app

def main() -> None:
    app(prog_name="wasmrun")

if __name__ == '__main__':
    main()
