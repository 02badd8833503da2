"""CPU-versus-CPU entrypoint: both seats are played by BotLogic."""

import sys

from .cli import main as cli_main


def main() -> None:
    # Force both seats to the CPU before any other arguments
    sys.argv.insert(1, "--cpu-vs-cpu")
    raise SystemExit(cli_main())


if __name__ == "__main__":
    main()
