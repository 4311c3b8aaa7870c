from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping

from builder_tools.common import BuilderError, CommandError


def command_map() -> dict[str, Callable[[], None]]:
    """
    Map CLI command names to Python entry functions.

    Each value is a `main()` function from one pipeline module.
    """
    from builder_tools.env_file import main as write_env_file
    from builder_tools.pipeline import main as run_pipeline

    return {
        "run": run_pipeline,
        "write-env-file": write_env_file,
    }


def build_parser(commands: Mapping[str, Callable[[], None]]) -> argparse.ArgumentParser:
    """Build argument parser with one positional command choice."""
    parser = argparse.ArgumentParser(
        prog="python3 -m builder_tools.cli",
        description="Clone, build, and publish a Next.js application image.",
    )
    parser.add_argument("command", choices=sorted(commands.keys()))
    return parser


def run_command(command: str, commands: Mapping[str, Callable[[], None]]) -> None:
    """
    Run one registered command.

    `commands` is passed in to keep this function easy to test.
    """
    commands[command]()


def exit_code_for(exc: BuilderError) -> int:
    """Use the failing tool's exit status when there is one."""
    if isinstance(exc, CommandError) and exc.returncode > 0:
        return exc.returncode
    return 1


def main(argv: list[str] | None = None) -> None:
    # Build command registry once so parser and dispatcher use the same keys.
    commands = command_map()
    parser = build_parser(commands)
    args = parser.parse_args(argv)

    try:
        run_command(args.command, commands)
    except BuilderError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(exit_code_for(exc)) from exc


if __name__ == "__main__":
    main()
