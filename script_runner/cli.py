"""Command-line entry point.

Wraps a build command with lifecycle scripts::

    python -m script_runner --on-build-start "rm -rf dist" -- npm run build
    python -m script_runner --config scripts.json --iterations 3
    build-script-runner --prod --on-build-end "echo built" -- make
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from script_runner.config import ScriptRunnerOptions
from script_runner.host import BuildError, Compiler, HookError
from script_runner.models import ScriptCommand
from script_runner.phases import PhaseError
from script_runner.plugin import ScriptRunnerPlugin
from script_runner.utils import format_duration, print_error, print_success


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="build-script-runner",
        description="Run scripts before a build, after its output is emitted, and on exit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m script_runner --on-build-start 'rm -rf dist' -- npm run build\n"
            "  python -m script_runner --config scripts.json --iterations 3\n"
        ),
    )
    parser.add_argument(
        "build",
        nargs="*",
        help="Build command to run between the before-build and after-emit scripts",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON options file (onBuildStart, onBuildEnd, onBuildExit, dev, verbose, safe). "
        "Without it options are read from SCRIPT_RUNNER_* environment variables.",
    )
    parser.add_argument("--on-build-start", default=None, help="Scripts joined with '&&'")
    parser.add_argument("--on-build-end", default=None, help="Scripts joined with '&&'")
    parser.add_argument("--on-build-exit", default=None, help="Scripts joined with '&&'")
    parser.add_argument(
        "--prod",
        action="store_true",
        help="Run before-build/after-emit scripts on every iteration (dev mode off)",
    )
    parser.add_argument(
        "--safe",
        action="store_true",
        help="Run every script through the shell",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Echo each command")
    parser.add_argument(
        "--iterations", "-n",
        type=int,
        default=1,
        help="Number of build iterations to run, simulating watch rebuilds (default: 1)",
    )
    return parser


def build_options(args: argparse.Namespace) -> ScriptRunnerOptions:
    """Merge the options file (or environment) with command-line overrides.

    Raises:
        FileNotFoundError: If ``--config`` names a missing file.
        pydantic.ValidationError: If the merged options are invalid.
    """
    if args.config:
        options = ScriptRunnerOptions.load(Path(args.config))
    else:
        options = ScriptRunnerOptions.from_env()

    overrides: dict[str, Any] = {}
    if args.on_build_start is not None:
        overrides["on_build_start"] = args.on_build_start
    if args.on_build_end is not None:
        overrides["on_build_end"] = args.on_build_end
    if args.on_build_exit is not None:
        overrides["on_build_exit"] = args.on_build_exit
    if args.prod:
        overrides["dev"] = False
    if args.safe:
        overrides["safe"] = True
    if args.verbose:
        overrides["verbose"] = True

    return ScriptRunnerOptions.model_validate({**options.model_dump(), **overrides})


async def run_lifecycle(
    options: ScriptRunnerOptions,
    build_command: str | None = None,
    iterations: int = 1,
) -> Compiler:
    """Run *iterations* builds wrapped with the configured scripts, then exit."""
    compiler = Compiler(build_command)
    ScriptRunnerPlugin(options).apply(compiler)
    await compiler.watch(iterations)
    await compiler.close()
    return compiler


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m script_runner``."""
    args = build_parser().parse_args(argv)

    if args.iterations < 1:
        print_error(f"Error: --iterations must be at least 1 (got {args.iterations})")
        sys.exit(2)

    try:
        options = build_options(args)
    except FileNotFoundError as exc:
        print_error(f"Error: Config file not found: {exc.filename}")
        sys.exit(2)
    except ValidationError as exc:
        print_error(f"Error: Invalid options:\n{exc}")
        sys.exit(2)

    build_command = None
    if args.build:
        build_command = ScriptCommand(command=args.build[0], args=args.build[1:]).command_line()

    start = time.monotonic()
    try:
        compiler = asyncio.run(run_lifecycle(options, build_command, args.iterations))
    except (PhaseError, BuildError, HookError) as exc:
        print_error(str(exc))
        sys.exit(1)

    elapsed = time.monotonic() - start
    print_success(
        f"{compiler.builds} build(s) completed in {format_duration(elapsed)}"
    )


if __name__ == "__main__":
    main()
