"""Script execution strategies.

A script runs either through the platform shell or as a direct process spawn.
The choice is made per invocation by :func:`select_execution_path`:

* ``SHELL``  -- on Windows, where executables are often batch files or shell
  builtins that cannot be spawned directly, and whenever safe mode is on.
  The original command line is handed to the shell unsplit, and the child's
  stderr is merged into its stdout and relayed, chunk by chunk as it is
  produced, to this process's stdout.
* ``DIRECT`` -- everywhere else.  The normalized command is spawned with its
  argument list and inherits this process's standard streams.

Each execution is awaited until the child exits; a start failure or a
non-zero exit status raises :class:`ScriptError`.
"""

from __future__ import annotations

import asyncio
import sys
import time
from dataclasses import dataclass
from enum import Enum

from script_runner.config import RunnerOptions
from script_runner.models import ScriptCommand, ScriptDeclaration, display_script, normalize
from script_runner.utils import console, format_duration, print_command

SHELL_PLATFORMS: frozenset[str] = frozenset({"win32"})
_RELAY_CHUNK_SIZE = 4096


class ExecutionPath(str, Enum):
    """How a script is handed to the operating system."""
    SHELL = "shell"
    DIRECT = "direct"


def select_execution_path(platform: str, safe_mode: bool) -> ExecutionPath:
    """Choose the execution path for *platform* (a ``sys.platform`` value)."""
    if platform in SHELL_PLATFORMS or safe_mode:
        return ExecutionPath.SHELL
    return ExecutionPath.DIRECT


@dataclass
class ScriptResult:
    """Outcome of one successful script execution."""

    script: str
    path: ExecutionPath
    exit_code: int = 0
    duration_seconds: float = 0.0
    output: str = ""


class ScriptError(Exception):
    """Raised when a script cannot be started or exits unsuccessfully."""

    def __init__(
        self,
        message: str,
        script: str,
        path: ExecutionPath,
        exit_code: int | None = None,
    ):
        self.script = script
        self.path = path
        self.exit_code = exit_code
        super().__init__(message)


# ---------------------------------------------------------------------------
# Executors
# ---------------------------------------------------------------------------


def _relay_to_stdout(chunk: bytes) -> None:
    """Write raw child output to our stdout as soon as it arrives."""
    sys.stdout.flush()
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(chunk.decode(sys.stdout.encoding or "utf-8", errors="replace"))
    else:
        buffer.write(chunk)
        buffer.flush()
    sys.stdout.flush()


class ScriptExecutor:
    """Base class: runs one script to completion and reports the outcome."""

    path: ExecutionPath

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    async def execute(self, declaration: ScriptDeclaration) -> ScriptResult:
        """Run *declaration* and wait for it to exit.

        Returns:
            A ``ScriptResult`` for a zero exit status.

        Raises:
            ScriptError: If the command is empty, the process cannot be
                started, exits with a non-zero status, or is killed by a
                signal.
        """
        script = display_script(declaration)
        command = declaration.command if isinstance(declaration, ScriptCommand) else declaration
        if not command.strip():
            raise ScriptError(
                f"Empty command in script: {script!r}", script=script, path=self.path
            )
        if self.verbose:
            print_command(script)

        start_time = time.monotonic()
        exit_code, output = await self._spawn(declaration, script)
        elapsed = time.monotonic() - start_time

        if exit_code < 0:
            raise ScriptError(
                f"Script terminated by signal {-exit_code}: {script}",
                script=script,
                path=self.path,
                exit_code=exit_code,
            )
        if exit_code != 0:
            raise ScriptError(
                f"Script exited with code {exit_code}: {script}",
                script=script,
                path=self.path,
                exit_code=exit_code,
            )

        if self.verbose:
            console.print(f"  [dim]finished in {format_duration(elapsed)}[/dim]")

        return ScriptResult(
            script=script,
            path=self.path,
            exit_code=exit_code,
            duration_seconds=elapsed,
            output=output,
        )

    async def _spawn(self, declaration: ScriptDeclaration, script: str) -> tuple[int, str]:
        """Start the process, wait for it, and return ``(exit_code, output)``."""
        raise NotImplementedError


class ShellExecutor(ScriptExecutor):
    """Runs the unsplit command line through the platform shell."""

    path = ExecutionPath.SHELL

    async def _spawn(self, declaration: ScriptDeclaration, script: str) -> tuple[int, str]:
        try:
            process = await asyncio.create_subprocess_shell(
                script,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as exc:
            raise ScriptError(
                f"Could not start shell for: {script} ({exc})",
                script=script,
                path=self.path,
            ) from exc

        assert process.stdout is not None  # guaranteed by PIPE
        chunks: list[bytes] = []
        while True:
            chunk = await process.stdout.read(_RELAY_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
            _relay_to_stdout(chunk)

        exit_code = await process.wait()
        return exit_code, b"".join(chunks).decode("utf-8", errors="replace")


class DirectExecutor(ScriptExecutor):
    """Spawns the normalized command without a shell, inheriting stdio."""

    path = ExecutionPath.DIRECT

    async def _spawn(self, declaration: ScriptDeclaration, script: str) -> tuple[int, str]:
        normalized = normalize(declaration)
        if not normalized.command:
            raise ScriptError(
                f"Empty command in script: {script!r}", script=script, path=self.path
            )

        try:
            process = await asyncio.create_subprocess_exec(
                normalized.command, *normalized.args
            )
        except FileNotFoundError as exc:
            raise ScriptError(
                f"Command not found: '{normalized.command}'. "
                "Ensure it is installed and in PATH, or enable safe mode to run it through the shell.",
                script=script,
                path=self.path,
            ) from exc
        except PermissionError as exc:
            raise ScriptError(
                f"Permission denied executing: '{normalized.command}'.",
                script=script,
                path=self.path,
            ) from exc
        except OSError as exc:
            raise ScriptError(
                f"Could not start '{normalized.command}': {exc}",
                script=script,
                path=self.path,
            ) from exc

        exit_code = await process.wait()
        return exit_code, ""


_EXECUTORS: dict[ExecutionPath, type[ScriptExecutor]] = {
    ExecutionPath.SHELL: ShellExecutor,
    ExecutionPath.DIRECT: DirectExecutor,
}


def get_executor(options: RunnerOptions, platform: str | None = None) -> ScriptExecutor:
    """Return the executor for the current platform and *options*.

    Args:
        options: Runner switches; ``safe_mode`` forces the shell path.
        platform: ``sys.platform`` value to decide for.  Defaults to the
            running interpreter's platform.
    """
    path = select_execution_path(platform or sys.platform, options.safe_mode)
    return _EXECUTORS[path](verbose=options.verbose)


async def execute_script(
    declaration: ScriptDeclaration,
    options: RunnerOptions,
    platform: str | None = None,
) -> ScriptResult:
    """Run one script with the executor chosen for *options* and *platform*."""
    return await get_executor(options, platform).execute(declaration)
