"""Shared pytest fixtures for the build script runner test suite.

Provides:
- Mock asyncio subprocesses with configurable exit codes and output
- A ``spawn`` recorder that replaces both subprocess factories and records
  which execution path (shell or direct) every script took
- Ready-made option sets for development and production builds
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from script_runner.config import ScriptRunnerOptions


# ---------------------------------------------------------------------------
# Mock Subprocess
# ---------------------------------------------------------------------------

def make_process(returncode: int = 0, stdout: bytes = b"") -> MagicMock:
    """Build a mock ``asyncio.subprocess.Process``.

    ``stdout.read()`` hands out *stdout* as one chunk and then ``b""`` (end of
    stream), as it does when stderr is merged into stdout; ``wait()`` returns
    the exit code.
    """
    process = MagicMock()
    process.returncode = returncode
    process.pid = 12345
    process.stdout.read = AsyncMock(side_effect=[stdout, b""] if stdout else [b""])
    process.wait = AsyncMock(return_value=returncode)
    return process


class SpawnRecorder:
    """Stands in for ``asyncio.create_subprocess_shell`` / ``_exec``.

    Attributes:
        calls: ``("shell", command_line)`` or ``("direct", [program, *args])``
            tuples, in spawn order.
        returncodes: Exit codes handed out to successive spawns; once empty
            every process exits 0.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.returncodes: list[int] = []

    def _next_returncode(self) -> int:
        if self.returncodes:
            return self.returncodes.pop(0)
        return 0

    async def shell(self, cmd: str, **kwargs: Any) -> MagicMock:
        self.calls.append(("shell", cmd))
        return make_process(self._next_returncode(), stdout=f"{cmd}\n".encode("utf-8"))

    async def exec(self, program: str, *args: str, **kwargs: Any) -> MagicMock:
        self.calls.append(("direct", [program, *args]))
        return make_process(self._next_returncode())

    @property
    def paths(self) -> list[str]:
        return [kind for kind, _ in self.calls]


@pytest.fixture
def mock_subprocess():
    """Factory for mock subprocess instances.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(returncode=1)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    return make_process


@pytest.fixture
def spawn():
    """Patch both asyncio subprocess factories with a ``SpawnRecorder``."""
    recorder = SpawnRecorder()
    with patch("asyncio.create_subprocess_shell", new=recorder.shell), patch(
        "asyncio.create_subprocess_exec", new=recorder.exec
    ):
        yield recorder


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

@pytest.fixture
def dev_options() -> ScriptRunnerOptions:
    """Development (watch) build: before/after scripts fire once per session."""
    return ScriptRunnerOptions(
        onBuildStart="echo start-1 && echo start-2",
        onBuildEnd=["echo end-1", {"command": "echo", "args": ["end 2"]}],
        onBuildExit="echo exit-1",
        dev=True,
    )


@pytest.fixture
def prod_options(dev_options: ScriptRunnerOptions) -> ScriptRunnerOptions:
    """One-shot build: before/after scripts run on every invocation."""
    return dev_options.model_copy(update={"dev": False})
