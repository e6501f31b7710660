"""Minimal in-process build host.

Provides the hook registry ``ScriptRunnerPlugin.apply`` expects so that the
lifecycle scripts can be driven without an external build tool: the CLI wraps
an arbitrary build command with it, and the end-to-end tests use it to
simulate watch-mode rebuilds.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any


class HookError(Exception):
    """Raised when a tapped function misuses its continuation."""


class BuildError(Exception):
    """Raised when the wrapped build command exits unsuccessfully."""

    def __init__(self, command: str, exit_code: int) -> None:
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"Build command exited with code {exit_code}: {command}")


class AsyncHook:
    """An ordered list of asynchronous taps for one lifecycle point.

    ``tap_async`` functions receive ``(arg, callback)`` and must call
    ``callback()`` exactly once (``callback(error)`` to fail).
    ``tap_promise`` functions receive ``(arg)`` and are simply awaited.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.taps: list[tuple[str, str, Callable[..., Awaitable[Any]]]] = []

    def tap_async(self, plugin_name: str, fn: Callable[..., Awaitable[Any]]) -> None:
        self.taps.append(("async", plugin_name, fn))

    def tap_promise(self, plugin_name: str, fn: Callable[..., Awaitable[Any]]) -> None:
        self.taps.append(("promise", plugin_name, fn))

    async def call(self, arg: Any = None) -> None:
        """Run every tap in registration order, stopping at the first error."""
        for kind, plugin_name, fn in self.taps:
            if kind == "promise":
                await fn(arg)
                continue

            errors: list[BaseException | None] = []

            def callback(error: BaseException | None = None) -> None:
                errors.append(error)

            await fn(arg, callback)

            if len(errors) != 1:
                raise HookError(
                    f"{plugin_name} called the '{self.name}' continuation "
                    f"{len(errors)} times (expected exactly once)"
                )
            if errors[0] is not None:
                raise errors[0]


class CompilerHooks:
    """The hook registry exposed as ``Compiler.hooks``."""

    def __init__(self) -> None:
        self.before_compile = AsyncHook("before_compile")
        self.after_emit = AsyncHook("after_emit")
        self.done = AsyncHook("done")


class Compiler:
    """Runs an optional shell build command between the lifecycle hooks.

    Attributes:
        build_command: Shell command line for the build step, or ``None`` to
            run the hooks around an empty build.
        builds: Number of completed build iterations.
    """

    def __init__(self, build_command: str | None = None) -> None:
        self.hooks = CompilerHooks()
        self.build_command = build_command
        self.builds = 0
        self.closed = False

    async def run(self) -> None:
        """One build iteration: before_compile, build, after_emit."""
        await self.hooks.before_compile.call({"iteration": self.builds + 1})
        await self._build()
        self.builds += 1
        await self.hooks.after_emit.call({"iteration": self.builds})

    async def watch(self, iterations: int) -> None:
        """Run *iterations* consecutive builds, as a watch session would."""
        for _ in range(iterations):
            await self.run()

    async def close(self) -> None:
        """Fire ``done`` once; later calls are ignored."""
        if self.closed:
            return
        self.closed = True
        await self.hooks.done.call({"builds": self.builds})

    async def _build(self) -> None:
        if not self.build_command:
            return
        process = await asyncio.create_subprocess_shell(self.build_command)
        exit_code = await process.wait()
        if exit_code != 0:
            raise BuildError(self.build_command, exit_code)
