"""Lifecycle adapter between a build host and the script orchestrator.

The host notifies three lifecycle points; each maps to one phase:

    before_compile(params, callback)       -> before-build
    after_emit(compilation, callback)      -> after-emit
    done(stats)                            -> on-exit

``callback`` is the host's continuation.  It is invoked exactly once when the
phase's scripts succeed.  When a script fails, the ``PhaseError`` propagates
to the host instead, which halts its pipeline.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from script_runner.config import ScriptRunnerOptions
from script_runner.executor import ScriptResult
from script_runner.models import Phase
from script_runner.phases import ScriptOrchestrator

PLUGIN_NAME = "ScriptRunnerPlugin"

# Event names used by hosts that predate the ``hooks`` registry.
LEGACY_EVENTS: dict[Phase, str] = {
    Phase.BEFORE_BUILD: "before-compile",
    Phase.AFTER_EMIT: "after-emit",
    Phase.ON_EXIT: "done",
}


class ScriptRunnerPlugin:
    """Runs user scripts at the before-build, after-emit and exit lifecycle points.

    Args:
        options: A ``ScriptRunnerOptions`` instance or a mapping in the
            camelCase configuration form.  Keyword arguments are used when
            *options* is omitted.
        platform: ``sys.platform`` value to select execution paths for.
            Defaults to the running interpreter's platform.

    Example::

        plugin = ScriptRunnerPlugin({"onBuildStart": "echo A && echo B", "dev": False})
        plugin.apply(compiler)
    """

    def __init__(
        self,
        options: ScriptRunnerOptions | Mapping[str, Any] | None = None,
        *,
        platform: str | None = None,
        **kwargs: Any,
    ) -> None:
        if options is None:
            options = kwargs
        if not isinstance(options, ScriptRunnerOptions):
            options = ScriptRunnerOptions.model_validate(dict(options))

        self.name = PLUGIN_NAME
        self.options = options
        self.orchestrator = ScriptOrchestrator(options, platform)

    # ------------------------------------------------------------------
    # Lifecycle entry points
    # ------------------------------------------------------------------

    async def before_compile(self, params: Any, callback: Callable[..., None]) -> None:
        """Host notification: a compilation is about to start."""
        await self.orchestrator.run_phase(Phase.BEFORE_BUILD)
        callback()

    async def after_emit(self, compilation: Any, callback: Callable[..., None]) -> None:
        """Host notification: build output has been written."""
        await self.orchestrator.run_phase(Phase.AFTER_EMIT)
        callback()

    async def done(self, stats: Any) -> list[ScriptResult]:
        """Host notification: the build run has finished."""
        return await self.orchestrator.run_phase(Phase.ON_EXIT)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def apply(self, compiler: Any) -> None:
        """Register the entry points with *compiler*.

        Hosts exposing a ``hooks`` registry get ``tap_async`` registrations
        for the two phases with continuations and a ``tap_promise``
        registration for ``done``.  Hosts without one are registered through
        their ``plugin(event_name, fn)`` method.

        Raises:
            TypeError: If *compiler* offers neither registration mechanism.
        """
        hooks = getattr(compiler, "hooks", None)
        if hooks is not None:
            hooks.before_compile.tap_async(self.name, self.before_compile)
            hooks.after_emit.tap_async(self.name, self.after_emit)
            hooks.done.tap_promise(self.name, self.done)
            return

        register = getattr(compiler, "plugin", None)
        if register is None:
            raise TypeError(
                f"{type(compiler).__name__} exposes neither a 'hooks' registry "
                "nor a 'plugin()' method"
            )
        register(LEGACY_EVENTS[Phase.BEFORE_BUILD], self.before_compile)
        register(LEGACY_EVENTS[Phase.AFTER_EMIT], self.after_emit)
        register(LEGACY_EVENTS[Phase.ON_EXIT], self.done)

    def rearm(self) -> None:
        """Restore every phase's declared scripts.

        For hosts that re-read configuration on each watch iteration: calling
        this between iterations makes development-mode phases fire again.
        """
        self.orchestrator.state.reset()
