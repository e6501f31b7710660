"""Phase runner and per-phase script state.

``PhaseState`` owns the pending script list of every phase and is the only
thing that changes it.  In development (watch) mode the before-build and
after-emit lists are cleared after their first successful run, so later
rebuilds of the same session skip them; the on-exit list is never cleared.

``PhaseRunner`` executes one phase's scripts strictly one after another and
stops at the first failure.  ``ScriptOrchestrator`` ties the two together:
it is what the lifecycle adapter calls for each host notification.
"""

from __future__ import annotations

import sys

from pydantic import BaseModel, Field

from script_runner.config import RunnerOptions, ScriptRunnerOptions
from script_runner.executor import ScriptError, ScriptResult, get_executor
from script_runner.models import Phase, ScriptDeclaration
from script_runner.utils import print_phase_header


class PhaseError(Exception):
    """Raised when a script of a phase fails; aborts the rest of the phase."""

    def __init__(self, phase: Phase, message: str, script: str | None = None) -> None:
        self.phase = phase
        self.script = script
        super().__init__(f"Phase {phase.value} ({phase.description}): {message}")


# ---------------------------------------------------------------------------
# Phase state
# ---------------------------------------------------------------------------


class PhaseConfig(BaseModel):
    """Declared scripts of one phase and whether a successful run clears them."""

    scripts: tuple[ScriptDeclaration, ...] = Field(default=())
    clear_after_run: bool = Field(default=False)


class PhaseState:
    """Tracks the pending scripts of each phase.

    Attributes:
        declared: The configuration each phase was created with.  Never
            mutated; ``reset()`` restores pending lists from it.
    """

    def __init__(self, declared: dict[Phase, PhaseConfig]) -> None:
        self.declared = {phase: declared.get(phase, PhaseConfig()) for phase in Phase}
        self._pending: dict[Phase, tuple[ScriptDeclaration, ...]] = {
            phase: config.scripts for phase, config in self.declared.items()
        }

    @classmethod
    def from_options(cls, options: ScriptRunnerOptions) -> "PhaseState":
        """Build the state for *options*; only development mode clears phases."""
        return cls(
            {
                phase: PhaseConfig(
                    scripts=options.scripts_for(phase),
                    clear_after_run=options.dev and phase is not Phase.ON_EXIT,
                )
                for phase in Phase
            }
        )

    def pending(self, phase: Phase) -> tuple[ScriptDeclaration, ...]:
        """Return the scripts the next run of *phase* will execute."""
        return self._pending[phase]

    def is_empty(self, phase: Phase) -> bool:
        return not self._pending[phase]

    def complete(self, phase: Phase) -> None:
        """Apply the clear policy after a successful run of *phase*."""
        # on-exit fires once per process and is never cleared
        if phase is Phase.ON_EXIT:
            return
        if self.declared[phase].clear_after_run:
            self._pending[phase] = ()

    def reset(self, phase: Phase | None = None) -> None:
        """Re-arm *phase* (or every phase) with its declared scripts."""
        phases = [phase] if phase is not None else list(Phase)
        for item in phases:
            self._pending[item] = self.declared[item].scripts


# ---------------------------------------------------------------------------
# Phase runner
# ---------------------------------------------------------------------------


class PhaseRunner:
    """Runs the scripts of a phase sequentially, in declaration order."""

    def __init__(self, options: RunnerOptions, platform: str | None = None) -> None:
        self.options = options
        self.platform = platform or sys.platform

    async def run(
        self, phase: Phase, scripts: tuple[ScriptDeclaration, ...]
    ) -> list[ScriptResult]:
        """Execute *scripts*, awaiting each before starting the next.

        Returns:
            One ``ScriptResult`` per script.

        Raises:
            PhaseError: On the first script that fails; later scripts are not
                started.
        """
        results: list[ScriptResult] = []
        for declaration in scripts:
            executor = get_executor(self.options, self.platform)
            try:
                results.append(await executor.execute(declaration))
            except ScriptError as exc:
                raise PhaseError(phase, str(exc), script=exc.script) from exc
        return results


class ScriptOrchestrator:
    """Runs a phase's pending scripts and applies the clear policy.

    Attributes:
        options: The user configuration.
        state: Pending scripts per phase.
        runner: Sequential executor for one phase.
    """

    def __init__(self, options: ScriptRunnerOptions, platform: str | None = None) -> None:
        self.options = options
        self.state = PhaseState.from_options(options)
        self.runner = PhaseRunner(options.runner_options(), platform)

    async def run_phase(self, phase: Phase) -> list[ScriptResult]:
        """Run the pending scripts of *phase*.

        Does nothing (and prints nothing) when the phase has no pending
        scripts.  The clear policy is only applied after every script
        succeeded; on failure the pending list is left as it was.
        """
        if self.state.is_empty(phase):
            return []

        print_phase_header(phase.value, phase.description)
        results = await self.runner.run(phase, self.state.pending(phase))
        self.state.complete(phase)
        return results
