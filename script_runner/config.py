"""Build script runner configuration.

Typed configuration for the lifecycle scripts.  ``ScriptRunnerOptions`` accepts
the camelCase keys build-tool users already write (``onBuildStart``,
``onBuildEnd``, ``onBuildExit``, ``dev``, ``verbose``, ``safe``) as well as
snake_case field names, ignores unknown keys, and can be round-tripped through
JSON or built from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from script_runner.models import Phase, ScriptDeclaration

ENV_PREFIX = "SCRIPT_RUNNER_"


def split_scripts(value: str) -> list[str]:
    """Split a ``&&``-joined command string into individual scripts.

    Segments are stripped of surrounding whitespace and empty segments are
    dropped, so ``"echo A && echo B"`` yields ``["echo A", "echo B"]``.
    """
    return [segment.strip() for segment in value.split("&&") if segment.strip()]


class RunnerOptions(BaseModel):
    """Process-wide switches consumed by the execution layer."""

    model_config = ConfigDict(frozen=True)

    development_mode: bool = Field(
        default=True,
        description="Clear before-build/after-emit scripts after their first successful run",
    )
    safe_mode: bool = Field(
        default=False, description="Run every script through the shell on all platforms"
    )
    verbose: bool = Field(default=False, description="Echo each command and its duration")


class ScriptRunnerOptions(BaseModel):
    """User configuration for the lifecycle scripts.

    Each of the three script fields takes either one string, split on ``&&``
    into several scripts, or a list whose items are command-line strings or
    ``{"command": ..., "args": [...]}`` mappings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    on_build_start: tuple[ScriptDeclaration, ...] = Field(default=(), alias="onBuildStart")
    on_build_end: tuple[ScriptDeclaration, ...] = Field(default=(), alias="onBuildEnd")
    on_build_exit: tuple[ScriptDeclaration, ...] = Field(default=(), alias="onBuildExit")
    dev: bool = Field(default=True)
    verbose: bool = Field(default=False)
    safe: bool = Field(default=False)

    @field_validator("on_build_start", "on_build_end", "on_build_exit", mode="before")
    @classmethod
    def _split_command_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_scripts(value)
        return value

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def runner_options(self) -> RunnerOptions:
        """Return the switches the executor and phase state need."""
        return RunnerOptions(
            development_mode=self.dev,
            safe_mode=self.safe,
            verbose=self.verbose,
        )

    def scripts_for(self, phase: Phase) -> tuple[ScriptDeclaration, ...]:
        """Return the declared scripts for *phase*, in declaration order."""
        if phase is Phase.BEFORE_BUILD:
            return self.on_build_start
        if phase is Phase.AFTER_EMIT:
            return self.on_build_end
        return self.on_build_exit

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the options as camelCase JSON.

        Args:
            path: Destination file.  Parent directories are created.

        Returns:
            The path that was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScriptRunnerOptions":
        """Load options from a JSON file.

        Raises:
            FileNotFoundError: If *path* does not exist.
            pydantic.ValidationError: If the content is not a valid options object.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScriptRunnerOptions":
        """Build options from environment variables.

        Recognised variables (all optional):
            SCRIPT_RUNNER_ON_BUILD_START, SCRIPT_RUNNER_ON_BUILD_END,
            SCRIPT_RUNNER_ON_BUILD_EXIT, SCRIPT_RUNNER_DEV,
            SCRIPT_RUNNER_VERBOSE, SCRIPT_RUNNER_SAFE.

        Script variables use the ``&&``-joined string form; boolean variables
        accept ``1/0``, ``true/false``, ``yes/no`` and ``on/off``.
        """
        values: dict[str, Any] = {}
        for name in ("on_build_start", "on_build_end", "on_build_exit", "dev", "verbose", "safe"):
            raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls(**values)
