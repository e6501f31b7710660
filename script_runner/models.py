"""Data model for build scripts and the phases they are bound to.

A script is declared either as a single command line (``"rm -rf dist"``) or as
a structured :class:`ScriptCommand` pair.  :func:`normalize` turns either form
into a ``ScriptCommand`` so the direct-exec path can spawn it without a shell.
"""

from __future__ import annotations

import shlex
import subprocess
import sys
from enum import Enum
from typing import Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Phase(str, Enum):
    """A point in the build lifecycle at which scripts may run."""
    BEFORE_BUILD = "before-build"
    AFTER_EMIT = "after-emit"
    ON_EXIT = "on-exit"

    @property
    def description(self) -> str:
        """Human-readable name used in the ``Executing ...`` banner."""
        return _PHASE_DESCRIPTIONS[self]


_PHASE_DESCRIPTIONS: dict[Phase, str] = {
    Phase.BEFORE_BUILD: "pre-build scripts",
    Phase.AFTER_EMIT: "post-build scripts",
    Phase.ON_EXIT: "additional scripts before exit",
}


# ---------------------------------------------------------------------------
# Script declarations
# ---------------------------------------------------------------------------

class ScriptCommand(BaseModel):
    """A command and its argument list.

    This is both the structured way to declare a script (use it whenever an
    argument contains whitespace) and the normalized form every declaration
    is converted to.
    """

    model_config = ConfigDict(frozen=True)

    command: str = Field(..., description="Executable name or path")
    args: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("args", "arguments"),
        description="Arguments passed verbatim, in order",
    )

    def command_line(self, platform: str | None = None) -> str:
        """Render the pair as a single shell command line.

        Arguments are quoted for the shell of *platform* (``cmd.exe`` rules on
        ``win32``, POSIX rules elsewhere).
        """
        platform = platform or sys.platform
        parts = [self.command, *self.args]
        if platform == "win32":
            return subprocess.list2cmdline(parts)
        return shlex.join(parts)


ScriptDeclaration = Union[str, ScriptCommand]


def normalize(declaration: ScriptDeclaration) -> ScriptCommand:
    """Convert a script declaration into its ``(command, args)`` form.

    String declarations are split on single spaces: the first token is the
    command and the remaining tokens are the arguments.  Quoting is not
    understood, so ``'echo "a b"'`` yields the arguments ``'"a'`` and
    ``'b"'``.  An empty string yields an empty command, which fails when
    spawned.

    Structured declarations are already normalized and are returned as-is.
    """
    if isinstance(declaration, ScriptCommand):
        return declaration

    command, *args = declaration.split(" ")
    return ScriptCommand(command=command, args=tuple(args))


def display_script(declaration: ScriptDeclaration) -> str:
    """Return the text of a declaration as the user wrote it."""
    if isinstance(declaration, ScriptCommand):
        return declaration.command_line()
    return declaration
