"""Build script runner.

Binds user-declared commands to the before-build, after-emit and exit points of
a build and runs them in order, through the shell or as direct process spawns
depending on the platform.  In development (watch) mode the before-build and
after-emit scripts fire only on the first build of the session.

Key classes:
    ScriptRunnerPlugin   - Lifecycle adapter registered with a build host
    ScriptRunnerOptions  - User configuration (onBuildStart, onBuildEnd, ...)
    ScriptOrchestrator   - Runs a phase and applies the clear policy
    PhaseState           - Pending scripts per phase
    PhaseRunner          - Sequential, fail-fast execution of one phase
    ShellExecutor        - Shell-mediated execution
    DirectExecutor       - Direct process spawn
"""

from .config import RunnerOptions, ScriptRunnerOptions, split_scripts
from .executor import (
    DirectExecutor,
    ExecutionPath,
    ScriptError,
    ScriptExecutor,
    ScriptResult,
    ShellExecutor,
    execute_script,
    get_executor,
    select_execution_path,
)
from .models import Phase, ScriptCommand, ScriptDeclaration, normalize
from .phases import PhaseConfig, PhaseError, PhaseRunner, PhaseState, ScriptOrchestrator
from .plugin import ScriptRunnerPlugin

__all__ = [
    # Configuration
    "RunnerOptions",
    "ScriptRunnerOptions",
    "split_scripts",
    # Data model
    "Phase",
    "ScriptCommand",
    "ScriptDeclaration",
    "normalize",
    # Execution
    "ExecutionPath",
    "select_execution_path",
    "get_executor",
    "execute_script",
    "ScriptExecutor",
    "ShellExecutor",
    "DirectExecutor",
    "ScriptResult",
    "ScriptError",
    # Phases
    "PhaseConfig",
    "PhaseState",
    "PhaseRunner",
    "PhaseError",
    "ScriptOrchestrator",
    # Lifecycle adapter
    "ScriptRunnerPlugin",
]
