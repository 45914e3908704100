"""External process helpers: command execution and the tmux surface."""

from zeroclaw.process.executor import CommandExecutor, ExecutionResult
from zeroclaw.process.tmux import TmuxError, TmuxSurface

__all__ = [
    "CommandExecutor",
    "ExecutionResult",
    "TmuxError",
    "TmuxSurface",
]
