"""Local command execution for external tools.

Every collaborator the supervisor talks to (worker CLIs, tmux, git, npx) is
an external command. CommandExecutor runs them and always returns an
ExecutionResult: a missing binary or a timeout is reported in the result
rather than raised, so callers decide what a failure means for them.
"""

import logging
import subprocess
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Exit codes used by shells for "command not found" / "found but not runnable"
COMMAND_NOT_FOUND = 127
COMMAND_NOT_EXECUTABLE = 126

DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024


class ExecutionResult(BaseModel):
    """Result of an external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def describe(self) -> str:
        """Short human-readable failure description for log lines."""
        if self.timed_out:
            return "timed out"
        if self.returncode == COMMAND_NOT_FOUND:
            return "not installed"
        if self.returncode == COMMAND_NOT_EXECUTABLE:
            return f"cannot run ({self.stderr.strip() or 'permission denied'})"
        detail = (self.stderr or self.stdout).strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        return f"exit code {self.returncode}{suffix}"


def _cap_output(text: str, limit: int) -> str:
    """Keep the first limit bytes (UTF-8) of captured output and note the cut."""
    encoded = text.encode("utf-8", errors="replace")
    if len(encoded) <= limit:
        return text
    kept = encoded[:limit].decode("utf-8", errors="ignore")
    return f"{kept}\n[... {len(encoded) - limit} more bytes of output dropped]"


class CommandExecutor:
    """Run external commands from a fixed working directory.

    Args:
        workdir: Default working directory for commands.
        max_output_bytes: Cap applied to captured stdout/stderr.
    """

    def __init__(
        self,
        workdir: Path | None = None,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ):
        self.workdir = Path(workdir).absolute() if workdir else Path.cwd()
        self.max_output_bytes = max_output_bytes

    def run(
        self,
        command: list[str],
        workdir: str | Path | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
        interactive: bool = False,
    ) -> ExecutionResult:
        """Run a command and wait for it to exit.

        Args:
            command: Argument vector; never passed through a shell.
            workdir: Overrides the executor's default working directory.
            timeout: Seconds before the command is killed. None waits forever.
            input_text: Text fed to the command's stdin.
            interactive: Inherit the terminal instead of capturing output.
                Used for collaborators the operator talks to directly.

        Returns:
            ExecutionResult. Missing binaries yield returncode 127.
        """
        effective_workdir = Path(workdir) if workdir else self.workdir
        logger.debug(f"exec: {' '.join(command)} (cwd={effective_workdir})")

        try:
            result = subprocess.run(
                command,
                capture_output=not interactive,
                text=True,
                cwd=effective_workdir,
                timeout=timeout,
                input=input_text,
            )
        except FileNotFoundError:
            return ExecutionResult(
                returncode=COMMAND_NOT_FOUND,
                stderr=f"{command[0]}: command not found",
            )
        except subprocess.TimeoutExpired:
            return ExecutionResult(
                returncode=-1,
                stderr=f"Command timed out after {timeout}s",
                timed_out=True,
            )
        except OSError as e:
            # Not executable, bad working directory, ...
            logger.debug(f"exec failed: {command[0]}: {e}")
            return ExecutionResult(
                returncode=COMMAND_NOT_EXECUTABLE,
                stderr=f"{command[0]}: {e}",
            )

        return ExecutionResult(
            returncode=result.returncode,
            stdout=_cap_output(result.stdout or "", self.max_output_bytes),
            stderr=_cap_output(result.stderr or "", self.max_output_bytes),
        )
