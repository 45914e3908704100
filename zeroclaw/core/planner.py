"""Planning client.

Planning is done by an external collaborator (GSD slash commands run
through whichever AI CLI is installed). This module only invokes those
commands in the workspace and reads back the plan they leave under
.planning/. A failed planning command is never fatal: whatever artifacts
exist are still read, and no tasks simply means no plan.
"""

import logging
from pathlib import Path

from zeroclaw.core.config import ZeroclawConfig
from zeroclaw.core.intent import Intent
from zeroclaw.core.models import Plan
from zeroclaw.core.plans import PlanArtifacts
from zeroclaw.process.executor import CommandExecutor

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME = "claude"

# Command prefix per planning runtime
_RUNTIME_PREFIX: dict[str, list[str]] = {
    "claude": ["claude", "--dangerously-skip-permissions"],
    "opencode": ["opencode", "run"],
    "gemini": ["gemini"],
    "codex": ["codex"],
}

# Where each runtime keeps installed GSD commands, relative to home
_GSD_INSTALL_MARKERS: dict[str, str] = {
    "claude": ".claude/commands",
    "opencode": ".config/opencode/commands",
    "gemini": ".gemini/commands",
    "codex": ".codex/skills/gsd-new-project",
}

# Only opencode reads the request from stdin
_STDIN_RUNTIMES = {"opencode"}


class PlanningError(Exception):
    """A planning command failed."""

    pass


class PlanningClient:
    """Run planning commands and read the resulting plan."""

    def __init__(
        self,
        workspace: Path,
        executor: CommandExecutor,
        config: ZeroclawConfig,
        artifacts: PlanArtifacts | None = None,
        home: Path | None = None,
    ):
        self.workspace = Path(workspace)
        self.executor = executor
        self.config = config
        self.artifacts = artifacts or PlanArtifacts(self.workspace)
        self.home = home or Path.home()
        self._runtime: str | None = None

    @property
    def runtime(self) -> str:
        """Planning runtime, detected once per client."""
        if self._runtime is None:
            self._runtime = self.detect_runtime()
        return self._runtime

    def detect_runtime(self) -> str:
        for runtime in self.config.planning_runtimes:
            result = self.executor.run([runtime, "--version"], timeout=self.config.probe_timeout)
            if result.ok:
                return runtime
        return DEFAULT_RUNTIME

    def ensure_installed(self) -> bool:
        """Install GSD for the planning runtime if its commands are missing."""
        runtime = self.runtime
        marker = _GSD_INSTALL_MARKERS.get(runtime)
        if marker and (self.home / marker).exists():
            return True

        logger.warning(f"GSD not found for runtime '{runtime}'. Installing now...")
        result = self.executor.run(
            ["npx", "get-shit-done-cc@latest", f"--{runtime}", "--global"],
            interactive=True,
        )
        if not result.ok:
            logger.warning(
                f"GSD auto-install failed ({result.describe()}). "
                "Install manually: npx get-shit-done-cc@latest"
            )
            return False
        logger.info("GSD installed.")
        return True

    def command_for(self, command: str, args: list[str]) -> list[str]:
        prefix = _RUNTIME_PREFIX.get(self.runtime, [self.runtime])
        return [*prefix, f"/gsd:{command}", *args]

    def run_command(self, command: str, args: list[str] | None = None, stdin_text: str | None = None) -> None:
        """Run one GSD command interactively in the workspace.

        No timeout: planning takes as long as the operator needs.

        Raises:
            PlanningError: If the command is missing or exits non-zero.
        """
        argv = self.command_for(command, args or [])
        feed = stdin_text if self.runtime in _STDIN_RUNTIMES else None
        logger.info(f"GSD /gsd:{command} via {self.runtime}")
        result = self.executor.run(argv, workdir=self.workspace, input_text=feed, interactive=True)
        if not result.ok:
            raise PlanningError(f"/gsd:{command} failed: {result.describe()}")

    def _try_command(self, command: str, args: list[str] | None = None, stdin_text: str | None = None) -> None:
        try:
            self.run_command(command, args, stdin_text)
        except PlanningError as e:
            logger.warning(f"{e}. Continuing without GSD output; agents will plan independently.")

    def run(self, intent: Intent, request: str = "") -> Plan | None:
        """Run the planning phase for an intent.

        Args:
            intent: PROJECT_INIT or NEW_TASK.
            request: The operator's raw request text.

        Returns:
            The resulting Plan, or None when no tasks were produced.
        """
        self.ensure_installed()

        if intent == Intent.PROJECT_INIT:
            logger.info("Launching GSD new-project workflow")
            self._try_command("new-project", ["--auto"])
            return self.artifacts.read_plan()

        phase = self.artifacts.next_phase()
        if phase is None:
            logger.info("No existing roadmap found, running GSD quick mode for this task")
            self._try_command("quick", [], stdin_text=request)
            return self.artifacts.read_quick_plan()

        logger.info(f"Running GSD discuss+plan pipeline for phase {phase}")
        self._try_command("discuss-phase", [str(phase)])
        self._try_command("plan-phase", [str(phase)])
        return self.artifacts.read_plan(phase)
