"""Agent process supervisor.

Owns the tmux surface for a session: probes which worker CLIs are
installed, (re)creates the surface with its status pane, and launches one
window per worker. Once launched, a worker is on its own; the supervisor
never waits for it. Workers report progress through the event files
described in zeroclaw.core.events.
"""

import logging
import shlex
from pathlib import Path

from zeroclaw.core.agents import AGENT_CATALOG, AgentRuntime
from zeroclaw.core.config import ZeroclawConfig
from zeroclaw.core.models import LaunchReport, PaneRecord, Plan, ProbeResult, TaskBrief
from zeroclaw.core.plans import PLANNING_DIRNAME
from zeroclaw.process.executor import CommandExecutor
from zeroclaw.process.tmux import TmuxError, TmuxSurface

logger = logging.getLogger(__name__)

STATUS_WINDOW = "supervisor"
RESUME_WINDOW = "resume"


class LaunchError(Exception):
    """A worker window could not be created or started."""

    def __init__(self, agent: str, reason: str):
        self.agent = agent
        self.reason = reason
        super().__init__(f"Launch failed for {agent}: {reason}")


class AgentProcessSupervisor:
    """Launch and track worker processes inside the shared tmux surface.

    Records map window name to PaneRecord. Tearing the surface down drops
    every record, since the processes behind them are gone.
    """

    def __init__(
        self,
        workspace: Path,
        executor: CommandExecutor,
        config: ZeroclawConfig,
        catalog: dict[str, AgentRuntime] | None = None,
        home: Path | None = None,
    ):
        self.workspace = Path(workspace)
        self.executor = executor
        self.config = config
        self.catalog = catalog if catalog is not None else AGENT_CATALOG
        self.home = home or Path.home()
        self.surface = TmuxSurface(config.surface_name, executor)
        self._records: dict[str, PaneRecord] = {}

    @property
    def records(self) -> list[PaneRecord]:
        return list(self._records.values())

    # --- Detection ---

    def probe(self) -> list[ProbeResult]:
        """Probe every catalog worker once, in catalog order."""
        results = []
        for name, agent in self.catalog.items():
            result = self.executor.run(agent.probe_command(), timeout=self.config.probe_timeout)
            if result.ok:
                results.append(ProbeResult(name=name, available=True))
            else:
                logger.debug(f"Probe {name}: {result.describe()}")
                results.append(ProbeResult(name=name, available=False, reason=result.describe()))
        return results

    def detect_available(self) -> list[str]:
        """Names of workers whose probe succeeded, in catalog order."""
        return [result.name for result in self.probe() if result.available]

    # --- Surface lifecycle ---

    def teardown_surface(self) -> bool:
        """Kill the surface and forget its records.

        Idempotent: returns False when there was no surface to kill.
        """
        killed = self.surface.kill()
        self._records.clear()
        if killed:
            logger.info(f"Killed tmux session '{self.surface.name}'")
        return killed

    def status_script(self, session_id: str, plan: Plan | None = None) -> str:
        """Shell line for the status pane: session header plus roadmap."""
        plan_dir = self.workspace / PLANNING_DIRNAME
        header = " && ".join(
            [
                'echo "━━━ ZEROCLAW SUPERVISOR ━━━"',
                f"echo {shlex.quote(f'Session: {session_id}')}",
                f"echo {shlex.quote(f'Workspace: {self.workspace}')}",
                'echo ""',
            ]
        )
        if plan is not None and plan.has_roadmap:
            roadmap = shlex.quote(str(plan_dir / "ROADMAP.md"))
            return f'{header} && cat {roadmap} 2>/dev/null || echo "No roadmap yet."'
        plan_path = plan_dir / "PLAN.md"
        return f"{header} && echo {shlex.quote(f'Plan: {plan_path}')}"

    def open_surface(self, session_id: str, plan: Plan | None = None) -> None:
        """Recreate the surface and start the status pane.

        Raises:
            LaunchError: If the tmux session cannot be created.
        """
        self.teardown_surface()
        try:
            self.surface.create(
                STATUS_WINDOW,
                width=self.config.surface_width,
                height=self.config.surface_height,
            )
        except TmuxError as e:
            raise LaunchError(STATUS_WINDOW, str(e)) from e

        try:
            self.surface.send_keys(STATUS_WINDOW, self.status_script(session_id, plan))
        except TmuxError as e:
            logger.warning(f"Status pane could not be started: {e}")

    def select_layout(self, layout: str | None = None) -> None:
        layout = layout or self.config.pane_layout
        try:
            self.surface.select_layout(layout)
        except TmuxError as e:
            logger.warning(f"Could not apply pane layout '{layout}': {e}")

    # --- Launching ---

    def _agent(self, name: str) -> AgentRuntime:
        agent = self.catalog.get(name)
        if agent is None:
            raise LaunchError(name, "not in the agent catalog")
        return agent

    def _start_window(self, window: str, agent_name: str, command: str) -> PaneRecord:
        if window in self._records:
            raise LaunchError(agent_name, f"window '{window}' already hosts a process")
        try:
            self.surface.new_window(window)
            self.surface.send_keys(window, f"cd {shlex.quote(str(self.workspace))}")
            self.surface.send_keys(window, command)
        except TmuxError as e:
            raise LaunchError(agent_name, str(e)) from e

        record = PaneRecord(
            surface=self.surface.name,
            window=window,
            agent=agent_name,
            command=command,
        )
        self._records[window] = record
        return record

    def launch(
        self,
        agent_name: str,
        brief_path: Path,
        brief_text: str,
        skills_root: Path | None = None,
        use_skills: bool = True,
    ) -> PaneRecord:
        """Start one worker in its own window.

        Args:
            agent_name: Catalog name of the worker.
            brief_path: Task brief file the worker reads.
            brief_text: Contents of the brief.
            skills_root: Where provisioned skills live. Defaults to the
                worker's own checkout under the home directory.
            use_skills: False starts the worker without the skills
                bootstrap, e.g. when its checkout could not be provisioned.

        Raises:
            LaunchError: If any tmux step fails.
        """
        agent = self._agent(agent_name)
        root = (skills_root or agent.skills_root(self.home)) if use_skills else None
        command = agent.command(brief_path, brief_text, root)
        record = self._start_window(agent.name, agent.name, command)
        logger.info(f"[{agent.name}] launched in tmux window '{agent.name}'")
        return record

    def launch_all(
        self,
        briefs: list[TaskBrief],
        provisioned: set[str] | None = None,
    ) -> LaunchReport:
        """Launch every brief's worker in order.

        Workers missing from provisioned start without skills; None means
        every worker has them. A failed launch is logged and recorded; the
        rest still launch.
        """
        report = LaunchReport()
        for brief in briefs:
            use_skills = provisioned is None or brief.agent in provisioned
            try:
                report.launched.append(
                    self.launch(brief.agent, brief.path, brief.text, use_skills=use_skills)
                )
            except LaunchError as e:
                logger.warning(str(e))
                report.failed.append(brief.agent)
        return report

    def launch_resume(
        self,
        agent_name: str,
        session_id: str,
        use_skills: bool = True,
    ) -> PaneRecord:
        """Open the single 'resume' window that restores prior planning context.

        Creates the surface first if it does not exist yet. A resume window
        left over from an earlier continue is killed and replaced; other
        worker windows keep running.

        Raises:
            LaunchError: If the surface or window cannot be created.
        """
        agent = self._agent(agent_name)
        if not self.surface.exists():
            self.open_surface(session_id)
        elif RESUME_WINDOW in self._records:
            previous = self._records.pop(RESUME_WINDOW)
            self.surface.kill_window(RESUME_WINDOW)
            logger.info(f"[{previous.agent}] replaced resume window '{RESUME_WINDOW}'")

        command = agent.resume_command()
        if use_skills:
            command = f"{agent.bootstrap(agent.skills_root(self.home))} && {command}"
        record = self._start_window(RESUME_WINDOW, agent.name, command)
        logger.info(f"[{agent.name}] resume launched in tmux window '{RESUME_WINDOW}'")
        return record
