"""Task distribution engine.

Turns a Plan into per-worker assignments and hands them to the process
supervisor:

1. Probe which workers are installed (fail fast when none are).
2. Provision skills for each available worker (best effort).
3. Write plan artifacts (write-once) and one task brief per worker.
4. Recreate the tmux surface and launch every assigned worker.

Assignment is plain round-robin by task index over the available workers
in catalog order. Task size and worker affinity are not considered.
Launching is fire-and-forget; completion shows up in worker event files.
"""

import logging
import re
from pathlib import Path

from zeroclaw.core.config import ZeroclawConfig
from zeroclaw.core.events import ERRORS_DIRNAME, SPANS_DIRNAME
from zeroclaw.core.models import LaunchReport, Plan, TaskBrief
from zeroclaw.core.plans import IMPLEMENT_FILENAME, PlanArtifacts
from zeroclaw.core.provisioning import SkillProvisioner
from zeroclaw.core.state import state_dir
from zeroclaw.core.supervisor import AgentProcessSupervisor, LaunchError

logger = logging.getLogger(__name__)


class NoWorkersAvailableError(Exception):
    """No catalog worker passed the liveness probe."""

    def __init__(self) -> None:
        super().__init__(
            "No supported agents found (gemini / copilot / codex / opencode). "
            "Install at least one."
        )


def assign_tasks(tasks: list[str] | tuple[str, ...], workers: list[str]) -> dict[str, list[str]]:
    """Round-robin tasks over workers.

    Task i goes to workers[i % len(workers)]; each worker keeps plan order.
    Every worker gets a key, even when it receives no tasks.

    Raises:
        NoWorkersAvailableError: If workers is empty.
    """
    if not workers:
        raise NoWorkersAvailableError()

    assignment: dict[str, list[str]] = {worker: [] for worker in workers}
    for i, task in enumerate(tasks):
        assignment[workers[i % len(workers)]].append(task)
    return assignment


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")[:40]


def brief_path(workspace: Path, agent: str) -> Path:
    return state_dir(workspace) / f"{agent}-task.md"


def build_task_brief(
    agent: str,
    tasks: list[str],
    workspace: Path,
    feedback_loop: bool = True,
) -> str:
    """Render the Markdown brief a worker reads to recover its assignment."""
    plan_dir = PlanArtifacts(workspace).plan_dir
    task_list = "\n".join(f"{i}. {task}" for i, task in enumerate(tasks, start=1))
    example_branch = f"feature/{slugify(tasks[0])}" if tasks else "feature/<task-slug>"

    sections = [
        f"# Zeroclaw Task Assignment: {agent}",
        "You are a coding agent in the zeroclaw multi-agent system.",
        f"## Your Tasks\n{task_list}",
        "## Context Files\n"
        f"- Plan:           {plan_dir / 'PLAN.md'}\n"
        f"- Implementation: {plan_dir / IMPLEMENT_FILENAME}\n"
        f"- Requirements:   {plan_dir / 'REQUIREMENTS.md'}",
        "## Working Rules\n"
        "- Follow TDD: write tests before implementation\n"
        '- Commit after each task: `git commit -m "feat(<scope>): <task summary>"`\n'
        f"- Branch: feature/<task-slug> (e.g. {example_branch})\n"
        f"- Document decisions in {IMPLEMENT_FILENAME}",
    ]

    if feedback_loop:
        zeroclaw_dir = state_dir(workspace)
        sections.append(
            "## Progress Signals\n"
            f"- Run `zeroclaw signal start \"<task>\" --agent {agent}` when you begin a task\n"
            f"- Run `zeroclaw signal done \"<task>\" --agent {agent}` when it is finished\n"
            f"- On errors run `zeroclaw signal error \"<task>\" --agent {agent} --error \"<message>\"`\n"
            f"  (reports land in {zeroclaw_dir / ERRORS_DIRNAME} and "
            f"{zeroclaw_dir / SPANS_DIRNAME} for the feedback loop)"
        )

    sections.append("Begin with task 1.")
    return "\n\n".join(sections) + "\n"


class TaskDistributor:
    """Distribute a plan's tasks over the available workers."""

    def __init__(
        self,
        workspace: Path,
        session_id: str,
        supervisor: AgentProcessSupervisor,
        provisioner: SkillProvisioner,
        config: ZeroclawConfig,
        artifacts: PlanArtifacts | None = None,
    ):
        self.workspace = Path(workspace)
        self.session_id = session_id
        self.supervisor = supervisor
        self.provisioner = provisioner
        self.config = config
        self.artifacts = artifacts or PlanArtifacts(self.workspace)

    def _require_workers(self) -> list[str]:
        available = self.supervisor.detect_available()
        if not available:
            raise NoWorkersAvailableError()
        logger.info(f"Available agents: {', '.join(available)}")
        return available

    def _provision(self, available: list[str]) -> set[str]:
        """Names of the workers whose skills are in place."""
        return {name for name in available if self.provisioner.ensure(self.supervisor.catalog[name])}

    def write_briefs(self, assignment: dict[str, list[str]]) -> list[TaskBrief]:
        """Write one brief file per worker that received tasks."""
        briefs = []
        for agent, tasks in assignment.items():
            if not tasks:
                continue
            path = brief_path(self.workspace, agent)
            text = build_task_brief(agent, tasks, self.workspace, self.config.feedback_loop)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            briefs.append(TaskBrief(agent=agent, path=path, tasks=tasks, text=text))
        return briefs

    def distribute(self, plan: Plan) -> LaunchReport | None:
        """Assign the plan's tasks and launch the workers.

        Returns:
            LaunchReport once every launch was attempted, or None when
            nothing was launched because no worker is available.
        """
        if not plan.tasks:
            logger.warning("Plan has no tasks; nothing to distribute")
            return None

        logger.info(f"Task distribution: {len(plan.tasks)} task(s) found")
        try:
            available = self._require_workers()
        except NoWorkersAvailableError as e:
            logger.warning(str(e))
            return None

        provisioned = self._provision(available)
        self.artifacts.write_artifacts(plan)

        assignment = assign_tasks(plan.tasks, available)
        for agent, tasks in assignment.items():
            for task in tasks:
                logger.info(f"  [{agent}] {task}")

        briefs = self.write_briefs(assignment)

        try:
            self.supervisor.open_surface(self.session_id, plan)
        except LaunchError as e:
            logger.warning(str(e))
            return LaunchReport(failed=[brief.agent for brief in briefs])

        report = self.supervisor.launch_all(briefs, provisioned)
        self.supervisor.select_layout()

        logger.info(
            f"{len(report.launched)} agent(s) launched, {len(report.failed)} failed. "
            f"Attach with: tmux attach -t {self.supervisor.surface.name}"
        )
        return report

    def pick_resume_worker(self, available: list[str]) -> str | None:
        """Preferred worker for resuming, else the first that can resume."""
        catalog = self.supervisor.catalog
        candidates = [name for name in available if catalog[name].supports_resume]
        for preferred in self.config.resume_preference:
            if preferred in candidates:
                return preferred
        return candidates[0] if candidates else None

    def resume_from_state(self) -> LaunchReport | None:
        """Launch a single worker that restores context from .planning/.

        Returns:
            LaunchReport for the resume window, or None when no worker
            is available to resume.
        """
        logger.info("Continuing session: restoring from .planning/ state")
        try:
            available = self._require_workers()
        except NoWorkersAvailableError as e:
            logger.warning(str(e))
            return None

        provisioned = self._provision(available)

        worker = self.pick_resume_worker(available)
        if worker is None:
            logger.warning("None of the available agents can resume planning context")
            return None

        report = LaunchReport()
        try:
            record = self.supervisor.launch_resume(
                worker, self.session_id, use_skills=worker in provisioned
            )
            report.launched.append(record)
        except LaunchError as e:
            logger.warning(str(e))
            report.failed.append(worker)
        return report
