"""Tests for task assignment, task briefs and distribution."""

from __future__ import annotations

from collections import Counter

import pytest

from zeroclaw.core.distributor import (
    NoWorkersAvailableError,
    TaskDistributor,
    assign_tasks,
    brief_path,
    build_task_brief,
)
from zeroclaw.core.models import Plan, PlanKind
from zeroclaw.core.provisioning import SkillProvisioner
from zeroclaw.core.supervisor import AgentProcessSupervisor

ALL_BINARIES = ("gemini", "gh", "codex", "opencode")


@pytest.fixture
def distributor(workspace, executor, config, home) -> TaskDistributor:
    supervisor = AgentProcessSupervisor(workspace, executor, config, home=home)
    provisioner = SkillProvisioner(executor, config.skills_repo, home=home)
    return TaskDistributor(workspace, "sess-1", supervisor, provisioner, config)


def _plan(*tasks: str) -> Plan:
    return Plan(kind=PlanKind.QUICK, tasks=tasks, files={"PLAN.md": "".join(f"- [ ] {t}\n" for t in tasks)})


def _pane_commands(executor) -> dict[str, str]:
    """Last command line typed into each window, keyed by window name."""
    sent = {}
    for cmd in executor.tmux_commands():
        if cmd[0] == "send-keys" and not cmd[3].startswith("cd "):
            sent[cmd[2].split(":", 1)[1]] = cmd[3]
    return sent


class TestAssignTasks:
    """Tests for round-robin assignment."""

    def test_round_robin_scenario(self):
        assignment = assign_tasks(["A", "B", "C", "D", "E"], ["w1", "w2"])
        assert assignment == {"w1": ["A", "C", "E"], "w2": ["B", "D"]}

    @pytest.mark.parametrize("n_tasks,n_workers", [(0, 1), (1, 3), (7, 3), (8, 4), (10, 1)])
    def test_fair_and_lossless(self, n_tasks, n_workers):
        tasks = [f"task-{i}" for i in range(n_tasks)]
        workers = [f"w{i}" for i in range(n_workers)]

        assignment = assign_tasks(tasks, workers)

        sizes = [len(assigned) for assigned in assignment.values()]
        assert max(sizes) - min(sizes) <= 1
        flattened = [task for assigned in assignment.values() for task in assigned]
        assert Counter(flattened) == Counter(tasks)

    def test_every_worker_gets_a_key(self):
        assert assign_tasks(["only"], ["w1", "w2", "w3"]) == {
            "w1": ["only"],
            "w2": [],
            "w3": [],
        }

    def test_duplicate_tasks_kept(self):
        assert assign_tasks(["x", "x"], ["w1", "w2"]) == {"w1": ["x"], "w2": ["x"]}

    def test_no_workers(self):
        with pytest.raises(NoWorkersAvailableError, match="Install at least one"):
            assign_tasks(["A"], [])


class TestTaskBrief:
    """Tests for task brief rendering."""

    def test_brief_lists_tasks_and_context(self, workspace):
        text = build_task_brief("codex", ["build login", "write tests"], workspace)

        assert text.startswith("# Zeroclaw Task Assignment: codex")
        assert "1. build login\n2. write tests" in text
        assert str(workspace / ".planning" / "PLAN.md") in text
        assert "feature/build-login" in text
        assert "Begin with task 1." in text

    def test_feedback_loop_section(self, workspace):
        with_loop = build_task_brief("codex", ["a"], workspace, feedback_loop=True)
        without_loop = build_task_brief("codex", ["a"], workspace, feedback_loop=False)

        assert "zeroclaw signal done" in with_loop
        assert "lightning-spans" in with_loop
        assert "Progress Signals" not in without_loop

    def test_brief_path(self, workspace):
        assert brief_path(workspace, "gemini") == workspace / ".zeroclaw" / "gemini-task.md"


class TestDistribute:
    """Tests for TaskDistributor.distribute()."""

    def test_zero_workers_launches_nothing(self, distributor, executor, workspace, caplog):
        executor.missing(*ALL_BINARIES)

        assert distributor.distribute(_plan("A", "B")) is None

        assert executor.tmux_commands() == []
        assert not (workspace / ".zeroclaw").exists()
        assert "No supported agents found" in caplog.text

    def test_empty_plan(self, distributor, executor):
        assert distributor.distribute(Plan(kind=PlanKind.QUICK)) is None
        assert executor.calls == []

    def test_distributes_over_available_workers(self, distributor, executor, workspace):
        executor.missing("gemini", "gh")

        report = distributor.distribute(_plan("A", "B", "C"))

        assert report is not None
        assert report.launched_agents == ["codex", "opencode"]
        codex_brief = (workspace / ".zeroclaw" / "codex-task.md").read_text()
        opencode_brief = (workspace / ".zeroclaw" / "opencode-task.md").read_text()
        assert "1. A\n2. C" in codex_brief
        assert "1. B" in opencode_brief
        assert (workspace / ".planning" / "implement.md").exists()

    def test_status_pane_before_workers_and_layout_last(self, distributor, executor, config):
        executor.missing("gemini", "gh", "opencode")

        distributor.distribute(_plan("A"))

        subcommands = [cmd[0] for cmd in executor.tmux_commands()]
        assert subcommands[:2] == ["kill-session", "new-session"]
        assert subcommands.index("new-session") < subcommands.index("new-window")
        assert executor.tmux_commands()[-1] == ["select-layout", "-t", "zeroclaw", config.pane_layout]

    def test_worker_without_tasks_gets_no_brief(self, distributor, workspace):
        report = distributor.distribute(_plan("A"))

        assert report.launched_agents == ["gemini"]
        assert not (workspace / ".zeroclaw" / "codex-task.md").exists()

    def test_partial_launch_failure(self, distributor, executor):
        executor.on("tmux", "new-window", "-t", "zeroclaw", "-n", "copilot", returncode=1)

        report = distributor.distribute(_plan("A", "B", "C", "D"))

        assert report.failed == ["copilot"]
        assert report.launched_agents == ["gemini", "codex", "opencode"]

    def test_surface_failure_fails_every_worker(self, distributor, executor):
        executor.missing("gemini", "gh")
        executor.on("tmux", "new-session", returncode=1)

        report = distributor.distribute(_plan("A", "B"))

        assert not report.ok
        assert report.failed == ["codex", "opencode"]

    def test_unprovisioned_worker_starts_without_skills(self, distributor, executor, home):
        executor.missing("gh", "opencode")
        (home / ".gemini" / "superpowers").mkdir(parents=True)
        executor.on("git", "clone", returncode=128, stderr="fatal: repository not found")

        report = distributor.distribute(_plan("A", "B"))

        assert report.launched_agents == ["gemini", "codex"]
        sent = _pane_commands(executor)
        assert sent["gemini"].startswith("export SUPERPOWERS_SKILLS_ROOT=")
        assert "SUPERPOWERS_SKILLS_ROOT" not in sent["codex"]

    def test_briefs_respect_feedback_flag(self, distributor, workspace):
        distributor.config.feedback_loop = False
        distributor.distribute(_plan("A"))

        assert "Progress Signals" not in (workspace / ".zeroclaw" / "gemini-task.md").read_text()


class TestResume:
    """Tests for resuming from .planning/ state."""

    def test_prefers_opencode(self, distributor, executor):
        report = distributor.resume_from_state()

        assert report.launched_agents == ["opencode"]
        assert report.launched[0].window == "resume"

    def test_falls_back_to_first_resumable_worker(self, distributor, executor):
        executor.missing("opencode", "gemini")

        report = distributor.resume_from_state()

        assert report.launched_agents == ["codex"]

    def test_copilot_only_cannot_resume(self, distributor, executor):
        executor.missing("gemini", "codex", "opencode")
        assert distributor.resume_from_state() is None

    def test_no_workers(self, distributor, executor):
        executor.missing(*ALL_BINARIES)
        assert distributor.resume_from_state() is None
        assert executor.tmux_commands() == []

    def test_resume_without_skills_when_provisioning_fails(self, distributor, executor):
        executor.on("git", "clone", returncode=128)

        report = distributor.resume_from_state()

        assert report.launched_agents == ["opencode"]
        assert _pane_commands(executor)["resume"] == "opencode run /gsd:resume-work"
