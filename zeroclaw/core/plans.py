"""Planning artifact adapter.

The planning collaborator leaves flat Markdown documents under .planning/.
This module reads them back into a Plan, pulls checkbox tasks out of the
text, and writes the artifacts workers rely on without ever clobbering a
document that is already there.
"""

import logging
import re
from pathlib import Path

from zeroclaw.core.models import Plan, PlanKind

logger = logging.getLogger(__name__)

PLANNING_DIRNAME = ".planning"
QUICK_DIRNAME = "quick"
IMPLEMENT_FILENAME = "implement.md"

# Documents a plan may carry, in read order
PLAN_DOCUMENTS = (
    "PLAN.md",
    "REQUIREMENTS.md",
    "ROADMAP.md",
    "CONTEXT.md",
    "RESEARCH.md",
)

# "- [ ] build login" / "* [x] write tests"
_TASK_LINE = re.compile(r"[-*]\s*\[[ xX]\]\s*(.+)")

_PHASE_REF = re.compile(r"Phase\s+(\d+)", re.IGNORECASE)


def extract_tasks(text: str) -> list[str]:
    """Extract checkbox task descriptions from Markdown text.

    Order is preserved and duplicates are kept. Lines without a checkbox
    are ignored.
    """
    tasks: list[str] = []
    for line in text.splitlines():
        match = _TASK_LINE.search(line)
        if match:
            description = match.group(1).strip()
            if description:
                tasks.append(description)
    return tasks


def phase_dirname(phase: int) -> str:
    return f"phase-{phase:02d}"


class PlanArtifacts:
    """Reads and writes the planning documents of one workspace."""

    def __init__(self, workspace: Path):
        self.workspace = Path(workspace)
        self.plan_dir = self.workspace / PLANNING_DIRNAME

    def _read_documents(self, base: Path) -> dict[str, str]:
        files: dict[str, str] = {}
        for name in PLAN_DOCUMENTS:
            path = base / name
            if path.is_file():
                files[name] = path.read_text(encoding="utf-8")
        return files

    def read_plan(self, phase: int | None = None) -> Plan | None:
        """Read the project plan, or a phase plan when phase is given.

        Returns:
            The Plan, or None when PLAN.md is missing or has no tasks.
        """
        base = self.plan_dir / phase_dirname(phase) if phase is not None else self.plan_dir
        files = self._read_documents(base)
        tasks = extract_tasks(files.get("PLAN.md", ""))
        if not tasks:
            logger.debug(f"No tasks found under {base}")
            return None

        return Plan(
            kind=PlanKind.PHASE if phase is not None else PlanKind.PROJECT,
            phase=phase,
            tasks=tuple(tasks),
            files=files,
        )

    def latest_quick_dir(self) -> Path | None:
        """Lexicographically last quick-plan directory (names are sortable prefixes)."""
        quick_dir = self.plan_dir / QUICK_DIRNAME
        if not quick_dir.is_dir():
            return None
        subdirs = sorted(p.name for p in quick_dir.iterdir() if p.is_dir())
        if not subdirs:
            return None
        return quick_dir / subdirs[-1]

    def read_quick_plan(self) -> Plan | None:
        """Read the most recent quick plan."""
        latest = self.latest_quick_dir()
        if latest is None:
            return None

        plan_file = latest / "PLAN.md"
        if not plan_file.is_file():
            return None

        content = plan_file.read_text(encoding="utf-8")
        tasks = extract_tasks(content)
        if not tasks:
            return None

        return Plan(kind=PlanKind.QUICK, tasks=tuple(tasks), files={"PLAN.md": content})

    def next_phase(self) -> int | None:
        """Phase to plan next, or None when there is no roadmap yet."""
        roadmap = self.plan_dir / "ROADMAP.md"
        if not roadmap.is_file():
            return None
        match = _PHASE_REF.search(roadmap.read_text(encoding="utf-8"))
        return int(match.group(1)) if match else 1

    def write_artifacts(self, plan: Plan) -> list[Path]:
        """Write implement.md and the plan documents into .planning/.

        Write-once: a document that already exists is left untouched so
        operator and collaborator edits survive.

        Returns:
            Paths that were actually written.
        """
        self.plan_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []

        checklist = "\n".join(f"- [ ] {task}" for task in plan.tasks)
        documents = {IMPLEMENT_FILENAME: f"# Implementation Tracking\n\n{checklist}\n"}
        documents.update(plan.files)

        for name, content in documents.items():
            dest = self.plan_dir / name
            if dest.exists():
                continue
            dest.write_text(content, encoding="utf-8")
            written.append(dest)

        return written
