"""Data models for the zeroclaw supervisor.

Uses Pydantic for everything that is persisted or crosses a component
boundary.
"""

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class SessionPhase(str, Enum):
    """States of the session state machine."""

    IDLE = "idle"
    CONVERSING = "conversing"
    PLANNING = "planning"
    DISTRIBUTING = "distributing"
    AGENTS_RUNNING = "agents_running"
    SESSION_END = "session_end"


class SessionStatus(str, Enum):
    """Persisted lifecycle status of a session."""

    ACTIVE = "active"
    ENDED = "ended"


class PlanKind(str, Enum):
    """Where a plan came from."""

    PROJECT = "project"  # .planning/
    PHASE = "phase"  # .planning/phase-NN/
    QUICK = "quick"  # .planning/quick/<NNN-slug>/


# --- Plan ---


class Plan(BaseModel):
    """Ordered task list plus the planning documents it was read from.

    Immutable once built. A plan without tasks is never constructed by the
    artifact adapter; readers return None instead.
    """

    model_config = ConfigDict(frozen=True)

    kind: PlanKind
    phase: int | None = None
    tasks: tuple[str, ...] = ()
    files: dict[str, str] = Field(default_factory=dict)

    @property
    def has_roadmap(self) -> bool:
        return "ROADMAP.md" in self.files


# --- Agents and panes ---


class AgentDescriptor(BaseModel):
    """A worker known to the session."""

    name: str
    binary: str
    config_dir: str
    window: str | None = None


class ProbeResult(BaseModel):
    """Outcome of one liveness probe."""

    name: str
    available: bool
    reason: str = ""


class PaneRecord(BaseModel):
    """A window in the tmux surface hosting one worker process."""

    surface: str
    window: str
    agent: str
    command: str
    launched_at: datetime = Field(default_factory=utc_now)


class TaskBrief(BaseModel):
    """A worker's assignment as written to .zeroclaw/<agent>-task.md."""

    agent: str
    path: Path
    tasks: list[str]
    text: str


class LaunchReport(BaseModel):
    """Aggregate result of one distribution cycle's launches."""

    launched: list[PaneRecord] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when at least one worker is running."""
        return bool(self.launched)

    @property
    def launched_agents(self) -> list[str]:
        return [record.agent for record in self.launched]


# --- Session ---


class SessionRecord(BaseModel):
    """The persisted session document (.zeroclaw/session.json)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    workspace: str
    agents: list[AgentDescriptor] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    phase: SessionPhase = SessionPhase.IDLE
    started_at: datetime | None = Field(default=None, alias="startedAt")
    ended_at: datetime | None = Field(default=None, alias="endedAt")
