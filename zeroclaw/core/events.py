"""Worker event files.

Workers report progress by dropping files into the workspace. This is a
one-way channel: workers write, and external observers (the feedback
learner, `zeroclaw events`) read. The supervisor never waits on it.

Layout under .zeroclaw/:
    lightning-spans/<agent>-<event>-<ts>.json   one JSON WorkerEvent each
    errors/<agent>-<ts>.md                      Markdown error report
Timestamps are UTC, formatted YYYYmmddTHHMMSSZ, so file names sort in time
order.
"""

import logging
from collections.abc import Iterator
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from zeroclaw.core.models import utc_now
from zeroclaw.core.state import state_dir

logger = logging.getLogger(__name__)

SPANS_DIRNAME = "lightning-spans"
ERRORS_DIRNAME = "errors"
TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


class WorkerEventType(str, Enum):
    START = "start"
    DONE = "done"
    ERROR = "error"


class WorkerEvent(BaseModel):
    """One progress signal from a worker."""

    agent: str
    task: str
    event: WorkerEventType
    ts: datetime = Field(default_factory=utc_now)
    error: str | None = None

    @property
    def success(self) -> bool | None:
        if self.event == WorkerEventType.DONE:
            return True
        if self.event == WorkerEventType.ERROR:
            return False
        return None


class EventChannel:
    """Read and write worker event files for one workspace."""

    def __init__(self, workspace: Path):
        self.workspace = Path(workspace)
        self.spans_dir = state_dir(self.workspace) / SPANS_DIRNAME
        self.errors_dir = state_dir(self.workspace) / ERRORS_DIRNAME

    def ensure_dirs(self) -> None:
        self.spans_dir.mkdir(parents=True, exist_ok=True)
        self.errors_dir.mkdir(parents=True, exist_ok=True)

    def emit(self, event: WorkerEvent) -> Path:
        """Write an event file (plus an error report for error events).

        Returns:
            Path of the JSON event file.
        """
        self.ensure_dirs()
        stamp = event.ts.strftime(TIMESTAMP_FORMAT)
        path = self.spans_dir / f"{event.agent}-{event.event.value}-{stamp}.json"
        path.write_text(event.model_dump_json(indent=2) + "\n", encoding="utf-8")

        if event.event == WorkerEventType.ERROR:
            self._write_error_report(event, stamp)
        return path

    def _write_error_report(self, event: WorkerEvent, stamp: str) -> Path:
        report = self.errors_dir / f"{event.agent}-{stamp}.md"
        report.write_text(
            "# Agent Error Report\n"
            f"Agent:   {event.agent}\n"
            f"Task:    {event.task}\n"
            f"Time:    {stamp}\n"
            "\n"
            "## Error\n"
            f"{event.error or 'unknown error'}\n",
            encoding="utf-8",
        )
        return report

    def iter_events(self) -> Iterator[WorkerEvent]:
        """Yield events in file-name order, skipping unreadable files."""
        if not self.spans_dir.is_dir():
            return
        for path in sorted(self.spans_dir.glob("*.json")):
            try:
                yield WorkerEvent.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as e:
                logger.warning(f"Skipping malformed event file {path.name}: {e}")

    def error_reports(self) -> list[Path]:
        if not self.errors_dir.is_dir():
            return []
        return sorted(self.errors_dir.glob("*.md"))
