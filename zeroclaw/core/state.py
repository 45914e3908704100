"""Persisted session state.

The session document (.zeroclaw/session.json) is the single source of truth
when a supervisor restarts in a workspace. Only the session state machine
writes it; everything else reads.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from zeroclaw.core.models import SessionRecord

logger = logging.getLogger(__name__)

STATE_DIRNAME = ".zeroclaw"
STATE_FILENAME = "session.json"


class StateCorruptionError(Exception):
    """The persisted session document cannot be read or does not validate."""

    pass


def state_dir(workspace: Path) -> Path:
    return workspace / STATE_DIRNAME


class SessionStore:
    """JSON file store for a workspace's SessionRecord."""

    def __init__(self, workspace: Path):
        self.workspace = Path(workspace)
        self.path = state_dir(self.workspace) / STATE_FILENAME

    def load(self) -> SessionRecord | None:
        """Load the persisted session.

        Returns:
            The record, or None if no document exists.

        Raises:
            StateCorruptionError: If the document is unreadable or malformed.
        """
        if not self.path.exists():
            return None

        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StateCorruptionError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StateCorruptionError(f"{self.path} does not contain a JSON object")

        try:
            return SessionRecord.model_validate(data)
        except ValidationError as e:
            raise StateCorruptionError(f"Invalid session document {self.path}: {e}") from e

    def load_or_none(self) -> SessionRecord | None:
        """Load the persisted session, treating corruption as absence."""
        try:
            return self.load()
        except StateCorruptionError as e:
            logger.warning(f"{e}. Starting with fresh session state.")
            return None

    def save(self, record: SessionRecord) -> None:
        """Write the record atomically (temp file + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump(mode="json", by_alias=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self.path)
