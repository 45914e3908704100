# conftest.py - Shared pytest fixtures for all tests
"""Shared pytest fixtures for the zeroclaw test suite.

This module provides foundational fixtures used across all test modules:
- Temporary workspace and home directories
- A scripted fake CommandExecutor (no real tmux, git or worker CLIs run)
- Sample planning documents

Usage:
    Import fixtures implicitly via pytest's fixture discovery.
    All fixtures in this file are automatically available in test modules.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from zeroclaw.core.config import ZeroclawConfig
from zeroclaw.process.executor import COMMAND_NOT_FOUND, ExecutionResult


# =============================================================================
# Fake External Commands
# =============================================================================


class FakeExecutor:
    """Stand-in for CommandExecutor that records every command.

    Responses are scripted by command prefix with on(); the most recently
    registered matching rule wins. Unmatched commands succeed.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self._rules: list[tuple[tuple[str, ...], ExecutionResult]] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        self._rules.append(
            (
                prefix,
                ExecutionResult(
                    returncode=returncode,
                    stdout=stdout,
                    stderr=stderr,
                    timed_out=timed_out,
                ),
            )
        )

    def missing(self, *binaries: str) -> None:
        """Make binaries behave as if they were not installed."""
        for binary in binaries:
            self.on(binary, returncode=COMMAND_NOT_FOUND)

    def run(
        self,
        command: list[str],
        workdir: str | Path | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
        interactive: bool = False,
    ) -> ExecutionResult:
        self.calls.append(
            {
                "command": list(command),
                "workdir": workdir,
                "timeout": timeout,
                "input_text": input_text,
                "interactive": interactive,
            }
        )
        for prefix, result in reversed(self._rules):
            if tuple(command[: len(prefix)]) == prefix:
                return result
        return ExecutionResult(returncode=0)

    @property
    def commands(self) -> list[list[str]]:
        return [call["command"] for call in self.calls]

    def tmux_commands(self) -> list[list[str]]:
        """tmux argument vectors without the leading 'tmux'."""
        return [cmd[1:] for cmd in self.commands if cmd and cmd[0] == "tmux"]


# =============================================================================
# Workspace Fixtures
# =============================================================================


@pytest.fixture
def executor() -> FakeExecutor:
    """Scripted executor; every command succeeds unless told otherwise."""
    return FakeExecutor()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace directory."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Fake home directory holding worker config dirs."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def config() -> ZeroclawConfig:
    """Default configuration."""
    return ZeroclawConfig()


# =============================================================================
# Planning Fixtures
# =============================================================================


SAMPLE_PLAN = """# Plan

## Tasks
- [ ] build login
* [x] write tests
- no checkbox here
  - [ ] nested item
"""

SAMPLE_ROADMAP = """# Roadmap

## Phase 2: Authentication
## Phase 3: Billing
"""


@pytest.fixture
def planned_workspace(workspace: Path) -> Path:
    """Workspace with a project plan and roadmap under .planning/."""
    plan_dir = workspace / ".planning"
    plan_dir.mkdir()
    (plan_dir / "PLAN.md").write_text(SAMPLE_PLAN)
    (plan_dir / "ROADMAP.md").write_text(SAMPLE_ROADMAP)
    (plan_dir / "REQUIREMENTS.md").write_text("# Requirements\n\nUsers can log in.\n")
    return workspace
