"""Session configuration.

Defaults live on ZeroclawConfig; a workspace may override them in
.zeroclaw/config.yaml, and CLI options override both.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"


@dataclass
class ZeroclawConfig:
    """Configuration for one supervisor session."""

    # tmux session that hosts every worker window
    surface_name: str = "zeroclaw"
    pane_layout: str = "tiled"
    surface_width: int = 220
    surface_height: int = 50

    # Liveness probe timeout (seconds)
    probe_timeout: float = 3.0

    # Write error-report / event instructions into task briefs
    feedback_loop: bool = True

    # Skill provisioning source
    skills_repo: str = "https://github.com/obra/superpowers.git"

    # Worker picked for "continue", first available wins
    resume_preference: list[str] = field(default_factory=lambda: ["opencode"])

    # Runtimes tried, in order, for planning commands
    planning_runtimes: list[str] = field(
        default_factory=lambda: ["opencode", "claude", "gemini", "codex"]
    )

    def with_overrides(self, **overrides: Any) -> "ZeroclawConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def load_config(workspace: Path) -> ZeroclawConfig:
    """Load .zeroclaw/config.yaml from a workspace.

    Missing file means defaults. Unknown keys are ignored and a malformed
    file falls back to defaults with a warning.
    """
    config_path = workspace / ".zeroclaw" / CONFIG_FILENAME
    if not config_path.exists():
        return ZeroclawConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return ZeroclawConfig()

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {config_path}: expected a mapping")
        return ZeroclawConfig()

    known = {f.name for f in fields(ZeroclawConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Unknown config keys ignored: {', '.join(unknown)}")

    return ZeroclawConfig().with_overrides(**{k: v for k, v in data.items() if k in known})
