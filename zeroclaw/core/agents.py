"""Worker catalog.

Each supported worker CLI is one AgentRuntime subclass. A variant knows how
to probe its binary, how to launch it against a task brief, how to point it
at provisioned skills, and which links the skill provisioner must create.
The catalog is fixed; availability is decided per distribution cycle by the
process supervisor's probe.
"""

import shlex
from pathlib import Path

from zeroclaw.core.models import AgentDescriptor

# Name of the skills checkout inside each worker's config directory
SKILLS_CHECKOUT = "superpowers"

RESUME_COMMAND = "/gsd:resume-work"


class UnknownAgentError(Exception):
    """Worker name is not in the catalog."""

    pass


class AgentRuntime:
    """Base class for a worker CLI.

    Subclasses set the class attributes and override launch_command();
    the remaining hooks have sensible defaults.
    """

    name: str = ""
    binary: str = ""
    # Config directory relative to the user's home
    config_subdir: str = ""
    version_args: tuple[str, ...] = ("--version",)
    supports_resume: bool = True

    # --- Paths ---

    def config_dir(self, home: Path) -> Path:
        return home / self.config_subdir

    def skills_dir(self, home: Path) -> Path:
        return self.config_dir(home) / SKILLS_CHECKOUT

    def skills_root(self, home: Path) -> Path:
        """Directory the worker should load skills from."""
        return self.skills_dir(home) / "skills"

    # --- Commands ---

    def probe_command(self) -> list[str]:
        return [self.binary, *self.version_args]

    def bootstrap(self, skills_root: Path) -> str:
        """Shell step that tells the worker where its skills live."""
        return f"export SUPERPOWERS_SKILLS_ROOT={shlex.quote(str(skills_root))}"

    def launch_command(self, brief_path: Path, brief_text: str) -> str:
        """Native invocation of the worker for a task brief."""
        raise NotImplementedError

    def command(self, brief_path: Path, brief_text: str, skills_root: Path | None) -> str:
        """Full pane command: skills bootstrap, then the worker itself.

        Without a skills root the worker is started bare.
        """
        launch = self.launch_command(brief_path, brief_text)
        if skills_root is None:
            return launch
        return f"{self.bootstrap(skills_root)} && {launch}"

    def resume_command(self) -> str:
        return f"{self.binary} run {RESUME_COMMAND}"

    def provisioning_links(self, home: Path) -> list[tuple[Path, Path]]:
        """(source, link) pairs created after the skills checkout is cloned."""
        return []

    def describe(self, home: Path) -> AgentDescriptor:
        return AgentDescriptor(
            name=self.name,
            binary=self.binary,
            config_dir=str(self.config_dir(home)),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class GeminiAgent(AgentRuntime):
    """Gemini CLI: takes its prompt inline."""

    name = "gemini"
    binary = "gemini"
    config_subdir = ".gemini"

    def launch_command(self, brief_path: Path, brief_text: str) -> str:
        prompt = f"Read {brief_path} and work through the tasks assigned to you there."
        return f"gemini {shlex.quote(prompt)}"

    def resume_command(self) -> str:
        return f"gemini {RESUME_COMMAND}"

    def provisioning_links(self, home: Path) -> list[tuple[Path, Path]]:
        return [
            (self.skills_root(home), self.config_dir(home) / "skills" / SKILLS_CHECKOUT),
        ]


class CopilotAgent(AgentRuntime):
    """GitHub Copilot via gh: reads the brief from a pipe."""

    name = "copilot"
    binary = "gh"
    config_subdir = ".config/gh-copilot"
    version_args = ("copilot", "--version")
    supports_resume = False

    def launch_command(self, brief_path: Path, brief_text: str) -> str:
        return f"cat {shlex.quote(str(brief_path))} | gh copilot suggest -t shell"


class CodexAgent(AgentRuntime):
    """Codex CLI: given the brief file as its prompt argument."""

    name = "codex"
    binary = "codex"
    config_subdir = ".codex"

    def launch_command(self, brief_path: Path, brief_text: str) -> str:
        return f"codex {shlex.quote(str(brief_path))}"

    def resume_command(self) -> str:
        return f"codex {RESUME_COMMAND}"

    def provisioning_links(self, home: Path) -> list[tuple[Path, Path]]:
        return [
            (self.skills_root(home), home / ".agents" / "skills" / SKILLS_CHECKOUT),
        ]


class OpencodeAgent(AgentRuntime):
    """OpenCode: interactive TUI, picks the brief up from the workspace."""

    name = "opencode"
    binary = "opencode"
    config_subdir = ".config/opencode"

    def launch_command(self, brief_path: Path, brief_text: str) -> str:
        return "opencode"

    def provisioning_links(self, home: Path) -> list[tuple[Path, Path]]:
        skills_dir = self.skills_dir(home)
        config_dir = self.config_dir(home)
        return [
            (
                skills_dir / ".opencode" / "plugins" / "superpowers.js",
                config_dir / "plugins" / "superpowers.js",
            ),
            (self.skills_root(home), config_dir / "skills" / SKILLS_CHECKOUT),
        ]


# Catalog order is the worker order used for probing and round-robin
AGENT_CATALOG: dict[str, AgentRuntime] = {
    agent.name: agent
    for agent in (GeminiAgent(), CopilotAgent(), CodexAgent(), OpencodeAgent())
}


def get_agent(name: str) -> AgentRuntime:
    try:
        return AGENT_CATALOG[name]
    except KeyError:
        raise UnknownAgentError(
            f"Unknown agent '{name}'. Known agents: {', '.join(AGENT_CATALOG)}"
        ) from None
