"""Tests for the worker catalog."""

from __future__ import annotations

from pathlib import Path

import pytest

from zeroclaw.core.agents import (
    AGENT_CATALOG,
    CodexAgent,
    CopilotAgent,
    GeminiAgent,
    OpencodeAgent,
    UnknownAgentError,
    get_agent,
)

BRIEF = Path("/ws/.zeroclaw/codex-task.md")
SKILLS = Path("/home/dev/.codex/superpowers/skills")


class TestCatalog:
    """Tests for catalog contents and lookup."""

    def test_catalog_order(self):
        assert list(AGENT_CATALOG) == ["gemini", "copilot", "codex", "opencode"]

    def test_get_agent(self):
        assert isinstance(get_agent("codex"), CodexAgent)

    def test_unknown_agent(self):
        with pytest.raises(UnknownAgentError, match="Known agents"):
            get_agent("cursor")


class TestProbeCommands:
    """Tests for liveness probe commands."""

    def test_default_probe(self):
        assert GeminiAgent().probe_command() == ["gemini", "--version"]

    def test_copilot_probe_goes_through_gh(self):
        assert CopilotAgent().probe_command() == ["gh", "copilot", "--version"]


class TestLaunchCommands:
    """Tests for per-variant launch commands."""

    def test_bootstrap_exports_skills_root(self):
        assert CodexAgent().bootstrap(SKILLS) == (
            "export SUPERPOWERS_SKILLS_ROOT=/home/dev/.codex/superpowers/skills"
        )

    def test_bootstrap_quotes_paths_with_spaces(self):
        command = CodexAgent().bootstrap(Path("/home/my user/skills"))
        assert command == "export SUPERPOWERS_SKILLS_ROOT='/home/my user/skills'"

    def test_codex_gets_brief_path(self):
        command = CodexAgent().command(BRIEF, "ignored", SKILLS)
        assert command.endswith(f"&& codex {BRIEF}")
        assert command.startswith("export SUPERPOWERS_SKILLS_ROOT=")

    def test_without_skills_root_starts_bare(self):
        assert CodexAgent().command(BRIEF, "ignored", None) == f"codex {BRIEF}"

    def test_copilot_pipes_brief(self):
        command = CopilotAgent().launch_command(BRIEF, "ignored")
        assert command == f"cat {BRIEF} | gh copilot suggest -t shell"

    def test_gemini_inline_prompt_points_at_brief(self):
        command = GeminiAgent().launch_command(BRIEF, "ignored")
        assert command.startswith("gemini '")
        assert str(BRIEF) in command

    def test_opencode_is_interactive(self):
        assert OpencodeAgent().launch_command(BRIEF, "ignored") == "opencode"


class TestResume:
    """Tests for resume support."""

    def test_copilot_cannot_resume(self):
        assert not CopilotAgent().supports_resume

    def test_resume_commands(self):
        assert OpencodeAgent().resume_command() == "opencode run /gsd:resume-work"
        assert GeminiAgent().resume_command() == "gemini /gsd:resume-work"
        assert CodexAgent().resume_command() == "codex /gsd:resume-work"


class TestProvisioningLinks:
    """Tests for the links each variant needs."""

    def test_copilot_has_no_links(self, home):
        assert CopilotAgent().provisioning_links(home) == []

    def test_codex_links_into_agents_dir(self, home):
        [(source, link)] = CodexAgent().provisioning_links(home)
        assert source == home / ".codex" / "superpowers" / "skills"
        assert link == home / ".agents" / "skills" / "superpowers"

    def test_opencode_links_plugin_and_skills(self, home):
        links = dict(
            (link.relative_to(home).as_posix(), source)
            for source, link in OpencodeAgent().provisioning_links(home)
        )
        assert set(links) == {
            ".config/opencode/plugins/superpowers.js",
            ".config/opencode/skills/superpowers",
        }

    def test_describe(self, home):
        descriptor = GeminiAgent().describe(home)
        assert descriptor.name == "gemini"
        assert descriptor.config_dir == str(home / ".gemini")
