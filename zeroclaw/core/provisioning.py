"""Skill provisioning for workers.

Clones the skills repository into a worker's config directory (or
fast-forwards an existing checkout) and creates the links that worker
expects. Provisioning is best effort: a worker that cannot be provisioned
still launches, just without the extra skills.
"""

import logging
import os
from pathlib import Path

from zeroclaw.core.agents import AgentRuntime
from zeroclaw.process.executor import CommandExecutor

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 120.0


class ProvisioningError(Exception):
    """Skills could not be installed for a worker."""

    pass


class SkillProvisioner:
    """Install the skills checkout for catalog workers."""

    def __init__(
        self,
        executor: CommandExecutor,
        repo_url: str,
        home: Path | None = None,
    ):
        self.executor = executor
        self.repo_url = repo_url
        self.home = home or Path.home()

    def ensure(self, agent: AgentRuntime) -> bool:
        """Make sure the agent's skills are installed.

        Returns:
            True if skills are in place, False if provisioning failed.
        """
        skills_dir = agent.skills_dir(self.home)
        if skills_dir.is_dir():
            self._update(skills_dir)
            return True
        if skills_dir.exists():
            logger.warning(f"Skill checkout for {agent.name} is not a directory: {skills_dir}")
            return False

        try:
            self._install(agent, skills_dir)
        except ProvisioningError as e:
            logger.warning(
                f"Skill install failed for {agent.name}: {e}. "
                f"It will run without skills; install manually from {self.repo_url}"
            )
            return False

        logger.info(f"Skills installed for {agent.name}")
        return True

    def _update(self, skills_dir: Path) -> None:
        # Offline is fine, the existing checkout still works
        result = self.executor.run(
            ["git", "pull", "--ff-only"], workdir=skills_dir, timeout=GIT_TIMEOUT
        )
        if not result.ok:
            logger.debug(f"Skills update skipped for {skills_dir}: {result.describe()}")

    def _install(self, agent: AgentRuntime, skills_dir: Path) -> None:
        try:
            agent.config_dir(self.home).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProvisioningError(f"cannot create {agent.config_dir(self.home)}: {e}") from e

        result = self.executor.run(
            ["git", "clone", self.repo_url, str(skills_dir)], timeout=GIT_TIMEOUT
        )
        if not result.ok:
            raise ProvisioningError(f"git clone failed: {result.describe()}")

        for source, link in agent.provisioning_links(self.home):
            self._link(source, link)

    @staticmethod
    def _link(source: Path, link: Path) -> None:
        if link.exists() or link.is_symlink():
            return
        try:
            link.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(source, link)
        except OSError as e:
            raise ProvisioningError(f"cannot link {link} -> {source}: {e}") from e
