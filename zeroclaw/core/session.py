"""Workspace session lifecycle.

Owns the session state machine:

    idle -> conversing -> planning -> distributing -> agents_running -> session_end

Transitions are driven by classified operator intent (see dispatch()), never
by polling. Every transition is persisted to .zeroclaw/session.json. A
restart in the same workspace reuses the id of an unfinished session instead
of orphaning its history.
"""

import logging
import uuid
from pathlib import Path
from typing import Protocol

from zeroclaw.core.config import ZeroclawConfig, load_config
from zeroclaw.core.distributor import TaskDistributor
from zeroclaw.core.events import EventChannel
from zeroclaw.core.intent import Intent, classify_intent
from zeroclaw.core.models import (
    AgentDescriptor,
    LaunchReport,
    SessionPhase,
    SessionRecord,
    SessionStatus,
    utc_now,
)
from zeroclaw.core.planner import PlanningClient
from zeroclaw.core.plans import PlanArtifacts
from zeroclaw.core.provisioning import SkillProvisioner
from zeroclaw.core.state import SessionStore, state_dir
from zeroclaw.core.supervisor import AgentProcessSupervisor
from zeroclaw.process.executor import CommandExecutor

logger = logging.getLogger(__name__)

SESSION_LOG_DIR = Path("docs") / "session-logs"

_TRANSITIONS: dict[SessionPhase, set[SessionPhase]] = {
    SessionPhase.IDLE: {SessionPhase.CONVERSING},
    SessionPhase.CONVERSING: {SessionPhase.PLANNING, SessionPhase.AGENTS_RUNNING},
    SessionPhase.PLANNING: {SessionPhase.DISTRIBUTING, SessionPhase.CONVERSING},
    SessionPhase.DISTRIBUTING: {SessionPhase.AGENTS_RUNNING, SessionPhase.CONVERSING},
    SessionPhase.AGENTS_RUNNING: {
        SessionPhase.PLANNING,
        SessionPhase.AGENTS_RUNNING,
        SessionPhase.CONVERSING,
    },
    SessionPhase.SESSION_END: set(),
}


class InvalidTransitionError(Exception):
    """Requested state transition is not allowed from the current state."""

    def __init__(self, current: SessionPhase, target: SessionPhase):
        self.current = current
        self.target = target
        super().__init__(f"Illegal session transition {current.value} -> {target.value}")


def can_transition(current: SessionPhase, target: SessionPhase) -> bool:
    """Any live state may end the session; everything else follows the table."""
    if target == SessionPhase.SESSION_END:
        return current != SessionPhase.SESSION_END
    return target in _TRANSITIONS[current]


class OperatorChannel(Protocol):
    """Where operator requests come from and where results go."""

    def greet(self, session_id: str) -> None:
        ...

    def next_request(self) -> str | None:
        """Next line of operator input, or None when input is closed."""
        ...

    def show_help(self) -> None:
        ...

    def show_report(self, intent: Intent, report: LaunchReport | None) -> None:
        ...


class Session:
    """A supervisor session bound to one workspace.

    Args:
        workspace: Workspace root.
        config: Session configuration (defaults to .zeroclaw/config.yaml).
        executor: Runs every external command.
        planner: Planning client; built from the executor when omitted.
        home: Home directory holding worker config dirs.
    """

    def __init__(
        self,
        workspace: Path,
        config: ZeroclawConfig | None = None,
        executor: CommandExecutor | None = None,
        planner: PlanningClient | None = None,
        home: Path | None = None,
    ):
        self.workspace = Path(workspace).absolute()
        self.config = config or load_config(self.workspace)
        self.executor = executor or CommandExecutor(self.workspace)
        self.store = SessionStore(self.workspace)
        self.artifacts = PlanArtifacts(self.workspace)
        self.events = EventChannel(self.workspace)
        self.supervisor = AgentProcessSupervisor(
            self.workspace, self.executor, self.config, home=home
        )
        self.provisioner = SkillProvisioner(self.executor, self.config.skills_repo, home=home)
        self.planner = planner or PlanningClient(
            self.workspace, self.executor, self.config, self.artifacts, home=home
        )

        self.id = str(uuid.uuid4())
        self.phase = SessionPhase.IDLE
        self.agents: list[AgentDescriptor] = []
        self.started_at = None
        self.ended_at = None
        self._saved_log_level = logging.NOTSET

    @property
    def distributor(self) -> TaskDistributor:
        return TaskDistributor(
            self.workspace,
            self.id,
            self.supervisor,
            self.provisioner,
            self.config,
            self.artifacts,
        )

    # --- Public lifecycle ---

    def start(self, channel: OperatorChannel, resume: bool = False) -> None:
        """Run the session until the operator exits.

        Blocks until session_end. With resume=True the previous planning
        context is restored right after the conversation opens.
        """
        self.initialize()
        log_handler = self._attach_log_file()
        try:
            self.transition(SessionPhase.CONVERSING)
            logger.info(f"Session {self.id} workspace={self.workspace}")
            channel.greet(self.id)

            if resume:
                channel.show_report(Intent.CONTINUE, self.dispatch(Intent.CONTINUE))

            while self.phase != SessionPhase.SESSION_END:
                text = channel.next_request()
                if text is None:
                    self.dispatch(Intent.EXIT)
                    break
                if not text.strip():
                    continue

                intent = classify_intent(text)
                if intent == Intent.UNKNOWN:
                    channel.show_help()
                    continue

                report = self.dispatch(intent, text)
                if intent != Intent.EXIT:
                    channel.show_report(intent, report)
        finally:
            if self.phase != SessionPhase.SESSION_END:
                self.end()
            self._detach_log_file(log_handler)

    def initialize(self) -> None:
        """Scaffold directories and load or create persisted state (idle)."""
        self._ensure_dirs()
        self._load_or_init_state()

    def dispatch(self, intent: Intent, request: str = "") -> LaunchReport | None:
        """Act on one classified operator intent.

        Returns:
            The launch report of the distribution cycle the intent ran, if any.
        """
        if intent == Intent.EXIT:
            logger.info("Wrapping up session...")
            self.end()
            return None

        if intent in (Intent.PROJECT_INIT, Intent.NEW_TASK):
            return self._plan_and_distribute(intent, request)

        if intent == Intent.CONTINUE:
            report = self.distributor.resume_from_state()
            return self._settle(report)

        logger.info(f"Ignoring unclassified request: {request!r}")
        return None

    def end(self) -> None:
        """Move to session_end and persist the ended session."""
        self.transition(SessionPhase.SESSION_END)
        self.ended_at = utc_now()
        self._save(SessionStatus.ENDED)
        logger.info("Session ended.")

    def transition(self, target: SessionPhase) -> None:
        """Move to target and persist.

        Raises:
            InvalidTransitionError: If target is not reachable from here.
        """
        if not can_transition(self.phase, target):
            raise InvalidTransitionError(self.phase, target)
        logger.debug(f"Session {self.phase.value} -> {target.value}")
        self.phase = target
        if target != SessionPhase.SESSION_END:
            self._save(SessionStatus.ACTIVE)

    def record(self, status: SessionStatus = SessionStatus.ACTIVE) -> SessionRecord:
        return SessionRecord(
            id=self.id,
            workspace=str(self.workspace),
            agents=self.agents,
            status=status,
            phase=self.phase,
            started_at=self.started_at,
            ended_at=self.ended_at,
        )

    # --- Intent handling ---

    def _plan_and_distribute(self, intent: Intent, request: str) -> LaunchReport | None:
        self.transition(SessionPhase.PLANNING)
        plan = self.planner.run(intent, request)
        if plan is None:
            logger.warning("Planning produced no tasks; back to conversation.")
            self.transition(SessionPhase.CONVERSING)
            return None

        self.transition(SessionPhase.DISTRIBUTING)
        report = self.distributor.distribute(plan)
        return self._settle(report)

    def _settle(self, report: LaunchReport | None) -> LaunchReport | None:
        """agents_running while the surface hosts workers, otherwise conversing.

        The agent list mirrors the supervisor's live windows, so workers
        from an earlier cycle stay listed until their surface is torn down.
        """
        self.agents = self._descriptors()
        if self.agents:
            self.transition(SessionPhase.AGENTS_RUNNING)
        elif self.phase != SessionPhase.CONVERSING:
            self.transition(SessionPhase.CONVERSING)
        return report

    def _descriptors(self) -> list[AgentDescriptor]:
        descriptors = []
        for pane in self.supervisor.records:
            agent = self.supervisor.catalog[pane.agent]
            descriptor = agent.describe(self.supervisor.home)
            descriptor.window = pane.window
            descriptors.append(descriptor)
        return descriptors

    # --- Helpers ---

    def _ensure_dirs(self) -> None:
        state_dir(self.workspace).mkdir(parents=True, exist_ok=True)
        self.artifacts.plan_dir.mkdir(parents=True, exist_ok=True)
        (self.workspace / SESSION_LOG_DIR).mkdir(parents=True, exist_ok=True)
        if self.config.feedback_loop:
            self.events.ensure_dirs()

    def _load_or_init_state(self) -> None:
        previous = self.store.load_or_none()
        if previous is not None and previous.status != SessionStatus.ENDED:
            logger.warning(f"Resuming unfinished session: {previous.id}")
            self.id = previous.id

        self.phase = SessionPhase.IDLE
        self.started_at = utc_now()
        self.ended_at = None
        self._save(SessionStatus.ACTIVE)

    def _save(self, status: SessionStatus) -> None:
        self.store.save(self.record(status))

    def _attach_log_file(self) -> logging.Handler:
        handler = logging.FileHandler(
            self.workspace / SESSION_LOG_DIR / f"{self.id}.log", encoding="utf-8"
        )
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        package_logger = logging.getLogger("zeroclaw")
        # The session log always records INFO, whatever the console shows
        self._saved_log_level = package_logger.level
        if package_logger.getEffectiveLevel() > logging.INFO:
            package_logger.setLevel(logging.INFO)
        package_logger.addHandler(handler)
        return handler

    def _detach_log_file(self, handler: logging.Handler) -> None:
        package_logger = logging.getLogger("zeroclaw")
        package_logger.removeHandler(handler)
        package_logger.setLevel(self._saved_log_level)
        handler.close()
