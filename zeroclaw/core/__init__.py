"""Core modules for the zeroclaw supervisor."""

from zeroclaw.core.config import ZeroclawConfig, load_config
from zeroclaw.core.models import (
    AgentDescriptor,
    LaunchReport,
    PaneRecord,
    Plan,
    PlanKind,
    SessionPhase,
    SessionRecord,
    SessionStatus,
)
from zeroclaw.core.session import InvalidTransitionError, Session
from zeroclaw.core.state import SessionStore

__all__ = [
    "AgentDescriptor",
    "InvalidTransitionError",
    "LaunchReport",
    "PaneRecord",
    "Plan",
    "PlanKind",
    "Session",
    "SessionPhase",
    "SessionRecord",
    "SessionStatus",
    "SessionStore",
    "ZeroclawConfig",
    "load_config",
]
