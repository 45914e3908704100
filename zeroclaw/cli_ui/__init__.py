"""Terminal UI for the zeroclaw supervisor."""

from zeroclaw.cli_ui.conversation import Conversation
from zeroclaw.cli_ui.session_view import SessionView

__all__ = ["Conversation", "SessionView"]
