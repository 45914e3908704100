"""zeroclaw - multi-agent session supervisor.

Runs AI coding CLIs (gemini, copilot, codex, opencode) as independent workers
in a shared tmux surface and hands each of them a slice of the current plan.
"""

__version__ = "0.1.0"
