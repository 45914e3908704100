"""Interactive conversation with the operator.

Reads free-form requests from the terminal and hands them to the session,
which classifies and acts on them.
"""

from collections.abc import Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from zeroclaw.cli_ui.session_view import SessionView
from zeroclaw.core.intent import Intent
from zeroclaw.core.models import LaunchReport

HELP_TEXT = (
    "Tell me what to do next, for example:\n"
    "  [cyan]new project[/]        plan a project from scratch\n"
    "  [cyan]add login page[/]     plan and distribute a new task\n"
    "  [cyan]continue[/]           resume from the existing .planning/ state\n"
    "  [cyan]exit[/]               end the session"
)


class Conversation:
    """Terminal operator channel for a running session.

    Args:
        console: Console to print to.
        surface_name: tmux session name shown in attach hints.
        ask: Input function; defaults to rich's Prompt.ask.
    """

    def __init__(
        self,
        console: Console | None = None,
        surface_name: str = "zeroclaw",
        ask: Callable[[str], str] | None = None,
    ):
        self.console = console or Console()
        self.surface_name = surface_name
        self.view = SessionView(self.console)
        self._ask = ask or Prompt.ask

    def greet(self, session_id: str) -> None:
        self.console.print(
            Panel(
                f"[bold]Session:[/] {escape(session_id)}\n\n{HELP_TEXT}",
                title="zeroclaw",
            )
        )

    def next_request(self) -> str | None:
        try:
            return self._ask("[cyan]zeroclaw[/]")
        except (EOFError, KeyboardInterrupt):
            self.console.print()
            return None

    def show_help(self) -> None:
        self.console.print("[yellow]I didn't catch that.[/yellow]")
        self.console.print(HELP_TEXT)

    def show_report(self, intent: Intent, report: LaunchReport | None) -> None:
        if report is None:
            if intent == Intent.CONTINUE:
                self.console.print("[yellow]Nothing to resume with; no capable agent is installed.[/yellow]")
            else:
                self.console.print("[yellow]No agents were launched. See the log above.[/yellow]")
            return

        self.console.print(self.view.render_launch(report, self.surface_name))
        if report.ok:
            self.console.print(f"[dim]Attach with: tmux attach -t {escape(self.surface_name)}[/dim]")
        else:
            self.console.print("[red]Every launch failed.[/red]")
