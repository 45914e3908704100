"""Rich rendering of session state, launches and worker events."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from zeroclaw.core.events import WorkerEvent, WorkerEventType
from zeroclaw.core.models import LaunchReport, SessionPhase, SessionRecord, SessionStatus


class SessionView:
    """Tables and panels for the session CLI.

    SECURITY: agent names, tasks and error text come from files workers
    write, so every such string is escaped before it reaches Rich markup.
    """

    PHASE_COLORS = {
        SessionPhase.IDLE: "dim",
        SessionPhase.CONVERSING: "cyan",
        SessionPhase.PLANNING: "yellow",
        SessionPhase.DISTRIBUTING: "yellow",
        SessionPhase.AGENTS_RUNNING: "green",
        SessionPhase.SESSION_END: "dim",
    }

    EVENT_COLORS = {
        WorkerEventType.START: "blue",
        WorkerEventType.DONE: "green",
        WorkerEventType.ERROR: "red",
    }

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def render_session(self, record: SessionRecord) -> Panel:
        color = self.PHASE_COLORS.get(record.phase, "white")
        status_color = "green" if record.status == SessionStatus.ACTIVE else "dim"
        agents = ", ".join(escape(a.name) for a in record.agents) or "-"
        started = record.started_at.isoformat() if record.started_at else "-"
        ended = record.ended_at.isoformat() if record.ended_at else "-"
        return Panel(
            f"[bold]Status:[/] [{status_color}]{record.status.value}[/]\n"
            f"[bold]Phase:[/] [{color}]{record.phase.value}[/]\n"
            f"[bold]Workspace:[/] {escape(record.workspace)}\n"
            f"[bold]Agents:[/] {agents}\n"
            f"[bold]Started:[/] {started}\n"
            f"[bold]Ended:[/] {ended}",
            title=f"Session: {escape(record.id[:8])}...",
        )

    def render_agents(self, record: SessionRecord) -> Table:
        table = Table(title="Agents")
        table.add_column("Agent")
        table.add_column("Binary")
        table.add_column("Window")
        table.add_column("Config Dir")

        for agent in record.agents:
            table.add_row(
                escape(agent.name),
                escape(agent.binary),
                escape(agent.window or "-"),
                escape(agent.config_dir),
            )
        return table

    def render_launch(self, report: LaunchReport, surface_name: str) -> Table:
        table = Table(title=f"Launched in tmux session '{escape(surface_name)}'")
        table.add_column("Agent")
        table.add_column("Window")
        table.add_column("Status")

        for pane in report.launched:
            table.add_row(escape(pane.agent), escape(pane.window), "[green]launched[/]")
        for agent in report.failed:
            table.add_row(escape(agent), "-", "[red]failed[/]")
        return table

    def render_events(self, events: list[WorkerEvent]) -> Table:
        table = Table(title="Worker Events")
        table.add_column("Time")
        table.add_column("Agent")
        table.add_column("Event")
        table.add_column("Task")
        table.add_column("Error")

        for event in events:
            color = self.EVENT_COLORS.get(event.event, "white")
            table.add_row(
                event.ts.strftime("%Y-%m-%d %H:%M:%S"),
                escape(event.agent),
                f"[{color}]{event.event.value}[/]",
                escape(event.task),
                escape(event.error) if event.error else "-",
            )
        return table

    def show_session(self, record: SessionRecord) -> None:
        self.console.print(self.render_session(record))
        if record.agents:
            self.console.print(self.render_agents(record))
