"""CLI entry point for the zeroclaw supervisor.

Commands:
- zeroclaw start: Run an interactive session in a workspace
- zeroclaw status: Show the persisted session of this directory
- zeroclaw kill: Kill the tmux surface and every worker in it
- zeroclaw signal: Record a worker progress event (called by workers)
- zeroclaw events: List recorded worker events
- zeroclaw version: Show version information
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from zeroclaw import __version__
from zeroclaw.cli_ui.conversation import Conversation
from zeroclaw.cli_ui.session_view import SessionView
from zeroclaw.core.agents import UnknownAgentError, get_agent
from zeroclaw.core.config import load_config
from zeroclaw.core.events import EventChannel, WorkerEvent, WorkerEventType
from zeroclaw.core.session import Session
from zeroclaw.core.state import SessionStore, StateCorruptionError
from zeroclaw.process.executor import CommandExecutor
from zeroclaw.process.tmux import PANE_LAYOUTS, TmuxSurface

console = Console()


def get_repo_path() -> Path:
    """Get the workspace path (current directory)."""
    return Path.cwd()


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich on the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """zeroclaw - multi-agent session supervisor.

    Plans work with an AI planning CLI, then runs gemini, copilot, codex
    and opencode side by side in one tmux session, each on its own slice
    of the plan.
    """
    pass


@main.command()
@click.argument(
    "workspace",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option("--resume", is_flag=True, help="Restore the previous planning context on start")
@click.option("--no-feedback", is_flag=True, help="Leave progress-signal instructions out of task briefs")
@click.option(
    "--layout",
    type=click.Choice(PANE_LAYOUTS),
    default=None,
    help="tmux layout for worker panes",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def start(
    workspace: Path | None,
    resume: bool,
    no_feedback: bool,
    layout: str | None,
    verbose: bool,
) -> None:
    """Start an interactive supervisor session."""
    configure_logging(verbose)
    workspace = (workspace or get_repo_path()).absolute()

    try:
        workspace.mkdir(parents=True, exist_ok=True)
        config = load_config(workspace).with_overrides(
            pane_layout=layout,
            feedback_loop=False if no_feedback else None,
        )
        session = Session(workspace, config)
        conversation = Conversation(console, surface_name=config.surface_name)
        session.start(conversation, resume=resume)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. Session state saved.[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print("[green]Session ended.[/green]")


@main.command()
def status() -> None:
    """Show the persisted session for this directory."""
    store = SessionStore(get_repo_path())

    try:
        record = store.load()
    except StateCorruptionError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if record is None:
        console.print("[yellow]No active session found in this directory.[/yellow]")
        return

    SessionView(console).show_session(record)


@main.command()
def kill() -> None:
    """Kill the tmux surface and every worker running in it."""
    repo_path = get_repo_path()
    config = load_config(repo_path)
    surface = TmuxSurface(config.surface_name, CommandExecutor(repo_path))

    if surface.kill():
        console.print(f"[green]Killed tmux session '{escape(surface.name)}'.[/green]")
    else:
        console.print(f'[yellow]No tmux session named "{escape(surface.name)}" found.[/yellow]')


@main.command()
@click.argument("event", type=click.Choice([e.value for e in WorkerEventType]))
@click.argument("task")
@click.option(
    "--agent",
    "-a",
    envvar="ZEROCLAW_AGENT",
    required=True,
    help="Worker reporting the event (or set ZEROCLAW_AGENT)",
)
@click.option("--error", "error_text", default=None, help="Error message for 'error' events")
def signal(event: str, task: str, agent: str, error_text: str | None) -> None:
    """Record a worker progress event for TASK."""
    try:
        get_agent(agent)
    except UnknownAgentError as e:
        raise click.BadParameter(str(e), param_hint="--agent") from None

    worker_event = WorkerEvent(
        agent=agent,
        task=task,
        event=WorkerEventType(event),
        error=error_text,
    )
    try:
        path = EventChannel(get_repo_path()).emit(worker_event)
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]Recorded {event}[/green] for {escape(task)} [dim]({path.name})[/dim]")


@main.command()
@click.option("--agent", "-a", default=None, help="Only show events from this worker")
def events(agent: str | None) -> None:
    """List worker events recorded in this directory."""
    channel = EventChannel(get_repo_path())
    recorded = [e for e in channel.iter_events() if agent is None or e.agent == agent]

    if not recorded:
        console.print("[yellow]No worker events recorded yet.[/yellow]")
        return

    console.print(SessionView(console).render_events(recorded))

    reports = channel.error_reports()
    if reports:
        console.print(f"\n[red]{len(reports)} error report(s)[/red] in {escape(str(channel.errors_dir))}")


@main.command()
def version() -> None:
    """Show version information."""
    console.print(f"zeroclaw v{__version__}")
    console.print("Multi-agent session supervisor")


if __name__ == "__main__":
    main()
