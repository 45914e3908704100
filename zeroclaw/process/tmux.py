"""Thin wrapper around the tmux CLI for a single named session.

The supervisor owns exactly one tmux session (the "surface"). Each worker
gets a window in it; the first window is the supervisor status pane.
"""

from zeroclaw.process.executor import CommandExecutor, ExecutionResult

TMUX_TIMEOUT = 10.0

PANE_LAYOUTS = (
    "tiled",
    "even-horizontal",
    "even-vertical",
    "main-horizontal",
    "main-vertical",
)


class TmuxError(Exception):
    """A tmux command failed."""

    def __init__(self, args: list[str], result: ExecutionResult):
        self.args_ = args
        self.result = result
        super().__init__(f"tmux {' '.join(args)} failed: {result.describe()}")


class TmuxSurface:
    """Named tmux session used as the shared multiplexed surface."""

    def __init__(self, name: str, executor: CommandExecutor):
        self.name = name
        self.executor = executor

    def target(self, window: str) -> str:
        return f"{self.name}:{window}"

    def _tmux(self, *args: str) -> ExecutionResult:
        return self.executor.run(["tmux", *args], timeout=TMUX_TIMEOUT)

    def _tmux_checked(self, *args: str) -> ExecutionResult:
        result = self._tmux(*args)
        if not result.ok:
            raise TmuxError(list(args), result)
        return result

    def exists(self) -> bool:
        return self._tmux("has-session", "-t", self.name).ok

    def kill(self) -> bool:
        """Kill the session. Returns False if there was nothing to kill."""
        return self._tmux("kill-session", "-t", self.name).ok

    def kill_window(self, window: str) -> bool:
        """Kill one window and the process in it. False if it was already gone."""
        return self._tmux("kill-window", "-t", self.target(window)).ok

    def create(self, first_window: str, width: int = 220, height: int = 50) -> None:
        """Create the detached session with its first window."""
        self._tmux_checked(
            "new-session",
            "-d",
            "-s",
            self.name,
            "-n",
            first_window,
            "-x",
            str(width),
            "-y",
            str(height),
        )

    def new_window(self, window: str) -> None:
        self._tmux_checked("new-window", "-t", self.name, "-n", window)

    def send_keys(self, window: str, keys: str) -> None:
        """Type a command line into a window and press Enter."""
        self._tmux_checked("send-keys", "-t", self.target(window), keys, "Enter")

    def select_layout(self, layout: str) -> None:
        self._tmux_checked("select-layout", "-t", self.name, layout)
