"""Shared utility functions for Forge.

Provides blocking command execution for tool probes, the timestamped run log,
file-system helpers, and Rich-based console reporting.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path
from typing import IO, Callable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 30,
) -> tuple[int, str, str]:
    """Run a command and capture its output.

    Args:
        cmd: Argument list; ``cmd[0]`` is looked up on ``PATH``.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A command that cannot be
        launched reports returncode ``127``; a timeout reports ``-1``.
    """
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        return (127, "", str(exc))
    except subprocess.TimeoutExpired:
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (completed.stdout or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
    return (completed.returncode, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Run log
# ---------------------------------------------------------------------------

LEVEL_STYLES: dict[str, str] = {
    "INFO": "green",
    "WARN": "yellow",
    "ERROR": "red",
}


class RunLog:
    """Timestamped, severity-tagged event log.

    Every event is printed to the console and appended to the log file as
    ``[YYYY-MM-DD HH:MM:SS] LEVEL: message``.  The file is truncated when the
    log is opened, so each run starts with an empty log.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        out: Console | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.out = out or console
        self._clock = clock
        self._handle: IO[str] | None = None
        self._file_console: Console | None = None
        self.events: list[tuple[str, str]] = []

    # -- Lifecycle ---------------------------------------------------------

    def open(self) -> "RunLog":
        """Truncate the log file and start recording."""
        if self.path is not None and self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("w", encoding="utf-8")
            self._file_console = Console(
                file=self._handle,
                no_color=True,
                highlight=False,
                markup=False,
                emoji=False,
                soft_wrap=True,
                width=10_000,
            )
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._file_console = None

    def __enter__(self) -> "RunLog":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Events ------------------------------------------------------------

    def log(self, level: str, message: str) -> None:
        """Record one event at *level* (``INFO``, ``WARN`` or ``ERROR``)."""
        if level not in LEVEL_STYLES:
            raise ValueError(f"Unknown log level: {level}")
        stamp = self._clock().strftime("%Y-%m-%d %H:%M:%S")
        self.events.append((level, message))

        style = LEVEL_STYLES[level]
        self.out.print(
            f"{escape(f'[{stamp}]')} [{style}]{level}[/{style}]: {escape(message)}",
            highlight=False,
        )
        if self._file_console is not None:
            self._file_console.print(f"[{stamp}] {level}: {message}")
            self._handle.flush()

    def info(self, message: str) -> None:
        self.log("INFO", message)

    def warn(self, message: str) -> None:
        self.log("WARN", message)

    def error(self, message: str) -> None:
        self.log("ERROR", message)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(escape(key), escape(str(value)))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
