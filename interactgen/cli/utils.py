"""Output helpers shared by the interactgen commands.

Every command reports through an Output so that ``--json`` yields a single
parseable document while the default mode stays readable in a terminal.
Failures map onto ExitCode values so scripts can branch on ``$?``.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, PrivateAttr, ConfigDict
from rich.console import Console
from rich.table import Table

from ..core.models import RunResult


class ExitCode:
    """Standardized exit codes for CLI commands.

    Scripts can check $? and know exactly what failed:
        0 = Success (including a run that ran out of retries)
        1 = Validation error (bad probabilities, preset, plugin or context)
        3 = File not found
        4 = Sampling error (e.g. an interaction could not be written)
    """

    SUCCESS = 0
    VALIDATION_ERROR = 1
    FILE_NOT_FOUND = 3
    SAMPLING_ERROR = 4


class Output(BaseModel):
    """Reports a command's outcome either to the terminal or as one JSON document.

    Human mode prints each message as it happens. JSON mode (--json) prints
    nothing until finish(), then dumps status, warnings, errors and whatever
    was attached with success(**data) or set_data().
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    console: Console
    json_mode: bool = False

    _data: dict[str, Any] = PrivateAttr()
    _exit_code: int = PrivateAttr(default=ExitCode.SUCCESS)

    def model_post_init(self, __context: Any) -> None:
        self._data = {"status": "success", "warnings": [], "errors": []}

    @property
    def exit_code(self) -> int:
        return self._exit_code

    def _report(self, kind: str, marker: str, message: str, suggestion: str | None) -> None:
        if self.json_mode:
            entry: dict[str, Any] = {"message": message}
            if suggestion:
                entry["suggestion"] = suggestion
            self._data[kind].append(entry)
            return
        self.console.print(f"{marker} {message}")
        if suggestion:
            self.console.print(f"  [dim]→ {suggestion}[/dim]")

    def success(self, message: str, **data: Any) -> None:
        """Print a success line; in JSON mode only ``data`` is kept."""
        if self.json_mode:
            self._data.update(data)
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str, *, suggestion: str | None = None) -> None:
        self._report("warnings", "[yellow]⚠[/yellow]", message, suggestion)

    def error(
        self,
        message: str,
        *,
        suggestion: str | None = None,
        exit_code: int = ExitCode.VALIDATION_ERROR,
    ) -> None:
        """Report an error; the command will exit with ``exit_code``."""
        self._exit_code = exit_code
        self._data["status"] = "error"
        self._report("errors", "[red]✗[/red]", message, suggestion)

    def text(self, message: str) -> None:
        if not self.json_mode:
            self.console.print(message)

    def blank(self) -> None:
        if not self.json_mode:
            self.console.print()

    def divider(self) -> None:
        if not self.json_mode:
            self.console.print("═" * 60)

    def table(
        self,
        title: str,
        columns: list[str],
        rows: list[list[str]],
        *,
        styles: list[str] | None = None,
    ) -> None:
        """Print a table with a left-aligned first column (human mode only).

        Commands attach the same information for JSON mode with set_data().
        """
        if self.json_mode:
            return
        table = Table(title=title, show_header=True, header_style="bold")
        for i, col in enumerate(columns):
            style = styles[i] if styles and i < len(styles) else None
            table.add_column(col, style=style, justify="left" if i == 0 else "right")
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    def set_data(self, key: str, value: Any) -> None:
        self._data[key] = value

    def finish(self) -> int:
        """Emit the JSON document (JSON mode) and return the exit code."""
        if self.json_mode:
            self._data["exit_code"] = self._exit_code
            print(json.dumps(self._data, indent=2, default=str))
        return self._exit_code


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as Xm Ys or Xs."""
    if seconds >= 60:
        mins = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{mins}m {secs}s"
    return f"{seconds:.0f}s"


def format_run_result_for_json(result: RunResult) -> dict[str, Any]:
    """Convert RunResult to JSON-serializable dict."""
    return {
        "termination": result.termination.value,
        "produced_count": result.produced_count,
        "target_count": result.target_count,
        "attempts": result.attempts,
        "remaining_budget": result.remaining_budget,
        "seed": result.seed,
        "status_lines": result.status_lines,
        "files": [str(p) for p in result.persisted],
    }
