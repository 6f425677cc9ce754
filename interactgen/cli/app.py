"""Core CLI app definition and global state."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="interactgen",
    help="Generate sets of distinct random interactions.",
    no_args_is_help=True,
)

console = Console()

# Global state for JSON mode (set by callback)
_json_mode = False


def get_json_mode() -> bool:
    """Get current JSON mode state."""
    return _json_mode


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Route interactgen logs through Rich.

    In --json mode only errors are shown, so stdout stays parseable.
    """
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    handler = RichHandler(console=console, show_path=False)
    if _json_mode:
        handler.setLevel(logging.ERROR)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    logging.getLogger("interactgen").setLevel(level)


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        print(f"interactgen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output machine-readable JSON instead of human-friendly text",
            is_eager=True,
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
):
    """interactgen: seeded generation of distinct random interactions.

    Use --json for machine-readable output suitable for scripting.
    """
    global _json_mode
    _json_mode = json_output


# Import commands to register them with the app
from .commands import (  # noqa: E402, F401
    generate,
    presets,
    config_cmd,
)
