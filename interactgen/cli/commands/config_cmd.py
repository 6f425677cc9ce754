"""Config command for viewing and managing interactgen configuration."""

import typer

from ..app import app, console
from ... import config as config_module
from ...config import get_config, reset_config, INT_FIELDS, ENV_PREFIX
from ...core.models import preset_names


VALID_KEYS = {
    "defaults.num_ints",
    "defaults.max_depth",
    "defaults.min_symbols",
    "defaults.seed",
    "defaults.output_folder",
    "defaults.probas",
    "defaults.retry_multiplier",
    "defaults.plugin",
}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. defaults.num_ints, defaults.plugin)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify interactgen configuration.

    Examples:
        interactgen config show
        interactgen config set defaults.num_ints 50
        interactgen config set defaults.plugin mylang.plugin:PLUGIN
        interactgen config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] interactgen config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()
    defaults = config.defaults

    console.print()
    console.print("[bold]interactgen Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Defaults[/bold cyan] (generate)")
    console.print(f"  num_ints         = {defaults.num_ints}")
    console.print(f"  max_depth        = {defaults.max_depth}")
    console.print(f"  min_symbols      = {defaults.min_symbols}")
    console.print(f"  seed             = {defaults.seed}")
    console.print(f"  output_folder    = {defaults.output_folder}")
    console.print(f"  probas           = {defaults.probas}")
    console.print(f"  retry_multiplier = {defaults.retry_multiplier}")
    console.print(f"  plugin           = {defaults.plugin or '[dim](not set)[/dim]'}")

    console.print()
    console.print(f"[dim]Env overrides: {ENV_PREFIX}<FIELD> (e.g. {ENV_PREFIX}SEED)[/dim]")

    # Config file
    config_file = config_module.CONFIG_FILE
    console.print()
    if config_file.exists():
        console.print(f"Config file: {config_file}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({config_file})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(1)

    # Load current config (or defaults if no file)
    config = get_config()
    _, field_name = key.split(".", 1)

    # Type coercion
    if field_name in INT_FIELDS:
        try:
            setattr(config.defaults, field_name, int(value))
        except ValueError:
            console.print(f"[red]Invalid integer value:[/red] {value}")
            raise typer.Exit(1)
    elif field_name == "probas" and value not in preset_names():
        console.print(f"[red]Unknown probas:[/red] {value}")
        console.print(f"Valid values: {', '.join(preset_names())}")
        raise typer.Exit(1)
    else:
        setattr(config.defaults, field_name, value)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {config_module.CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    config_file = config_module.CONFIG_FILE
    if config_file.exists():
        config_file.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {config_file}")
    else:
        console.print("Config already at defaults (no config file exists)")
