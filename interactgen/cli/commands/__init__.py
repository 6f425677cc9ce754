"""CLI commands for interactgen."""

from . import (
    generate,
    presets,
    config_cmd,
)

__all__ = [
    "generate",
    "presets",
    "config_cmd",
]
