"""Command-line interface for interactgen."""

from .app import app

__all__ = ["app"]
