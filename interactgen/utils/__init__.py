"""Small shared utilities for interactgen.

Modules:
- callbacks: Progress and attempt callback protocols
"""

from .callbacks import ItemProgressCallback, AttemptCallback

__all__ = [
    "ItemProgressCallback",
    "AttemptCallback",
]
