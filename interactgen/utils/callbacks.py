"""Typed callback protocols for progress reporting during a sampling run.

These Protocol classes provide type-safe callback signatures without
requiring runtime changes; existing callables continue to work via duck typing.
"""

from typing import Protocol

from ..core.models.sampling import AttemptOutcome


class ItemProgressCallback(Protocol):
    """Callback for item-based progress (one call per persisted artifact).

    Args:
        current: Number of distinct artifacts produced so far
        total: Target number of artifacts
    """

    def __call__(self, current: int, total: int) -> None: ...


class AttemptCallback(Protocol):
    """Callback invoked after every generation attempt.

    Args:
        attempt: One-based attempt number
        outcome: Whether the attempt produced a new artifact, a duplicate,
            or nothing
    """

    def __call__(self, attempt: int, outcome: AttemptOutcome) -> None: ...
