"""Contracts for the collaborators the sampler drives.

The sampler never builds, encodes or parses interactions itself. It talks to:
- an ArtifactGenerator, which builds one interaction per call (or nothing)
- a Persister, which writes an accepted interaction to the output folder
- a ContextParser, which turns an input file into a generation context

A GenerationPlugin bundles all three so a concrete interaction language can be
plugged into the CLI with a single ``module:attribute`` reference.
"""

import random
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ..core.models.profile import ProbabilityProfile


class ContextError(Exception):
    """Raised when the generation context cannot be parsed."""


@runtime_checkable
class ContextParser(Protocol):
    def __call__(self, path: Path) -> Any: ...


@runtime_checkable
class ArtifactGenerator(Protocol):
    """Builds one artifact from a generation context.

    Must be deterministic given the same sequence of draws from ``rng``.
    Returning None is a soft failure, not an error.
    """

    def __call__(
        self,
        context: Any,
        rng: random.Random,
        max_depth: int,
        min_symbols: int,
        profile: ProbabilityProfile,
    ) -> Any | None: ...


@runtime_checkable
class Persister(Protocol):
    """Writes one accepted artifact and returns the path it was written to."""

    def persist(
        self, output_dir: Path, ordinal: int, context: Any, artifact: Any
    ) -> Path: ...


@runtime_checkable
class GenerationPlugin(Protocol):
    """A concrete interaction language: parser, generator and text encoder."""

    extension: str

    def parse_context(self, path: Path) -> Any: ...

    def generate(
        self,
        context: Any,
        rng: random.Random,
        max_depth: int,
        min_symbols: int,
        profile: ProbabilityProfile,
    ) -> Any | None: ...

    def render(self, context: Any, artifact: Any) -> str: ...
