"""interactgen: bounded unique sampling of randomly generated interactions."""

__version__ = "0.1.0"

from .core.models import (
    ProbabilityProfile,
    SamplingConfig,
    RunResult,
    RunSpec,
    SamplerState,
    build_profile,
)
from .sampler import BoundedUniqueSampler, FilePersister, run_sampling

__all__ = [
    "__version__",
    "ProbabilityProfile",
    "SamplingConfig",
    "RunResult",
    "RunSpec",
    "SamplerState",
    "build_profile",
    "BoundedUniqueSampler",
    "FilePersister",
    "run_sampling",
]
