"""All Pydantic models for interactgen, organized by domain.

- profile.py: Symbol categories, probability profiles and presets
- sampling.py: Sampling configs, run results and replayable run specs
"""

from .profile import (
    SymbolCategory,
    CATEGORIES,
    PROFILE_TOLERANCE,
    PRESETS,
    CUSTOM_PROFILE,
    DEFAULT_PROFILE,
    ProbabilityProfile,
    ProfileError,
    UnknownPreset,
    InvalidDistribution,
    build_profile,
    preset_names,
)
from .sampling import (
    DEFAULT_RETRY_MULTIPLIER,
    SamplerState,
    AttemptOutcome,
    SamplingConfig,
    RunResult,
    ProfileSelection,
    RunSpec,
    default_retry_budget,
)

__all__ = [
    # Profiles
    "SymbolCategory",
    "CATEGORIES",
    "PROFILE_TOLERANCE",
    "PRESETS",
    "CUSTOM_PROFILE",
    "DEFAULT_PROFILE",
    "ProbabilityProfile",
    "ProfileError",
    "UnknownPreset",
    "InvalidDistribution",
    "build_profile",
    "preset_names",
    # Sampling
    "DEFAULT_RETRY_MULTIPLIER",
    "SamplerState",
    "AttemptOutcome",
    "SamplingConfig",
    "RunResult",
    "ProfileSelection",
    "RunSpec",
    "default_retry_budget",
]
