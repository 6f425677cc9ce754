"""Sampling run configuration and results.

This module contains the models that flow through a generation run:
- SamplingConfig: target count, structural bounds, retry budget, seed
- RunResult: status lines, produced count, termination state
- RunSpec: a complete, replayable run description with YAML I/O
"""

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from .profile import DEFAULT_PROFILE, ProbabilityProfile, build_profile


DEFAULT_TARGET_COUNT = 350
DEFAULT_MAX_DEPTH = 10
DEFAULT_MIN_SYMBOLS = 100
DEFAULT_SEED = 0
DEFAULT_OUTPUT_DIR = "gen_ints"
DEFAULT_RETRY_MULTIPLIER = 100

MAX_SEED = 2**64 - 1


def default_retry_budget(
    target_count: int,
    min_symbols: int,
    multiplier: int = DEFAULT_RETRY_MULTIPLIER,
) -> int:
    """Retry budget used when none is configured.

    Generation gets harder with both the number of artifacts requested and
    the minimum structural size demanded, so the budget scales with both.
    """
    return target_count * multiplier * min_symbols


class SamplerState(str, Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    # Stopped by a generator or persistence error; never part of a RunResult
    FAILED = "failed"


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    FAILURE = "failure"

    @property
    def consumes_budget(self) -> bool:
        return self is not AttemptOutcome.SUCCESS


class SamplingConfig(BaseModel):
    """Parameters of one bounded unique-sampling run."""

    target_count: int = Field(ge=0, description="Number of distinct artifacts to produce")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)
    min_symbols: int = Field(default=DEFAULT_MIN_SYMBOLS, ge=1)
    retry_budget: int = Field(
        ge=0, description="Non-productive attempts tolerated over the whole run"
    )
    seed: int = Field(default=DEFAULT_SEED, ge=0, le=MAX_SEED)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)

    @classmethod
    def with_defaults(
        cls,
        target_count: int = DEFAULT_TARGET_COUNT,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        min_symbols: int = DEFAULT_MIN_SYMBOLS,
        retry_budget: int | None = None,
        seed: int = DEFAULT_SEED,
        output_dir: Path | str = DEFAULT_OUTPUT_DIR,
        retry_multiplier: int = DEFAULT_RETRY_MULTIPLIER,
    ) -> "SamplingConfig":
        """Build a config, deriving the retry budget when it is not given."""
        if retry_budget is None:
            retry_budget = default_retry_budget(
                target_count, min_symbols, retry_multiplier
            )
        return cls(
            target_count=target_count,
            max_depth=max_depth,
            min_symbols=min_symbols,
            retry_budget=retry_budget,
            seed=seed,
            output_dir=Path(output_dir),
        )


class RunResult(BaseModel):
    """Outcome of a sampling run."""

    status_lines: list[str] = Field(default_factory=list)
    produced_count: int
    target_count: int
    termination: SamplerState
    attempts: int
    remaining_budget: int
    outcomes: list[AttemptOutcome] = Field(default_factory=list)
    persisted: list[Path] = Field(default_factory=list)
    seed: int

    @property
    def succeeded(self) -> bool:
        return self.termination is SamplerState.SUCCEEDED

    def summary(self) -> str:
        if self.succeeded:
            return f"generated {self.produced_count} out of {self.target_count} interactions"
        return (
            f"max retries exceeded: generated {self.produced_count} "
            f"out of {self.target_count} interactions"
        )


class ProfileSelection(BaseModel):
    """Which probability profile a run uses."""

    preset: str = DEFAULT_PROFILE
    weights: dict[str, float] | None = Field(
        default=None, description="Explicit weights, only used with preset 'custom'"
    )

    def build(self) -> ProbabilityProfile:
        return build_profile(self.preset, self.weights)


class RunSpec(BaseModel):
    """Everything needed to replay a generation run."""

    plugin: str = Field(description="Generation plugin reference, 'module:attribute'")
    context: Path = Field(description="Input file handed to the plugin's context parser")
    profile: ProfileSelection = Field(default_factory=ProfileSelection)
    sampling: SamplingConfig

    @field_validator("plugin")
    @classmethod
    def _check_plugin_ref(cls, value: str) -> str:
        module, sep, attr = value.partition(":")
        if not sep or not module or not attr:
            raise ValueError(
                f"Invalid plugin reference: {value!r}. "
                "Expected format: 'package.module:attribute'"
            )
        return value

    def to_yaml(self, path: Path | str) -> None:
        """Save run spec to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(mode="json")

        with open(path, "w") as f:
            yaml.dump(
                data, f, default_flow_style=False, sort_keys=False, allow_unicode=True
            )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "RunSpec":
        """Load run spec from YAML file."""
        path = Path(path)

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.model_validate(data)
