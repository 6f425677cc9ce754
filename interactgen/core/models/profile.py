"""Interaction symbol selection probabilities.

A ProbabilityProfile is a validated categorical distribution over the
closed set of symbol categories an interaction generator can choose from
(actions, operators, loops, ...). Profiles are value objects: they are
built once, from a named preset or from explicit weights, and never
mutated afterwards.
"""

import math
import random
from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    field_serializer,
    field_validator,
    model_validator,
)


PROFILE_TOLERANCE = 1e-6


class SymbolCategory(str, Enum):
    EMPTY = "empty"
    ACTION = "action"
    STRICT = "strict"
    SEQUENCE = "sequence"
    COREGION = "co-region"
    PARALLEL = "parallel"
    LOOP_STRICT = "loop-strict"
    LOOP_WEAK = "loop-weak"
    LOOP_INTERLEAVED = "loop-interleaved"
    ALTERNATIVE = "alternative"
    LEAF = "leaf"
    TRANSMISSION = "transmission"
    BROADCAST = "broadcast"


CATEGORIES: tuple[SymbolCategory, ...] = tuple(SymbolCategory)


# =============================================================================
# Errors
# =============================================================================


class ProfileError(Exception):
    """Base class for probability profile configuration errors."""


class UnknownPreset(ProfileError):
    """Raised when a preset name is not recognized."""

    def __init__(self, name: str):
        self.name = name
        available = ", ".join(sorted(PRESETS))
        super().__init__(
            f"Unknown probas for interactions generation: {name!r}. "
            f"Available: {available}, custom"
        )


class InvalidDistribution(ProfileError):
    """Raised when explicit weights do not form a valid distribution."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


# =============================================================================
# Weight validation
# =============================================================================


def check_weights(weights: Mapping[SymbolCategory, float]) -> list[str]:
    """Return every problem found in a complete category -> weight mapping.

    An empty list means the weights form a valid distribution.
    """
    errors = []
    for category in CATEGORIES:
        value = weights.get(category)
        if value is None:
            errors.append(f"Missing weight for '{category.value}'")
        elif math.isnan(value) or not 0.0 <= value <= 1.0:
            errors.append(
                f"Weight for '{category.value}' must be in [0.0, 1.0], got {value}"
            )
    if errors:
        return errors

    total = math.fsum(weights[c] for c in CATEGORIES)
    if abs(total - 1.0) > PROFILE_TOLERANCE:
        errors.append(f"Probabilities do not sum to 1.0 (sum={total:.6g})")
    return errors


def _coerce_category(key: Any) -> SymbolCategory | None:
    if isinstance(key, SymbolCategory):
        return key
    try:
        return SymbolCategory(str(key))
    except ValueError:
        return None


# =============================================================================
# Profile
# =============================================================================


class ProbabilityProfile(BaseModel):
    """Immutable categorical distribution over interaction symbol categories."""

    model_config = ConfigDict(frozen=True)

    name: str
    weights: Mapping[SymbolCategory, float]

    @field_validator("weights", mode="after")
    @classmethod
    def _freeze_weights(
        cls, weights: Mapping[SymbolCategory, float]
    ) -> Mapping[SymbolCategory, float]:
        ordered = {c: weights[c] for c in CATEGORIES if c in weights}
        return MappingProxyType(ordered)

    @field_serializer("weights")
    def _dump_weights(self, weights: Mapping[SymbolCategory, float]) -> dict[str, float]:
        return {c.value: w for c, w in weights.items()}

    @model_validator(mode="after")
    def _validate_weights(self) -> "ProbabilityProfile":
        errors = check_weights(self.weights)
        if errors:
            raise ValueError("; ".join(errors))
        return self

    def model_copy(
        self, *, update: Mapping[str, Any] | None = None, deep: bool = False
    ) -> "ProbabilityProfile":
        """Copy the profile; updated copies are validated like new ones."""
        if not update:
            return super().model_copy(deep=deep)
        data: dict[str, Any] = {"name": self.name, "weights": dict(self.weights)}
        data.update(update)
        return type(self).model_validate(data)

    def __deepcopy__(self, memo: dict[int, Any] | None = None) -> "ProbabilityProfile":
        # Nothing inside a profile can change
        return self

    @classmethod
    def from_preset(cls, name: str) -> "ProbabilityProfile":
        """Build one of the named presets.

        Raises:
            UnknownPreset: If the name is not a known preset.
        """
        if name not in PRESETS:
            raise UnknownPreset(name)
        return cls._build(name, PRESETS[name])

    @classmethod
    def from_explicit(
        cls, values: Mapping[Any, float], name: str = "custom"
    ) -> "ProbabilityProfile":
        """Build a profile from explicit per-category weights.

        Keys may be SymbolCategory members or their string tags. Categories
        that are not mentioned get a weight of 0.0.

        Raises:
            InvalidDistribution: If a key is unknown, a weight is outside
                [0.0, 1.0], or the weights do not sum to 1.0.
        """
        errors = []
        weights: dict[SymbolCategory, float] = {c: 0.0 for c in CATEGORIES}
        for key, value in values.items():
            category = _coerce_category(key)
            if category is None:
                errors.append(f"Unknown symbol category: {key!r}")
                continue
            try:
                weights[category] = float(value)
            except (TypeError, ValueError):
                errors.append(f"Weight for '{category.value}' is not a number: {value!r}")

        if not errors:
            errors = check_weights(weights)
        if errors:
            raise InvalidDistribution(errors)
        return cls._build(name, weights)

    @classmethod
    def _build(
        cls, name: str, weights: Mapping[SymbolCategory, float]
    ) -> "ProbabilityProfile":
        ordered = {c: float(weights.get(c, 0.0)) for c in CATEGORIES}
        return cls(name=name, weights=ordered)

    def weight(self, category: SymbolCategory | str) -> float:
        """Get the weight of a single category."""
        resolved = _coerce_category(category)
        if resolved is None:
            raise KeyError(category)
        return self.weights[resolved]

    def as_dict(self) -> dict[str, float]:
        """Return a plain tag -> weight copy, in category order."""
        return {c.value: self.weights[c] for c in CATEGORIES}

    def support(self) -> list[SymbolCategory]:
        """Categories with a non-zero weight."""
        return [c for c in CATEGORIES if self.weights[c] > 0.0]

    def draw(
        self,
        rng: random.Random,
        among: Iterable[SymbolCategory | str] | None = None,
    ) -> SymbolCategory | None:
        """Draw a category using the profile weights.

        When ``among`` is given, only those categories are candidates and
        their weights are renormalised. Returns None if every candidate has
        a zero weight. Consumes exactly one value from ``rng`` otherwise.
        """
        if among is None:
            candidates = list(CATEGORIES)
        else:
            candidates = []
            for key in among:
                category = _coerce_category(key)
                if category is None:
                    raise KeyError(key)
                candidates.append(category)

        weights = [self.weights[c] for c in candidates]
        if not candidates or math.fsum(weights) <= 0.0:
            return None
        return rng.choices(candidates, weights=weights, k=1)[0]


# =============================================================================
# Presets
# =============================================================================

_C = SymbolCategory

PRESETS: dict[str, dict[SymbolCategory, float]] = {
    # Non-regular mix: parallel composition and interleaved loops included
    "default": {
        _C.EMPTY: 0.05,
        _C.ACTION: 0.25,
        _C.STRICT: 0.10,
        _C.SEQUENCE: 0.15,
        _C.PARALLEL: 0.10,
        _C.LOOP_STRICT: 0.05,
        _C.LOOP_WEAK: 0.05,
        _C.LOOP_INTERLEAVED: 0.05,
        _C.ALTERNATIVE: 0.10,
        _C.LEAF: 0.10,
    },
    # Regular operators only
    "conservative": {
        _C.EMPTY: 0.05,
        _C.ACTION: 0.30,
        _C.STRICT: 0.10,
        _C.SEQUENCE: 0.20,
        _C.LOOP_STRICT: 0.05,
        _C.LOOP_WEAK: 0.05,
        _C.ALTERNATIVE: 0.15,
        _C.LEAF: 0.10,
    },
    "protocols_with_coreg": {
        _C.EMPTY: 0.05,
        _C.TRANSMISSION: 0.25,
        _C.BROADCAST: 0.05,
        _C.STRICT: 0.10,
        _C.SEQUENCE: 0.15,
        _C.COREGION: 0.10,
        _C.LOOP_WEAK: 0.10,
        _C.ALTERNATIVE: 0.15,
        _C.LEAF: 0.05,
    },
}

CUSTOM_PROFILE = "custom"
DEFAULT_PROFILE = "default"

# Explicit weights used by the CLI when --probas custom is given without flags
CUSTOM_DEFAULT_WEIGHTS: dict[SymbolCategory, float] = {
    _C.EMPTY: 0.5,
    _C.ACTION: 0.5,
}


def preset_names() -> list[str]:
    """Names accepted by build_profile, presets first then 'custom'."""
    return list(PRESETS) + [CUSTOM_PROFILE]


def build_profile(
    name: str = DEFAULT_PROFILE,
    values: Mapping[Any, float] | None = None,
) -> ProbabilityProfile:
    """Build a profile from a selection name.

    ``"custom"`` uses the explicit ``values`` (or CUSTOM_DEFAULT_WEIGHTS when
    none are given); any other name must be a preset.
    """
    if name == CUSTOM_PROFILE:
        return ProbabilityProfile.from_explicit(
            values if values is not None else CUSTOM_DEFAULT_WEIGHTS,
            name=CUSTOM_PROFILE,
        )
    return ProbabilityProfile.from_preset(name)
