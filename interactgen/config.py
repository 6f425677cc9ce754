"""Configuration management for interactgen.

The config only holds user-level defaults for the CLI (how many interactions,
structural bounds, seed, output folder, probability profile, plugin). A run
itself is always described by an explicit SamplingConfig; nothing here is
consulted by the sampler.

Config resolution order (highest priority first):
1. Programmatic (InteractgenConfig constructed in code)
2. Environment variables (INTERACTGEN_NUM_INTS, INTERACTGEN_SEED, etc.)
3. Config file (~/.config/interactgen/config.json, managed by `interactgen config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from .core.models.profile import DEFAULT_PROFILE
from .core.models.sampling import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MIN_SYMBOLS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RETRY_MULTIPLIER,
    DEFAULT_SEED,
    DEFAULT_TARGET_COUNT,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "interactgen"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_PREFIX = "INTERACTGEN_"


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class GenerationDefaults:
    """Defaults for `interactgen generate` options left unspecified."""

    num_ints: int = DEFAULT_TARGET_COUNT
    max_depth: int = DEFAULT_MAX_DEPTH
    min_symbols: int = DEFAULT_MIN_SYMBOLS
    seed: int = DEFAULT_SEED
    output_folder: str = DEFAULT_OUTPUT_DIR
    probas: str = DEFAULT_PROFILE
    retry_multiplier: int = DEFAULT_RETRY_MULTIPLIER
    plugin: str = ""  # empty = must be given on the command line


INT_FIELDS = {"num_ints", "max_depth", "min_symbols", "seed", "retry_multiplier"}


@dataclass
class InteractgenConfig:
    """Top-level interactgen configuration.

    Examples:
        # Package use, no files needed
        config = InteractgenConfig(defaults=GenerationDefaults(num_ints=20))

        # CLI use, loads from ~/.config/interactgen/config.json
        config = InteractgenConfig.load()
    """

    defaults: GenerationDefaults = field(default_factory=GenerationDefaults)

    @classmethod
    def load(cls) -> "InteractgenConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: Load from config file if it exists
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError, ValueError, TypeError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: Env var overrides
        for name in asdict(config.defaults):
            env_name = ENV_PREFIX + name.upper()
            val = os.environ.get(env_name)
            if not val:
                continue
            if name in INT_FIELDS:
                try:
                    setattr(config.defaults, name, int(val))
                except ValueError:
                    logger.warning("Invalid %s=%r, ignoring", env_name, val)
            else:
                setattr(config.defaults, name, val)

        return config

    def save(self) -> None:
        """Save config to ~/.config/interactgen/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        data: dict[str, Any] = {"defaults": asdict(self.defaults)}
        with open(CONFIG_FILE, "w") as f:
            json.dump(data, f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {"defaults": asdict(self.defaults)}


# =============================================================================
# Config dict application
# =============================================================================


def _apply_dict(config: InteractgenConfig, data: dict) -> None:
    """Apply a dict of values onto an InteractgenConfig."""
    if "defaults" in data and isinstance(data["defaults"], dict):
        for k, v in data["defaults"].items():
            if hasattr(config.defaults, k):
                if k in INT_FIELDS:
                    v = int(v)
                setattr(config.defaults, k, v)


# =============================================================================
# Global config singleton
# =============================================================================

_config: InteractgenConfig | None = None


def get_config() -> InteractgenConfig:
    """Get the global InteractgenConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = InteractgenConfig.load()
    return _config


def configure(config: InteractgenConfig) -> None:
    """Set the global InteractgenConfig programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
