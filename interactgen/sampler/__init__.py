"""Bounded unique sampling of generated interactions.

Usage:
    from interactgen.sampler import run_sampling, FilePersister
    from interactgen.core.models import SamplingConfig, build_profile

    config = SamplingConfig.with_defaults(10, min_symbols=5, seed=42)
    result = run_sampling(
        config,
        build_profile("conservative"),
        generator=my_generator,
        persister=FilePersister(my_render),
        context=my_context,
    )
    print(result.summary())
"""

from .core import (
    BoundedUniqueSampler,
    SamplingError,
    PersistenceError,
    describe_run,
    run_sampling,
)
from .dedup import DedupSet
from .interfaces import (
    ArtifactGenerator,
    ContextError,
    ContextParser,
    GenerationPlugin,
    Persister,
)
from .persistence import INTERACTION_FILE_EXTENSION, FilePersister, artifact_file_name
from .plugins import (
    PluginError,
    load_context,
    load_plugin,
    plugin_persister,
)

__all__ = [
    "BoundedUniqueSampler",
    "SamplingError",
    "PersistenceError",
    "describe_run",
    "run_sampling",
    "DedupSet",
    "ArtifactGenerator",
    "ContextError",
    "ContextParser",
    "GenerationPlugin",
    "Persister",
    "INTERACTION_FILE_EXTENSION",
    "FilePersister",
    "artifact_file_name",
    "PluginError",
    "load_context",
    "load_plugin",
    "plugin_persister",
]
