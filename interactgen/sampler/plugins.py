"""Loading generation plugins and their contexts.

A plugin reference has the form ``"package.module:attribute"``. The attribute
is an object (instance, module, namespace) exposing
``parse_context``, ``generate`` and ``render``, or a class or zero-argument
factory returning one. ``extension`` is optional and defaults to the
interaction file extension.
"""

import importlib
import logging
from pathlib import Path
from typing import Any

from .interfaces import ContextError
from .persistence import INTERACTION_FILE_EXTENSION, FilePersister


logger = logging.getLogger(__name__)

REQUIRED_HOOKS = ("parse_context", "generate", "render")


class PluginError(Exception):
    """Raised when a generation plugin cannot be loaded."""


def parse_plugin_ref(ref: str) -> tuple[str, str]:
    """Split a ``module:attribute`` reference.

    Raises:
        PluginError: If the reference is malformed.
    """
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise PluginError(
            f"Invalid plugin reference: {ref!r}. "
            f"Expected format: 'package.module:attribute'"
        )
    return module_name, attr


def _has_hooks(obj: Any) -> bool:
    return all(callable(getattr(obj, name, None)) for name in REQUIRED_HOOKS)


def load_plugin(ref: str) -> Any:
    """Import and validate a generation plugin.

    Raises:
        PluginError: If the module or attribute cannot be found, or the
            resulting object lacks one of the required hooks.
    """
    module_name, attr = parse_plugin_ref(ref)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PluginError(f"Cannot import plugin module {module_name!r}: {e}") from e

    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise PluginError(f"Plugin {ref!r} not found: {e}") from e

    # Classes and factories are called once to get the plugin object
    if isinstance(obj, type) or (not _has_hooks(obj) and callable(obj)):
        try:
            obj = obj()
        except TypeError as e:
            raise PluginError(f"Cannot instantiate plugin {ref!r}: {e}") from e

    missing = [name for name in REQUIRED_HOOKS if not callable(getattr(obj, name, None))]
    if missing:
        raise PluginError(f"Plugin {ref!r} is missing hook(s): {', '.join(missing)}")

    logger.debug("Loaded generation plugin %s", ref)
    return obj


def plugin_extension(plugin: Any) -> str:
    return getattr(plugin, "extension", None) or INTERACTION_FILE_EXTENSION


def plugin_persister(plugin: Any) -> FilePersister:
    """File persister rendering artifacts with the plugin's encoder."""
    return FilePersister(plugin.render, extension=plugin_extension(plugin))


def load_context(plugin: Any, path: Path | str) -> Any:
    """Parse the generation context with the plugin's parser.

    Raises:
        FileNotFoundError: If the input file does not exist.
        ContextError: If the plugin fails to parse it.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Context file not found: {path}")
    try:
        return plugin.parse_context(path)
    except Exception as e:
        raise ContextError(f"Failed to parse context from {path}: {e}") from e
