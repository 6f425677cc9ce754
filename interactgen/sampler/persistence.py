"""Writing accepted interactions to the output folder."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .core import PersistenceError


logger = logging.getLogger(__name__)

INTERACTION_FILE_EXTENSION = "hif"


def artifact_file_name(ordinal: int, extension: str = INTERACTION_FILE_EXTENSION) -> str:
    """File name of the artifact with the given ordinal, e.g. ``i0.hif``."""
    return f"i{ordinal}.{extension.lstrip('.')}"


class FilePersister:
    """Persists each artifact as one UTF-8 text file.

    Args:
        render: Encodes an artifact (within its context) to text
        extension: File extension, without the dot
    """

    def __init__(
        self,
        render: Callable[[Any, Any], str],
        extension: str = INTERACTION_FILE_EXTENSION,
    ):
        self.render = render
        self.extension = extension

    def persist(
        self, output_dir: Path, ordinal: int, context: Any, artifact: Any
    ) -> Path:
        path = Path(output_dir) / artifact_file_name(ordinal, self.extension)
        text = self.render(context, artifact)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise PersistenceError(f"Failed to write interaction to {path}: {e}") from e

        logger.info("wrote to file '%s'", path)
        return path
