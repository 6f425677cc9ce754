"""Set of already accepted artifacts for a single run."""

from collections.abc import Hashable, Iterator
from typing import Any


class DedupSet:
    """Accepted artifacts, compared by structural equality.

    Hashable artifacts are looked up by hash (then equality). Artifacts that
    cannot be hashed are kept in a side list and compared one by one, so any
    artifact type with a sane ``__eq__`` can be deduplicated.
    """

    def __init__(self) -> None:
        self._hashed: set[Hashable] = set()
        self._unhashable: list[Any] = []

    def __contains__(self, artifact: Any) -> bool:
        if isinstance(artifact, Hashable):
            try:
                return artifact in self._hashed
            except TypeError:
                pass
        return any(artifact == seen for seen in self._unhashable)

    def add(self, artifact: Any) -> bool:
        """Insert an artifact. Returns False if an equal one was already present."""
        if artifact in self:
            return False
        if isinstance(artifact, Hashable):
            try:
                self._hashed.add(artifact)
                return True
            except TypeError:
                pass
        self._unhashable.append(artifact)
        return True

    def __len__(self) -> int:
        return len(self._hashed) + len(self._unhashable)

    def __iter__(self) -> Iterator[Any]:
        yield from self._hashed
        yield from self._unhashable
