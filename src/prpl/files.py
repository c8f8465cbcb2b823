"""Startup file cache.

Entrypoint documents are read (and base-href rewritten) once while the
builds load. The resulting cache is owned by the app, frozen, and
handed to the dispatcher; nothing writes to it after startup.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class CachedFile:
    """An in-memory copy of a served file."""

    data: bytes
    modified: datetime

    @property
    def size(self) -> int:
        return len(self.data)


class FileCache(Mapping[str, CachedFile]):
    """Immutable map of root-relative posix path -> ``CachedFile``."""

    __slots__ = ("_files",)

    def __init__(self, files: Mapping[str, CachedFile] | None = None) -> None:
        self._files: dict[str, CachedFile] = dict(files or {})

    def __getitem__(self, path: str) -> CachedFile:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"FileCache({sorted(self._files)!r})"
