"""Update strategy protocol and change accumulation.

Every updater knows one target path and how to turn that file's current
content (or its absence) into the released content. ``compute_new_content``
is pure and returns its input unchanged when the target version is already
present, so applying an updater twice equals applying it once.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from release_engine.exceptions import UpdateConflictError

DEFAULT_FILE_MODE = "100644"


class UpdateKind(str, Enum):
    CHANGELOG = "changelog"
    MANIFEST_VERSION = "manifest-version"
    GENERIC = "generic"


@runtime_checkable
class Updater(Protocol):
    """A single file update."""

    path: str
    kind: UpdateKind

    def compute_new_content(self, old_content: str | None) -> str:
        """Return the updated content; ``old_content`` is None if the file is missing."""
        ...


@dataclass(frozen=True)
class FileChange:
    """New content for one file, as handed to the patch submitter."""

    content: str
    mode: str = DEFAULT_FILE_MODE


class ChangeSet:
    """Ordered path → FileChange map that refuses duplicate paths."""

    def __init__(self) -> None:
        self._changes: dict[str, FileChange] = {}

    def add(self, path: str, change: FileChange) -> None:
        """Record ``change`` for ``path``.

        Raises:
            UpdateConflictError: If ``path`` already has a change.
        """
        if path in self._changes:
            raise UpdateConflictError(path)
        self._changes[path] = change

    def __contains__(self, path: object) -> bool:
        return path in self._changes

    def __getitem__(self, path: str) -> FileChange:
        return self._changes[path]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._changes))

    def __len__(self) -> int:
        return len(self._changes)

    def as_dict(self) -> dict[str, FileChange]:
        """Changes sorted by path."""
        return {path: self._changes[path] for path in sorted(self._changes)}


def check_unique_paths(updaters: list[Updater]) -> None:
    """Reject update plans in which two updaters target the same path.

    Raises:
        UpdateConflictError: On the first duplicated path.
    """
    seen: set[str] = set()
    for updater in updaters:
        if updater.path in seen:
            raise UpdateConflictError(updater.path)
        seen.add(updater.path)
