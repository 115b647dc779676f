"""Collaborator interfaces.

The engine reads history through an ``SCMProvider`` and hands its result to a
``PatchSubmitter``. Both are protocols; anything with matching methods works.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from release_engine.core.commits import Commit
    from release_engine.updaters.base import FileChange


@dataclass(frozen=True)
class Tag:
    name: str
    sha: str


@dataclass(frozen=True)
class MergedPullRequest:
    """A merged pull request, as far as release recovery needs it."""

    head_label: str
    sha: str
    merged_at: datetime


@runtime_checkable
class SCMProvider(Protocol):
    """Read access to a repository."""

    def get_latest_tag(self, prefix: str | None = None) -> Tag | None:
        """Newest tag starting with ``prefix``, or None if there is none."""
        ...

    def get_commits(self, since_sha: str | None = None, path: str | None = None) -> Iterator[Commit]:
        """Commits newest first, stopping before ``since_sha``.

        Implementations page through history lazily; ``path`` limits history
        to commits touching that directory.
        """
        ...

    def get_file_content(self, path: str, ref: str | None = None) -> str | None:
        """File content at ``ref``; None when the file does not exist."""
        ...

    def list_merged_pull_requests(self) -> list[MergedPullRequest]:
        """Merged pull requests, used to recover a release when no tag exists."""
        ...


@runtime_checkable
class PatchSubmitter(Protocol):
    """Turns a set of file changes into a reviewable change."""

    def propose_changes(self, changes: Mapping[str, FileChange]) -> str:
        """Submit ``changes`` and return an identifier of the created change."""
        ...
