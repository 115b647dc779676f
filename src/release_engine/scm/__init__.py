"""Source control collaborators."""

from __future__ import annotations

from release_engine.scm.base import MergedPullRequest, PatchSubmitter, SCMProvider, Tag
from release_engine.scm.git import GitProvider
from release_engine.scm.local import LocalPatchSubmitter

__all__ = [
    "GitProvider",
    "LocalPatchSubmitter",
    "MergedPullRequest",
    "PatchSubmitter",
    "SCMProvider",
    "Tag",
]
