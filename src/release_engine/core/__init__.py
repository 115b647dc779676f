"""Core business logic for release-engine.

This module contains the fundamental building blocks:
- Version parsing and bumping (semver precedence)
- Conventional commit classification
- Release candidate resolution
- Changelog entry rendering
"""

from __future__ import annotations

from release_engine.core.candidate import (
    ReleaseCandidate,
    calculate_bump,
    resolve,
    version_from_pull_requests,
)
from release_engine.core.changelog import changelog_is_empty, generate_changelog_entry
from release_engine.core.commits import (
    UNRECOGNIZED,
    ClassifiedCommit,
    Commit,
    classify,
    classify_commit,
    filter_skip_release_commits,
    get_breaking_changes,
    group_commits_by_type,
    parse_commits,
)
from release_engine.core.version import BumpType, Version, parse_version

__all__ = [
    # Version
    "BumpType",
    "Version",
    "parse_version",
    # Commits
    "UNRECOGNIZED",
    "ClassifiedCommit",
    "Commit",
    "classify",
    "classify_commit",
    "filter_skip_release_commits",
    "get_breaking_changes",
    "group_commits_by_type",
    "parse_commits",
    # Candidate
    "ReleaseCandidate",
    "calculate_bump",
    "resolve",
    "version_from_pull_requests",
    # Changelog
    "changelog_is_empty",
    "generate_changelog_entry",
]
