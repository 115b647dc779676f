"""File update strategies."""

from __future__ import annotations

from release_engine.updaters.base import ChangeSet, FileChange, Updater, UpdateKind, check_unique_paths
from release_engine.updaters.changelog import ChangelogUpdater
from release_engine.updaters.generic import GenericTextUpdater
from release_engine.updaters.manifest import ManifestVersionUpdater

__all__ = [
    "ChangeSet",
    "ChangelogUpdater",
    "FileChange",
    "GenericTextUpdater",
    "ManifestVersionUpdater",
    "UpdateKind",
    "Updater",
    "check_unique_paths",
]
