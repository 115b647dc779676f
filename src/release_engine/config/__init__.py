"""Configuration management for release-engine."""

from __future__ import annotations

from release_engine.config.loader import load_config
from release_engine.config.models import (
    ChangelogConfig,
    ChangelogSection,
    CommitsConfig,
    PackageConfig,
    ReleaseEngineConfig,
    VersionConfig,
    VersionFileConfig,
)

__all__ = [
    "ChangelogConfig",
    "ChangelogSection",
    "CommitsConfig",
    "PackageConfig",
    "ReleaseEngineConfig",
    "VersionConfig",
    "VersionFileConfig",
    "load_config",
]
