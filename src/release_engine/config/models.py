"""Configuration models for release-engine.

All models are pydantic models with defaults, so an empty configuration
(``ReleaseEngineConfig(package=PackageConfig(name="x"))``) is usable as is.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from release_engine.core.commits import BREAKING_SECTION_TYPE
from release_engine.core.version import Version
from release_engine.exceptions import VersionError


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CommitsConfig(_Model):
    """How commit messages are classified and which ones drive a bump."""

    types: list[str] = Field(
        default_factory=lambda: [
            "feat",
            "fix",
            "docs",
            "chore",
            "refactor",
            "perf",
            "build",
            "ci",
            "test",
            "revert",
            "style",
        ]
    )
    types_major: list[str] = Field(default_factory=list)
    types_minor: list[str] = Field(default_factory=lambda: ["feat"])
    types_patch: list[str] = Field(default_factory=lambda: ["fix", "perf"])
    # Types listed in release notes; breaking commits are always listed.
    notable_types: list[str] = Field(default_factory=lambda: ["feat", "fix", "perf", "revert"])
    breaking_pattern: str = r"BREAKING[ -]CHANGE:"
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: ["[skip release]", "[release skip]", "[no release]"]
    )
    # Only the first header of a squashed commit classifies it unless enabled.
    split_squashed_headers: bool = False


class ChangelogSection(_Model):
    """Maps a commit type to a changelog heading."""

    type: str
    title: str


class ChangelogConfig(_Model):
    """Changelog rendering and location."""

    enabled: bool = True
    path: Path = Path("CHANGELOG.md")
    header: str = "# Changelog"
    sections: list[ChangelogSection] = Field(
        default_factory=lambda: [
            ChangelogSection(type=BREAKING_SECTION_TYPE, title="Breaking Changes"),
            ChangelogSection(type="feat", title="Features"),
            ChangelogSection(type="fix", title="Bug Fixes"),
            ChangelogSection(type="perf", title="Performance"),
            ChangelogSection(type="revert", title="Reverts"),
        ]
    )


class VersionFileConfig(_Model):
    """An extra file carrying a version stamp, e.g. ``src/pkg/__init__.py``."""

    path: str
    # Must contain exactly one capture group around the version.
    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def _one_capture_group(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            groups = re.compile(value).groups
        except re.error as e:
            raise ValueError(f"Invalid regular expression {value!r}: {e}") from e
        if groups != 1:
            raise ValueError(f"Pattern {value!r} must have exactly one capture group, found {groups}")
        return value


class VersionConfig(_Model):
    """Version resolution policy."""

    initial_version: str | None = None
    tag_prefix: str = "v"
    pre_release: str | None = None
    bump_minor_pre_major: bool = False
    bump_patch_for_minor_pre_major: bool = False
    version_files: list[VersionFileConfig] = Field(default_factory=list)

    @field_validator("initial_version")
    @classmethod
    def _valid_initial_version(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                Version.parse(value)
            except VersionError as e:
                raise ValueError(str(e)) from e
        return value


class PackageConfig(_Model):
    """The package being released."""

    name: str
    # Directory of the package inside the repository; ``None`` for the root.
    path: str | None = None
    ecosystem: Literal["cargo", "python"] = "cargo"
    # Tag releases as ``<name>-v1.2.3`` instead of ``v1.2.3``.
    monorepo_tags: bool = False

    @field_validator("path")
    @classmethod
    def _strip_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().strip("/")
        return None if value in ("", ".") else value


class ReleaseEngineConfig(_Model):
    """Top-level configuration."""

    package: PackageConfig
    repository_url: str = ""
    file_mode: str = "100644"
    max_workers: int = Field(default=4, ge=1)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)

    @field_validator("repository_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def effective_tag_prefix(self) -> str:
        """Prefix of release tags, including the package name for monorepo tags."""
        if self.package.monorepo_tags:
            return f"{self.package.name}-{self.version.tag_prefix}"
        return self.version.tag_prefix

    @property
    def effective_changelog_path(self) -> str:
        """Changelog path relative to the repository root."""
        return self.add_path(self.changelog.path.as_posix())

    def add_path(self, file_path: str) -> str:
        """Prefix ``file_path`` with the package directory, if any."""
        if self.package.path is None:
            return file_path
        return f"{self.package.path}/{file_path}"
