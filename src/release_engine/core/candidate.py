"""Release candidate resolution.

Turns the previous release version plus the classified commits since that
release into the next version and the commits worth documenting.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from release_engine.core.commits import ClassifiedCommit
from release_engine.core.version import BumpType, Version, max_bump
from release_engine.exceptions import VersionError

if TYPE_CHECKING:
    from release_engine.config.models import CommitsConfig, VersionConfig
    from release_engine.scm.base import MergedPullRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseCandidate:
    """The next release: its version and the commits its notes list."""

    version: Version
    previous_tag: str | None
    release_notes_commits: tuple[ClassifiedCommit, ...]
    bump: BumpType = BumpType.NONE

    @property
    def is_initial(self) -> bool:
        return self.previous_tag is None


def commit_bump(cc: ClassifiedCommit, config: CommitsConfig) -> BumpType:
    """The bump a single commit asks for.

    Breaking commits always ask for MAJOR, whatever their type, including
    ``unrecognized``.
    """
    if cc.breaking or cc.type in config.types_major:
        return BumpType.MAJOR
    if cc.type in config.types_minor:
        return BumpType.MINOR
    if cc.type in config.types_patch:
        return BumpType.PATCH
    return BumpType.NONE


def calculate_bump(commits: Iterable[ClassifiedCommit], config: CommitsConfig) -> BumpType:
    """Aggregate bump over commits, scanned newest to oldest.

    Returns ``BumpType.NONE`` for an empty sequence.
    """
    bump = BumpType.NONE
    for cc in commits:
        bump = max_bump(bump, commit_bump(cc, config))
        if bump is BumpType.MAJOR:
            break
    return bump


def apply_pre_major_policy(bump: BumpType, previous: Version, config: VersionConfig) -> BumpType:
    """Soften bumps while the major version is 0.

    With ``bump_minor_pre_major`` a breaking change before 1.0 bumps the
    minor version; with ``bump_patch_for_minor_pre_major`` a feature bumps
    the patch version.
    """
    if previous.major != 0:
        return bump
    if bump is BumpType.MAJOR and config.bump_minor_pre_major:
        return BumpType.MINOR
    if bump is BumpType.MINOR and config.bump_patch_for_minor_pre_major:
        return BumpType.PATCH
    return bump


def select_release_notes_commits(
    commits: Iterable[ClassifiedCommit], config: CommitsConfig
) -> tuple[ClassifiedCommit, ...]:
    """Subsequence of ``commits`` that belongs in release notes, order kept."""
    notable = frozenset(config.notable_types)
    return tuple(cc for cc in commits if cc.breaking or cc.type in notable)


def resolve(
    previous: Version | None,
    commits: Sequence[ClassifiedCommit],
    commits_config: CommitsConfig,
    version_config: VersionConfig,
    *,
    previous_tag: str | None = None,
    initial_version: str = "0.1.0",
) -> ReleaseCandidate | None:
    """Compute the next release, or ``None`` when nothing warrants one.

    Args:
        previous: Version of the previous release, ``None`` for a first release.
        commits: Classified commits since the previous release, newest first.
        commits_config: Commit type policy.
        version_config: Version policy (pre-1.0 flags, prerelease, initial version).
        previous_tag: Tag name of the previous release, carried into the candidate.
        initial_version: Ecosystem default used when the configuration sets none.

    Returns:
        The release candidate, or ``None`` if no commit warrants a release.

    Raises:
        VersionError: If the computed version does not move past ``previous``.
    """
    notes = select_release_notes_commits(commits, commits_config)

    if previous is None:
        if not notes:
            logger.info("No release-worthy commits for the initial release")
            return None
        version = Version.parse(version_config.initial_version or initial_version)
        if version_config.pre_release:
            version = version.with_prerelease(version_config.pre_release)
        logger.info("No previous release, starting at %s", version)
        return ReleaseCandidate(
            version=version,
            previous_tag=None,
            release_notes_commits=notes,
            bump=BumpType.NONE,
        )

    bump = apply_pre_major_policy(calculate_bump(commits, commits_config), previous, version_config)
    if bump is BumpType.NONE:
        logger.info("No release-worthy commits since %s", previous_tag or previous)
        return None

    version = previous.bump(bump)
    if version_config.pre_release:
        version = version.with_prerelease(version_config.pre_release)
    if not version > previous:
        raise VersionError(f"Next version {version} is not greater than previous {previous}")

    logger.info("Bumping %s: %s -> %s", bump, previous, version)
    return ReleaseCandidate(
        version=version,
        previous_tag=previous_tag,
        release_notes_commits=notes,
        bump=bump,
    )


# owner:release-v1.2.3 or owner:release-crate1-v1.2.3
_RELEASE_BRANCH_PATTERN = re.compile(
    r"^(?:[^:]+:)?release-(?:(?P<component>.+)-)?v(?P<version>\d+\.\d+\.\d+\S*)$"
)


def version_from_pull_requests(
    pull_requests: Iterable[MergedPullRequest],
    package_name: str,
    *,
    monorepo_tags: bool = False,
) -> tuple[Version, MergedPullRequest] | None:
    """Recover the previous release from merged release pull requests.

    Used when no release tag exists. Pull requests are considered newest
    merged first; head labels look like ``owner:release-v1.2.3`` or, with
    monorepo tags, ``owner:release-<package>-v1.2.3``.
    """
    ordered = sorted(pull_requests, key=lambda pr: pr.merged_at, reverse=True)
    for pr in ordered:
        match = _RELEASE_BRANCH_PATTERN.match(pr.head_label)
        if not match:
            continue
        component = match.group("component")
        if monorepo_tags and component != package_name:
            continue
        if not monorepo_tags and component is not None:
            continue
        try:
            version = Version.parse(match.group("version"))
        except VersionError:
            logger.debug("Ignoring release branch with invalid version: %s", pr.head_label)
            continue
        return version, pr
    return None
