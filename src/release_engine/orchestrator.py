"""Release orchestration.

Runs one release decision end to end:

    IDLE → FETCHING_HISTORY → CLASSIFYING → RESOLVING_CANDIDATE
        → NO_RELEASE
        → GENERATING_CHANGELOG → LOCATING_MANIFESTS → COMPUTING_UPDATES → DONE

Provider errors propagate unchanged. A malformed manifest aborts the whole
run: a partially applied release could ship inconsistent versions across
workspace members.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from release_engine.core.candidate import (
    ReleaseCandidate,
    resolve,
    select_release_notes_commits,
    version_from_pull_requests,
)
from release_engine.core.changelog import changelog_is_empty, generate_changelog_entry
from release_engine.core.commits import ClassifiedCommit, Commit, filter_skip_release_commits, parse_commits
from release_engine.core.version import Version, version_from_tag
from release_engine.exceptions import VersionError
from release_engine.project.ecosystems import Ecosystem, get_ecosystem
from release_engine.project.manifest import ManifestTarget, locate_manifests
from release_engine.updaters.base import ChangeSet, FileChange, Updater, check_unique_paths
from release_engine.updaters.changelog import ChangelogUpdater
from release_engine.updaters.generic import DEFAULT_VERSION_PATTERN, GenericTextUpdater
from release_engine.updaters.manifest import ManifestVersionUpdater

if TYPE_CHECKING:
    from release_engine.config.models import ReleaseEngineConfig
    from release_engine.scm.base import PatchSubmitter, SCMProvider

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    FETCHING_HISTORY = "fetching-history"
    CLASSIFYING = "classifying"
    RESOLVING_CANDIDATE = "resolving-candidate"
    NO_RELEASE = "no-release"
    GENERATING_CHANGELOG = "generating-changelog"
    LOCATING_MANIFESTS = "locating-manifests"
    COMPUTING_UPDATES = "computing-updates"
    DONE = "done"


@dataclass
class RunResult:
    """Outcome of a run.

    ``changes`` is empty unless ``state`` is ``RunState.DONE``.
    """

    state: RunState
    candidate: ReleaseCandidate | None = None
    changelog_entry: str | None = None
    changes: dict[str, FileChange] = field(default_factory=dict)
    proposal: str | None = None

    @property
    def released(self) -> bool:
        return self.state is RunState.DONE


@dataclass(frozen=True)
class PreviousRelease:
    version: Version
    tag: str
    sha: str


class ReleaseOrchestrator:
    """Computes the file changes proposing the next release of one package."""

    def __init__(
        self,
        config: ReleaseEngineConfig,
        provider: SCMProvider,
        *,
        ecosystem: Ecosystem | None = None,
        release_date: date | None = None,
        version_override: str | None = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.ecosystem = ecosystem or get_ecosystem(config.package.ecosystem)
        self.release_date = release_date or date.today()
        self.version_override = Version.parse(version_override) if version_override else None
        self.state = RunState.IDLE

    def _enter(self, state: RunState) -> None:
        logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    # Inputs

    def find_previous_release(self) -> PreviousRelease | None:
        """Latest release tag, falling back to merged release pull requests."""
        prefix = self.config.effective_tag_prefix
        tag = self.provider.get_latest_tag(prefix)
        if tag is not None:
            try:
                version = version_from_tag(tag.name, prefix)
            except VersionError:
                logger.warning("Ignoring tag %s: not a semantic version", tag.name)
            else:
                logger.info("Found previous release %s (%s)", tag.name, tag.sha[:7])
                return PreviousRelease(version=version, tag=tag.name, sha=tag.sha)

        recovered = version_from_pull_requests(
            self.provider.list_merged_pull_requests(),
            self.config.package.name,
            monorepo_tags=self.config.package.monorepo_tags,
        )
        if recovered is None:
            logger.info("No previous release found")
            return None
        version, pr = recovered
        tag_name = f"{prefix}{version}"
        logger.info("Recovered previous release %s from %s", tag_name, pr.head_label)
        return PreviousRelease(version=version, tag=tag_name, sha=pr.sha)

    def fetch_commits(self, since_sha: str | None) -> list[Commit]:
        commits = list(self.provider.get_commits(since_sha, self.config.package.path))
        logger.info(
            "Found %d commits since %s", len(commits), since_sha[:7] if since_sha else "the beginning"
        )
        return filter_skip_release_commits(commits, self.config.commits.skip_release_patterns)

    # Updates

    def build_updaters(
        self,
        candidate: ReleaseCandidate,
        changelog_entry: str,
        targets: list[ManifestTarget],
    ) -> list[Updater]:
        """Changelog, manifest and version file updaters, in that order."""
        version = str(candidate.version)
        versions = {self.config.package.name: version}

        updaters: list[Updater] = []
        if self.config.changelog.enabled:
            updaters.append(
                ChangelogUpdater(
                    path=self.config.effective_changelog_path,
                    entry=changelog_entry,
                    version=version,
                    header=self.config.changelog.header,
                )
            )
        for target in targets:
            updaters.append(
                ManifestVersionUpdater(
                    path=target.path,
                    versions=versions,
                    ecosystem=self.ecosystem,
                    package_name=target.package_name,
                )
            )
        for version_file in self.config.version.version_files:
            updaters.append(
                GenericTextUpdater(
                    path=self.config.add_path(version_file.path),
                    version=version,
                    pattern=version_file.pattern or DEFAULT_VERSION_PATTERN,
                )
            )
        check_unique_paths(updaters)
        return updaters

    def _compute(self, updater: Updater) -> tuple[str, str | None]:
        old = self.provider.get_file_content(updater.path)
        if old is None and isinstance(updater, ManifestVersionUpdater) and updater.package_name is None:
            logger.warning("Skipping %s: file does not exist", updater.path)
            return updater.path, None
        return updater.path, updater.compute_new_content(old)

    def compute_changes(self, updaters: list[Updater]) -> ChangeSet:
        """Fetch every target and compute its new content.

        Targets are independent, so fetching fans out over a thread pool; the
        resulting change set is ordered by path regardless.
        """
        changes = ChangeSet()
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            results = list(pool.map(self._compute, updaters))
        for path, content in results:
            if content is None:
                continue
            changes.add(path, FileChange(content=content, mode=self.config.file_mode))
        return changes

    # Run

    def run(self) -> RunResult:
        """Decide on a release and compute its file changes."""
        self.state = RunState.IDLE

        self._enter(RunState.FETCHING_HISTORY)
        previous = self.find_previous_release()
        commits = self.fetch_commits(previous.sha if previous else None)

        self._enter(RunState.CLASSIFYING)
        classified: list[ClassifiedCommit] = parse_commits(commits, self.config.commits)

        self._enter(RunState.RESOLVING_CANDIDATE)
        candidate = resolve(
            previous.version if previous else None,
            classified,
            self.config.commits,
            self.config.version,
            previous_tag=previous.tag if previous else None,
            initial_version=self.ecosystem.initial_version,
        )
        if self.version_override is not None:
            candidate = self._override(candidate, previous, classified)
        if candidate is None:
            return self._no_release(previous)

        self._enter(RunState.GENERATING_CHANGELOG)
        entry = generate_changelog_entry(
            candidate,
            candidate.previous_tag,
            self.config.repository_url,
            self.config.changelog,
            current_tag=f"{self.config.effective_tag_prefix}{candidate.version}",
            release_date=self.release_date,
        )
        # A heading without sections means no user-facing change.
        if changelog_is_empty(entry) and self.version_override is None:
            return self._no_release(previous)

        self._enter(RunState.LOCATING_MANIFESTS)
        root_content = self.provider.get_file_content(self.ecosystem.manifest_filename)
        targets = locate_manifests(
            root_content,
            self.config.package.name,
            self.ecosystem,
            path=self.config.package.path,
        )

        self._enter(RunState.COMPUTING_UPDATES)
        updaters = self.build_updaters(candidate, entry, targets)
        changes = self.compute_changes(updaters)

        self._enter(RunState.DONE)
        logger.info("Release %s touches %d files", candidate.version, len(changes))
        return RunResult(
            state=RunState.DONE,
            candidate=candidate,
            changelog_entry=entry,
            changes=changes.as_dict(),
        )

    def _override(
        self,
        candidate: ReleaseCandidate | None,
        previous: PreviousRelease | None,
        classified: list[ClassifiedCommit],
    ) -> ReleaseCandidate:
        """Force the release to ``version_override``, even without notable commits.

        Raises:
            VersionError: If the override does not move past the previous release.
        """
        version = self.version_override
        if previous is not None and not version > previous.version:
            raise VersionError(f"Version override {version} is not greater than previous {previous.version}")
        logger.info("Using version override %s", version)
        if candidate is None:
            return ReleaseCandidate(
                version=version,
                previous_tag=previous.tag if previous else None,
                release_notes_commits=select_release_notes_commits(classified, self.config.commits),
            )
        return replace(candidate, version=version)

    def _no_release(self, previous: PreviousRelease | None) -> RunResult:
        self._enter(RunState.NO_RELEASE)
        logger.info(
            "No user facing commits found since %s",
            previous.sha[:7] if previous else "beginning of time",
        )
        return RunResult(state=RunState.NO_RELEASE)

    def release(self, submitter: PatchSubmitter) -> RunResult:
        """Run and, if a release is warranted, propose its changes."""
        result = self.run()
        if result.released:
            result.proposal = submitter.propose_changes(result.changes)
            logger.info("Proposed release %s: %s", result.candidate.version, result.proposal)
        return result
