"""Local git repository provider.

Implements ``SCMProvider`` on top of the ``git`` command line. History is
read in pages so long histories are never loaded in one go.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path

from release_engine.core.commits import Commit
from release_engine.core.version import Version, version_from_tag
from release_engine.exceptions import ProviderError, VersionError
from release_engine.scm.base import MergedPullRequest, Tag

logger = logging.getLogger(__name__)

# Record / field separators for `git log --format`
_RS = "\x1e"
_FS = "\x1f"

DEFAULT_PAGE_SIZE = 100


class GitProvider:
    """Reads tags, commits and files from a local git checkout."""

    def __init__(self, path: Path, *, ref: str = "HEAD", page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.path = path
        self.ref = ref
        self.page_size = page_size

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise ProviderError("git not found. Install git and make sure it is on PATH") from e
        if check and result.returncode != 0:
            raise ProviderError(
                f"git {' '.join(args)} failed with exit code {result.returncode}",
                stderr=result.stderr,
            )
        return result

    def get_latest_tag(self, prefix: str | None = None) -> Tag | None:
        """Return the highest-versioned tag reachable from ``ref``.

        Tags are ranked by semver precedence, so ``v1.0.0`` wins over
        ``v1.0.0-rc.1``. Tags that do not parse as a version are skipped.
        """
        prefix = prefix or ""
        output = self._git("tag", "--list", f"{prefix}*", "--merged", self.ref).stdout
        candidates: list[tuple[Version, str]] = []
        for name in (line.strip() for line in output.splitlines()):
            if not name:
                continue
            try:
                candidates.append((version_from_tag(name, prefix), name))
            except VersionError:
                logger.debug("Skipping tag %s: not a semantic version", name)
        if not candidates:
            logger.debug("No version tags matching %s*", prefix)
            return None
        _, name = max(candidates, key=lambda item: item[0])
        sha = self._git("rev-list", "-n", "1", name).stdout.strip()
        return Tag(name=name, sha=sha)

    def _log_page(self, revision: str, path: str | None, skip: int) -> list[Commit]:
        args = [
            "log",
            f"--format={_RS}%H{_FS}%B{_FS}",
            "--name-only",
            f"--skip={skip}",
            f"--max-count={self.page_size}",
            revision,
        ]
        if path:
            args += ["--", path]
        output = self._git(*args).stdout

        commits: list[Commit] = []
        for record in output.split(_RS):
            if not record.strip():
                continue
            sha, message, files = (record.split(_FS) + ["", ""])[:3]
            commits.append(
                Commit(
                    sha=sha.strip(),
                    message=message.strip(),
                    files=tuple(f for f in files.strip().splitlines() if f.strip()),
                )
            )
        return commits

    def get_commits(self, since_sha: str | None = None, path: str | None = None) -> Iterator[Commit]:
        revision = f"{since_sha}..{self.ref}" if since_sha else self.ref
        skip = 0
        while True:
            page = self._log_page(revision, path, skip)
            logger.debug("Fetched %d commits (skip=%d)", len(page), skip)
            yield from page
            if len(page) < self.page_size:
                return
            skip += len(page)

    def get_file_content(self, path: str, ref: str | None = None) -> str | None:
        spec = f"{ref or self.ref}:{path}"
        if self._git("cat-file", "-e", spec, check=False).returncode != 0:
            return None
        return self._git("show", spec).stdout

    def list_merged_pull_requests(self) -> list[MergedPullRequest]:
        # Plain git has no pull request metadata.
        return []
