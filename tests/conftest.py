"""Shared fixtures for release-engine tests."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator, Mapping
from datetime import date
from pathlib import Path

import pytest

from release_engine.config.models import PackageConfig, ReleaseEngineConfig
from release_engine.core.commits import Commit
from release_engine.scm.base import MergedPullRequest, Tag

REPO_URL = "https://github.com/fake-owner/fake-repo"
RELEASE_DATE = date(2024, 1, 15)


class FakeProvider:
    """In-memory SCMProvider.

    ``commits`` are newest first. History is served in pages of ``page_size``
    to exercise callers that must keep pulling until exhaustion.
    """

    def __init__(
        self,
        commits: list[Commit] | None = None,
        tags: list[Tag] | None = None,
        files: dict[str, str] | None = None,
        pull_requests: list[MergedPullRequest] | None = None,
        page_size: int = 2,
    ) -> None:
        self.commits = commits or []
        self.tags = tags or []
        self.files = files or {}
        self.pull_requests = pull_requests or []
        self.page_size = page_size
        self.pages_served = 0
        self.requested_paths: list[str] = []

    def get_latest_tag(self, prefix: str | None = None) -> Tag | None:
        for tag in self.tags:
            if tag.name.startswith(prefix or ""):
                return tag
        return None

    def _history(self, since_sha: str | None, path: str | None) -> list[Commit]:
        history = []
        for commit in self.commits:
            if commit.sha == since_sha:
                break
            if path and not any(f.startswith(f"{path}/") for f in commit.files):
                continue
            history.append(commit)
        return history

    def get_commits(self, since_sha: str | None = None, path: str | None = None) -> Iterator[Commit]:
        history = self._history(since_sha, path)
        for start in range(0, len(history), self.page_size):
            self.pages_served += 1
            yield from history[start : start + self.page_size]

    def get_file_content(self, path: str, ref: str | None = None) -> str | None:
        self.requested_paths.append(path)
        return self.files.get(path)

    def list_merged_pull_requests(self) -> list[MergedPullRequest]:
        return list(self.pull_requests)


class RecordingSubmitter:
    """PatchSubmitter that keeps what it was asked to propose."""

    def __init__(self) -> None:
        self.proposals: list[dict] = []

    def propose_changes(self, changes: Mapping) -> str:
        self.proposals.append(dict(changes))
        return f"proposal-{len(self.proposals)}"


def make_commit(sha: str, message: str, *files: str) -> Commit:
    """Build a commit with a padded 40-character sha."""
    return Commit(sha=sha.ljust(40, "0"), message=message, files=tuple(files))


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo handlers and levels installed by CLI invocations."""
    yield
    logger = logging.getLogger("release_engine")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def provider_factory() -> type[FakeProvider]:
    return FakeProvider


@pytest.fixture
def commit_factory():
    return make_commit


@pytest.fixture
def release_date() -> date:
    return RELEASE_DATE


@pytest.fixture
def submitter() -> RecordingSubmitter:
    return RecordingSubmitter()


@pytest.fixture
def cargo_config() -> ReleaseEngineConfig:
    """Single crate at the repository root."""
    return ReleaseEngineConfig(
        package=PackageConfig(name="rust-test-repo", ecosystem="cargo"),
        repository_url=REPO_URL,
    )


@pytest.fixture
def workspace_config() -> ReleaseEngineConfig:
    """Crate ``crate1`` living in ``packages/crate1`` of a Cargo workspace."""
    return ReleaseEngineConfig(
        package=PackageConfig(
            name="crate1",
            path="packages/crate1",
            ecosystem="cargo",
            monorepo_tags=True,
        ),
        repository_url=REPO_URL,
    )


class GitRepo:
    """Minimal helper driving git in a temporary directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.git("init", "-q")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, message: str, files: dict[str, str]) -> str:
        for name, content in files.items():
            target = self.path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
            self.git("add", name)
        self.git("commit", "-q", "-m", message)
        return self.git("rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GitRepo:
    """An empty git repository with a committer identity."""
    for var in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
        monkeypatch.setenv(var, "Test")
    for var in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
        monkeypatch.setenv(var, "test@test.com")
    return GitRepo(tmp_path)
