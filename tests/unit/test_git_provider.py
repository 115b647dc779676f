"""Tests for the git command line provider, against real temporary repositories."""

from __future__ import annotations

import shutil

import pytest

from release_engine.exceptions import ProviderError
from release_engine.scm import GitProvider, SCMProvider

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class TestGitProvider:
    """Tests for GitProvider."""

    def test_is_provider(self, git_repo):
        assert isinstance(GitProvider(git_repo.path), SCMProvider)

    def test_no_tags(self, git_repo):
        git_repo.commit("feat: first", {"a.txt": "a"})

        assert GitProvider(git_repo.path).get_latest_tag("v") is None

    def test_latest_tag_by_version(self, git_repo):
        """Tags sort by version, not lexically."""
        first = git_repo.commit("feat: first", {"a.txt": "a"})
        git_repo.git("tag", "v0.2.0")
        second = git_repo.commit("feat: second", {"a.txt": "b"})
        git_repo.git("tag", "v0.10.0")
        git_repo.git("tag", "crate1-v9.0.0", first)

        tag = GitProvider(git_repo.path).get_latest_tag("v")

        assert tag.name == "v0.10.0"
        assert tag.sha == second

    def test_release_outranks_its_prerelease(self, git_repo):
        """A final release is newer than the release candidate before it."""
        git_repo.commit("feat: a", {"a.txt": "a"})
        git_repo.git("tag", "v1.0.0-rc.1")
        release_sha = git_repo.commit("fix: b", {"a.txt": "b"})
        git_repo.git("tag", "v1.0.0")
        git_repo.commit("fix: c", {"a.txt": "c"})
        provider = GitProvider(git_repo.path)

        tag = provider.get_latest_tag("v")

        assert tag.name == "v1.0.0"
        assert tag.sha == release_sha
        assert [c.subject for c in provider.get_commits(tag.sha)] == ["fix: c"]

    def test_non_version_tags_ignored(self, git_repo):
        git_repo.commit("feat: a", {"a.txt": "a"})
        git_repo.git("tag", "v1.2.0")
        git_repo.commit("feat: b", {"a.txt": "b"})
        git_repo.git("tag", "very-latest")

        assert GitProvider(git_repo.path).get_latest_tag("v").name == "v1.2.0"

    def test_only_unparsable_tags(self, git_repo):
        git_repo.commit("feat: a", {"a.txt": "a"})
        git_repo.git("tag", "vnext")

        assert GitProvider(git_repo.path).get_latest_tag("v") is None

    def test_latest_tag_with_component_prefix(self, git_repo):
        sha = git_repo.commit("feat: first", {"a.txt": "a"})
        git_repo.git("tag", "-a", "crate1-v0.2.0", "-m", "release")
        git_repo.commit("feat: second", {"a.txt": "b"})
        git_repo.git("tag", "v1.0.0")

        tag = GitProvider(git_repo.path).get_latest_tag("crate1-v")

        assert tag.name == "crate1-v0.2.0"
        # Annotated tags resolve to their commit.
        assert tag.sha == sha

    def test_commits_since_tag(self, git_repo):
        git_repo.commit("chore: init", {"a.txt": "a"})
        tag_sha = git_repo.commit("chore: release 0.1.0", {"a.txt": "b"})
        git_repo.commit("fix: bug\n\nCloses #12", {"src/lib.rs": "fn a() {}"})
        git_repo.commit("feat: thing", {"src/lib.rs": "fn b() {}", "README.md": "x"})

        commits = list(GitProvider(git_repo.path).get_commits(tag_sha))

        assert [c.subject for c in commits] == ["feat: thing", "fix: bug"]
        assert commits[1].message == "fix: bug\n\nCloses #12"
        assert set(commits[0].files) == {"README.md", "src/lib.rs"}
        assert len(commits[0].sha) == 40

    def test_full_history_is_paged(self, git_repo):
        for i in range(5):
            git_repo.commit(f"fix: change {i}", {"a.txt": str(i)})

        commits = list(GitProvider(git_repo.path, page_size=2).get_commits())

        assert [c.subject for c in commits] == [f"fix: change {i}" for i in reversed(range(5))]

    def test_commits_scoped_by_path(self, git_repo):
        git_repo.commit("feat(crate1): a", {"packages/crate1/src/lib.rs": "a"})
        git_repo.commit("feat(crate2): b", {"packages/crate2/src/lib.rs": "b"})

        commits = list(GitProvider(git_repo.path).get_commits(path="packages/crate1"))

        assert [c.subject for c in commits] == ["feat(crate1): a"]

    def test_file_content(self, git_repo):
        git_repo.commit("feat: first", {"Cargo.toml": '[package]\nname = "a"\n'})
        provider = GitProvider(git_repo.path)

        assert provider.get_file_content("Cargo.toml") == '[package]\nname = "a"\n'
        assert provider.get_file_content("missing/Cargo.toml") is None

    def test_no_pull_requests(self, git_repo):
        assert GitProvider(git_repo.path).list_merged_pull_requests() == []

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(ProviderError) as exc_info:
            GitProvider(tmp_path).get_latest_tag("v")

        assert exc_info.value.stderr
