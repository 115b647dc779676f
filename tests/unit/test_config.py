"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from release_engine.config.loader import (
    extract_tool_config,
    find_config_file,
    load_config,
    load_toml,
)
from release_engine.config.models import (
    ChangelogConfig,
    CommitsConfig,
    PackageConfig,
    ReleaseEngineConfig,
    VersionConfig,
    VersionFileConfig,
)
from release_engine.exceptions import ConfigNotFoundError, ConfigValidationError


def _config(**kwargs) -> ReleaseEngineConfig:
    return ReleaseEngineConfig(package=PackageConfig(name="crate1"), **kwargs)


class TestReleaseEngineConfig:
    """Tests for ReleaseEngineConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = _config()

        assert config.file_mode == "100644"
        assert config.max_workers == 4
        assert config.package.ecosystem == "cargo"
        assert config.changelog.path == Path("CHANGELOG.md")

    def test_nested_defaults(self):
        """Nested configurations have defaults."""
        config = _config()

        assert config.commits.types_minor == ["feat"]
        assert config.commits.types_patch == ["fix", "perf"]
        assert config.commits.split_squashed_headers is False
        assert config.changelog.enabled is True
        assert config.version.initial_version is None
        assert config.version.tag_prefix == "v"

    def test_effective_tag_prefix(self):
        """effective_tag_prefix includes the package name for monorepo tags."""
        assert _config().effective_tag_prefix == "v"

        config = ReleaseEngineConfig(package=PackageConfig(name="crate1", monorepo_tags=True))
        assert config.effective_tag_prefix == "crate1-v"

        config = _config(version=VersionConfig(tag_prefix="release-"))
        assert config.effective_tag_prefix == "release-"

    def test_monorepo_paths(self):
        """Package-relative paths are prefixed with the package directory."""
        config = ReleaseEngineConfig(package=PackageConfig(name="crate1", path="/packages/crate1/"))

        assert config.package.path == "packages/crate1"
        assert config.effective_changelog_path == "packages/crate1/CHANGELOG.md"
        assert config.add_path("src/version.rs") == "packages/crate1/src/version.rs"

    def test_root_package_paths(self):
        for path in (".", "/", ""):
            assert PackageConfig(name="crate1", path=path).path is None

        config = ReleaseEngineConfig(package=PackageConfig(name="crate1", path="."))
        assert config.effective_changelog_path == "CHANGELOG.md"

    def test_repository_url_trailing_slash(self):
        assert _config(repository_url="https://github.com/o/r/").repository_url == "https://github.com/o/r"

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            ReleaseEngineConfig.model_validate({"package": {"name": "a"}, "unknown": 1})

    def test_unknown_ecosystem_rejected(self):
        with pytest.raises(ValidationError):
            PackageConfig(name="a", ecosystem="npm")

    def test_max_workers_positive(self):
        with pytest.raises(ValidationError):
            _config(max_workers=0)


class TestCommitsConfig:
    """Tests for CommitsConfig model."""

    def test_skip_release_patterns(self):
        assert "[skip release]" in CommitsConfig().skip_release_patterns

    def test_notable_types(self):
        assert CommitsConfig().notable_types == ["feat", "fix", "perf", "revert"]


class TestChangelogConfig:
    """Tests for ChangelogConfig model."""

    def test_default_sections(self):
        sections = ChangelogConfig().sections

        assert [s.type for s in sections] == ["breaking", "feat", "fix", "perf", "revert"]
        assert sections[2].title == "Bug Fixes"


class TestVersionConfig:
    """Tests for VersionConfig model."""

    def test_initial_version_validated(self):
        with pytest.raises(ValidationError, match="Invalid semantic version"):
            VersionConfig(initial_version="not-a-version")

    def test_initial_version_accepted(self):
        assert VersionConfig(initial_version="1.0.0").initial_version == "1.0.0"


class TestVersionFileConfig:
    """Tests for VersionFileConfig model."""

    def test_pattern_optional(self):
        assert VersionFileConfig(path="src/pkg/__init__.py").pattern is None

    def test_pattern_with_one_group(self):
        config = VersionFileConfig(path="src/version.rs", pattern=r'VERSION: &str = "([^"]+)"')

        assert config.pattern == r'VERSION: &str = "([^"]+)"'

    @pytest.mark.parametrize("pattern", ["no_group", r"(\d+)\.(\d+)"])
    def test_pattern_group_count(self, pattern):
        with pytest.raises(ValidationError, match="exactly one capture group"):
            VersionFileConfig(path="v.py", pattern=pattern)

    def test_pattern_invalid_regex(self):
        with pytest.raises(ValidationError, match="Invalid regular expression"):
            VersionFileConfig(path="v.py", pattern="version = (")


class TestLoadToml:
    """Tests for load_toml()."""

    def test_load_valid(self, tmp_path: Path):
        path = tmp_path / "release-engine.toml"
        path.write_text('[package]\nname = "crate1"\n')

        assert load_toml(path) == {"package": {"name": "crate1"}}

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            load_toml(tmp_path / "missing.toml")

    def test_load_invalid(self, tmp_path: Path):
        path = tmp_path / "release-engine.toml"
        path.write_text("[package\n")

        with pytest.raises(ConfigValidationError, match="Invalid TOML"):
            load_toml(path)


class TestExtractToolConfig:
    """Tests for extract_tool_config()."""

    def test_extract(self):
        data = {"tool": {"release-engine": {"package": {"name": "a"}}, "ruff": {}}}
        assert extract_tool_config(data) == {"package": {"name": "a"}}

    def test_missing(self):
        assert extract_tool_config({"project": {"name": "a"}}) == {}


class TestFindConfigFile:
    """Tests for find_config_file()."""

    def test_dedicated_file_wins(self, tmp_path: Path):
        (tmp_path / "release-engine.toml").write_text('[package]\nname = "a"\n')
        (tmp_path / "pyproject.toml").write_text('[tool.release-engine.package]\nname = "b"\n')

        assert find_config_file(tmp_path) == (tmp_path / "release-engine.toml").resolve()

    def test_searches_upwards(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[tool.release-engine.package]\nname = "b"\n')
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == (tmp_path / "pyproject.toml").resolve()

    def test_pyproject_without_tool_table_skipped(self, tmp_path: Path):
        (tmp_path / "release-engine.toml").write_text('[package]\nname = "a"\n')
        nested = tmp_path / "sub"
        nested.mkdir()
        (nested / "pyproject.toml").write_text('[project]\nname = "sub"\n')

        assert find_config_file(nested) == (tmp_path / "release-engine.toml").resolve()


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_dedicated(self, tmp_path: Path):
        (tmp_path / "release-engine.toml").write_text(
            'repository_url = "https://github.com/o/r"\n'
            "\n"
            "[package]\n"
            'name = "crate1"\n'
            'path = "packages/crate1"\n'
            "monorepo_tags = true\n"
            "\n"
            "[version]\n"
            "bump_minor_pre_major = true\n"
            "\n"
            "[[version.version_files]]\n"
            'path = "src/version.rs"\n'
            "pattern = 'VERSION: &str = \"([^\"]+)\"'\n"
        )
        config = load_config(tmp_path)

        assert config.package.name == "crate1"
        assert config.effective_tag_prefix == "crate1-v"
        assert config.version.bump_minor_pre_major
        assert config.version.version_files[0].path == "src/version.rs"

    def test_load_from_pyproject(self, tmp_path: Path):
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nname = "pkg-a"\n\n'
            '[tool.release-engine.package]\nname = "pkg-a"\necosystem = "python"\n'
        )
        config = load_config(path)

        assert config.package.ecosystem == "python"

    def test_not_found(self, tmp_path: Path):
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "nowhere")

    def test_validation_error(self, tmp_path: Path):
        (tmp_path / "release-engine.toml").write_text('[package]\nname = "a"\necosystem = "npm"\n')

        with pytest.raises(ConfigValidationError, match="Invalid configuration"):
            load_config(tmp_path)

    def test_bad_version_file_pattern(self, tmp_path: Path):
        """A broken version file pattern is reported when the config loads."""
        (tmp_path / "release-engine.toml").write_text(
            '[package]\nname = "a"\n\n[[version.version_files]]\npath = "v.py"\npattern = "no_group"\n'
        )

        with pytest.raises(ConfigValidationError, match="capture group"):
            load_config(tmp_path)
