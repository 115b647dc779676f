"""Conventional commit classification.

Parses commit messages following the Conventional Commits convention:
https://www.conventionalcommits.org/

Format: <type>[optional scope][!]: <description>

    [optional body]

    [optional footer(s)]

Classification is total: a message that does not follow the convention is
still classified, as ``unrecognized``, and never aborts a run.

Squashed commits carrying several conventional headers are classified by
their first header only. ``CommitsConfig.split_squashed_headers`` opts in to
emitting one extra classification per further header found in the body.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_engine.config.models import CommitsConfig

UNRECOGNIZED = "unrecognized"
# Changelog pseudo-type collecting every breaking commit.
BREAKING_SECTION_TYPE = "breaking"

# type(scope)!: description
COMMIT_PATTERN = re.compile(
    r"^(?P<type>[a-z][a-z0-9_-]*)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r": (?P<description>\S.*)$"
)

# Revert "feat: something" as produced by `git revert`
REVERT_PATTERN = re.compile(r'^Revert "(?P<header>.+)"\s*$')

# Refs: #12, Closes #13, Fixes: owner/repo#14
REFERENCE_FOOTER_PATTERN = re.compile(
    r"^(?:refs?|closes?|fixe[sd]|fix|resolves?)(?P<sep>:\s*|\s+)(?P<value>.+)$",
    re.IGNORECASE | re.MULTILINE,
)
ISSUE_REFERENCE_PATTERN = re.compile(r"(?:[\w.-]+/[\w.-]+)?#\d+")

DEFAULT_BREAKING_PATTERN = r"BREAKING[ -]CHANGE:"


@dataclass(frozen=True)
class Commit:
    """A commit as returned by the SCM provider."""

    sha: str
    message: str
    pull_request: int | None = None
    files: tuple[str, ...] = ()

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()


@dataclass(frozen=True)
class ClassifiedCommit:
    """The semantic reading of one commit message."""

    commit: Commit
    type: str
    description: str
    scope: str | None = None
    breaking: bool = False
    breaking_description: str | None = None
    references: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_conventional(self) -> bool:
        return self.type != UNRECOGNIZED

    @property
    def sha(self) -> str:
        return self.commit.sha

    @classmethod
    def from_commit(
        cls,
        commit: Commit,
        config: CommitsConfig | None = None,
    ) -> ClassifiedCommit:
        """Classify ``commit`` by its first header line."""
        known_types = frozenset(config.types) if config is not None else None
        breaking_pattern = config.breaking_pattern if config is not None else DEFAULT_BREAKING_PATTERN

        header, _, body = commit.message.strip().partition("\n")
        header = header.strip()
        breaking_description = _find_breaking_footer(body, breaking_pattern)
        references = _extract_references(body)

        revert = REVERT_PATTERN.match(header)
        if revert:
            return cls(
                commit=commit,
                type="revert",
                description=revert.group("header"),
                breaking=breaking_description is not None,
                breaking_description=breaking_description,
                references=references,
            )

        match = COMMIT_PATTERN.match(header)
        if not match:
            return cls(
                commit=commit,
                type=UNRECOGNIZED,
                description=commit.message,
                breaking=breaking_description is not None,
                breaking_description=breaking_description,
                references=references,
            )

        commit_type = match.group("type")
        if known_types is not None and commit_type not in known_types:
            commit_type = UNRECOGNIZED
        description = match.group("description").strip()
        bang = match.group("breaking") is not None
        return cls(
            commit=commit,
            type=commit_type,
            description=description,
            scope=match.group("scope") or None,
            breaking=bang or breaking_description is not None,
            breaking_description=breaking_description or (description if bang else None),
            references=references,
        )


def _find_breaking_footer(body: str, pattern: str) -> str | None:
    """Return the text after the breaking change token, or None if absent."""
    match = re.search(pattern, body)
    if not match:
        return None
    rest = body[match.end() :]
    # The footer value runs until the next blank line.
    text = rest.strip().split("\n\n", 1)[0]
    return " ".join(text.split()) or ""


def _extract_references(body: str) -> tuple[str, ...]:
    refs: list[str] = []
    for match in REFERENCE_FOOTER_PATTERN.finditer(body):
        value = match.group("value")
        found = ISSUE_REFERENCE_PATTERN.findall(value)
        if not found and match.group("sep").startswith(":"):
            # Trailer form allows non-issue tokens, e.g. "Refs: JIRA-12".
            found = [token.strip() for token in value.split(",") if token.strip()]
        for ref in found:
            if ref not in refs:
                refs.append(ref)
    return tuple(refs)


def classify(message: str, config: CommitsConfig | None = None) -> ClassifiedCommit:
    """Classify a bare commit message.

    Total and deterministic: the same message always yields an equal result,
    and no message raises.
    """
    return ClassifiedCommit.from_commit(Commit(sha="", message=message), config)


def classify_commit(commit: Commit, config: CommitsConfig | None = None) -> ClassifiedCommit:
    """Classify a commit fetched from the SCM provider."""
    return ClassifiedCommit.from_commit(commit, config)


def _squashed_headers(commit: Commit, config: CommitsConfig) -> list[ClassifiedCommit]:
    """Classify the extra conventional headers found in a commit body."""
    extra: list[ClassifiedCommit] = []
    lines = commit.message.strip().split("\n")[1:]
    for line in lines:
        line = line.strip().lstrip("*- ").strip()
        if not COMMIT_PATTERN.match(line):
            continue
        classified = ClassifiedCommit.from_commit(
            Commit(commit.sha, line, commit.pull_request, commit.files), config
        )
        if classified.is_conventional:
            extra.append(classified)
    return extra


def parse_commits(commits: Iterable[Commit], config: CommitsConfig) -> list[ClassifiedCommit]:
    """Classify commits, preserving their order.

    Yields exactly one classification per commit unless
    ``config.split_squashed_headers`` is set, in which case the extra headers
    of squashed commits follow their commit's own classification.
    """
    parsed: list[ClassifiedCommit] = []
    for commit in commits:
        parsed.append(ClassifiedCommit.from_commit(commit, config))
        if config.split_squashed_headers:
            parsed.extend(_squashed_headers(commit, config))
    return parsed


def filter_skip_release_commits(commits: Iterable[Commit], patterns: list[str]) -> list[Commit]:
    """Drop commits whose message contains a skip marker (case-insensitive)."""
    if not patterns:
        return list(commits)
    lowered = [p.lower() for p in patterns]
    return [c for c in commits if not any(p in c.message.lower() for p in lowered)]


def group_commits_by_type(commits: Iterable[ClassifiedCommit]) -> dict[str, list[ClassifiedCommit]]:
    """Group classified commits by type, keeping order within each group."""
    grouped: dict[str, list[ClassifiedCommit]] = {}
    for cc in commits:
        grouped.setdefault(cc.type, []).append(cc)
    return grouped


def get_breaking_changes(commits: Iterable[ClassifiedCommit]) -> list[ClassifiedCommit]:
    return [cc for cc in commits if cc.breaking]
