"""Changelog entry generation.

Renders the release notes commits of a candidate into a markdown section:

    ## [1.1.0](https://github.com/o/r/compare/v1.0.0...v1.1.0) (2024-01-01)


    ### Features

    - **api:** add pagination ([abc1234](https://github.com/o/r/commit/abc1234...))

Rendering is pure: the release date is an input, so identical inputs give
byte-identical output.
"""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING

from release_engine.core.commits import (
    BREAKING_SECTION_TYPE,
    ClassifiedCommit,
    get_breaking_changes,
    group_commits_by_type,
)
from release_engine.core.version import BumpType

if TYPE_CHECKING:
    from release_engine.config.models import ChangelogConfig
    from release_engine.core.candidate import ReleaseCandidate

SECTION_HEADING_PREFIX = "### "
_ISSUE_NUMBER = re.compile(r"^#(\d+)$")


def format_commit_for_changelog(cc: ClassifiedCommit, repository_url: str, *, breaking: bool = False) -> str:
    """Format one changelog bullet.

    In the breaking changes section the breaking change footer text is shown
    instead of the header description, when present.
    """
    description = cc.description
    if breaking and cc.breaking_description:
        description = cc.breaking_description
    scope = f"**{cc.scope}:** " if cc.scope else ""
    line = f"- {scope}{description}"
    if cc.sha:
        line += f" ({_commit_link(cc, repository_url)})"
    issues = [_issue_link(ref, repository_url) for ref in cc.references if _ISSUE_NUMBER.match(ref)]
    if issues:
        line += ", closes " + ", ".join(issues)
    return line


def _commit_link(cc: ClassifiedCommit, repository_url: str) -> str:
    short = cc.commit.short_sha
    if not repository_url:
        return short
    return f"[{short}]({repository_url}/commit/{cc.sha})"


def _issue_link(ref: str, repository_url: str) -> str:
    if not repository_url:
        return ref
    number = ref.lstrip("#")
    return f"[{ref}]({repository_url}/issues/{number})"


def format_heading(
    candidate: ReleaseCandidate,
    previous_tag: str | None,
    repository_url: str,
    current_tag: str,
    release_date: date,
) -> str:
    """Version heading; patch releases use a smaller heading level."""
    level = "###" if candidate.bump is BumpType.PATCH else "##"
    version = str(candidate.version)
    if previous_tag and repository_url:
        title = f"[{version}]({repository_url}/compare/{previous_tag}...{current_tag})"
    else:
        title = version
    return f"{level} {title} ({release_date.isoformat()})"


def generate_changelog_entry(
    candidate: ReleaseCandidate,
    previous_tag: str | None,
    repository_url: str,
    config: ChangelogConfig,
    *,
    current_tag: str | None = None,
    release_date: date | None = None,
) -> str:
    """Render the changelog entry for ``candidate``.

    Args:
        candidate: The resolved release.
        previous_tag: Tag of the previous release; without one the heading
            has no compare link.
        repository_url: Base URL used for compare, commit and issue links.
        config: Section titles and order.
        current_tag: Tag the release will get (defaults to ``v<version>``).
        release_date: Date shown in the heading. Defaults to today, so output
            only repeats byte for byte when the date is passed in.

    Returns:
        The entry text. It contains only the heading when no commit maps to a
        configured section; see :func:`changelog_is_empty`.
    """
    current_tag = current_tag or f"v{candidate.version}"
    release_date = release_date or date.today()

    lines = [format_heading(candidate, previous_tag, repository_url, current_tag, release_date), ""]

    notes = candidate.release_notes_commits
    by_type = group_commits_by_type(notes)
    for section in config.sections:
        if section.type == BREAKING_SECTION_TYPE:
            entries = [
                format_commit_for_changelog(cc, repository_url, breaking=True)
                for cc in get_breaking_changes(notes)
            ]
        else:
            entries = [format_commit_for_changelog(cc, repository_url) for cc in by_type.get(section.type, [])]
        if not entries:
            continue
        lines += ["", f"{SECTION_HEADING_PREFIX}{section.title}", "", *entries]

    return "\n".join(lines).rstrip("\n") + "\n"


def changelog_is_empty(entry: str) -> bool:
    """True when an entry has no section, i.e. nothing release-worthy."""
    return not any(line.startswith(SECTION_HEADING_PREFIX) for line in entry.splitlines()[1:])
