"""Regex based version stamp updater."""

from __future__ import annotations

import re
from dataclasses import dataclass

from release_engine.exceptions import VersionNotFoundError
from release_engine.updaters.base import UpdateKind

# Match __version__ = "..." or __version__ = '...'
DEFAULT_VERSION_PATTERN = r"""^__version__\s*=\s*["']([^"']+)["']"""
DEFAULT_TEMPLATE = '__version__ = "{version}"\n'


@dataclass(frozen=True)
class GenericTextUpdater:
    """Replaces the first capture group of ``pattern`` with ``version``.

    Suited to version constants in source files. The pattern is applied in
    multiline mode and must contain exactly one capture group.
    """

    path: str
    version: str
    pattern: str = DEFAULT_VERSION_PATTERN
    template: str = DEFAULT_TEMPLATE
    kind: UpdateKind = UpdateKind.GENERIC

    def __post_init__(self) -> None:
        if re.compile(self.pattern).groups != 1:
            raise ValueError(f"Version pattern for {self.path} must have exactly one capture group")

    def compute_new_content(self, old_content: str | None) -> str:
        if old_content is None:
            return self.template.format(version=self.version)

        match = re.search(self.pattern, old_content, re.MULTILINE)
        if match is None:
            raise VersionNotFoundError(f"Could not find version pattern in {self.path}")
        if match.group(1) == self.version:
            return old_content
        start, end = match.span(1)
        return old_content[:start] + self.version + old_content[end:]
