"""Changelog file updater."""

from __future__ import annotations

import re
from dataclasses import dataclass

from release_engine.updaters.base import UpdateKind

DEFAULT_HEADER = "# Changelog"


@dataclass(frozen=True)
class ChangelogUpdater:
    """Inserts a release entry directly below the changelog's top-level heading.

    Prior entries below the insertion point are kept unchanged. A missing
    file, or one without a top-level heading, gets ``header`` prepended.
    """

    path: str
    entry: str
    version: str
    header: str = DEFAULT_HEADER
    kind: UpdateKind = UpdateKind.CHANGELOG

    def _already_released(self, content: str) -> bool:
        # "## [1.2.3](...)", "### 1.2.3 (...)" or "## v1.2.3"
        pattern = rf"^#{{2,3}} \[?v?{re.escape(self.version)}[\]\s(]"
        return self.entry.strip() in content or re.search(pattern, content, re.MULTILINE) is not None

    def compute_new_content(self, old_content: str | None) -> str:
        entry = self.entry.strip("\n")
        if not old_content or not old_content.strip():
            return f"{self.header}\n\n{entry}\n"
        if self._already_released(old_content):
            return old_content

        heading = re.search(r"^# .*$", old_content, re.MULTILINE)
        if heading is None:
            return f"{self.header}\n\n{entry}\n\n{old_content.lstrip()}"

        before = old_content[: heading.end()]
        after = old_content[heading.end() :].lstrip("\n")
        if not after:
            return f"{before}\n\n{entry}\n"
        return f"{before}\n\n{entry}\n\n{after}"
