"""Patch submitter writing changes into a working tree."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_engine.updaters.base import FileChange

logger = logging.getLogger(__name__)


class LocalPatchSubmitter:
    """Writes every change below ``root`` and reports the written paths."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def propose_changes(self, changes: Mapping[str, FileChange]) -> str:
        written: list[str] = []
        for rel_path, change in sorted(changes.items()):
            target = self.root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(change.content, encoding="utf-8")
            if change.mode == "100755":
                os.chmod(target, 0o755)
            logger.debug("Wrote %s", rel_path)
            written.append(rel_path)
        return ", ".join(written)
