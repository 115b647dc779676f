"""release-engine: conventional-commit driven release proposals.

Decides whether a package needs a release, picks the next semantic version,
renders the changelog entry and computes the manifest updates, leaving the
actual submission to a pluggable patch submitter.
"""

from __future__ import annotations

from release_engine.config import ReleaseEngineConfig, load_config
from release_engine.exceptions import ReleaseEngineError
from release_engine.orchestrator import ReleaseOrchestrator, RunResult, RunState

__version__ = "0.1.0"

__all__ = [
    "ReleaseEngineConfig",
    "ReleaseEngineError",
    "ReleaseOrchestrator",
    "RunResult",
    "RunState",
    "__version__",
    "load_config",
]
