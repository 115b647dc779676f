"""Exception hierarchy for release-engine.

Every error raised on purpose by the engine derives from
``ReleaseEngineError`` so callers can separate expected failures from bugs.

"Nothing to release" is deliberately *not* an exception; see
``release_engine.orchestrator.RunState.NO_RELEASE``.
"""

from __future__ import annotations


class ReleaseEngineError(Exception):
    """Base class for all release-engine errors."""


# Configuration


class ConfigError(ReleaseEngineError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No configuration file was found."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# Versions


class VersionError(ReleaseEngineError):
    """A version string is invalid or a bump would not move forward."""


# Project files


class ProjectError(ReleaseEngineError):
    """A project file could not be read or updated."""


class ManifestMalformedError(ProjectError):
    """A manifest exists but cannot be parsed.

    Fatal for the whole run: proposing a partial release risks shipping
    inconsistent versions across workspace members.
    """

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Malformed manifest {path}: {detail}")
        self.path = path
        self.detail = detail


class VersionNotFoundError(ProjectError):
    """The version field or pattern could not be located in a file."""


class UpdateConflictError(ReleaseEngineError):
    """Two update operations target the same path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Conflicting updates for {path}: each path may only be updated once")
        self.path = path


# Collaborators


class ProviderError(ReleaseEngineError):
    """The SCM provider failed (command error, missing repository, ...)."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base
