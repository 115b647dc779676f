"""Semantic version parsing and bumping.

Precedence rules (prerelease comparison, build metadata ignored) are
delegated to the ``semver`` library; this module adds the bump vocabulary
the resolver works with.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

import semver

from release_engine.exceptions import VersionError

# "1" or "1.2", optionally followed by prerelease/build metadata.
_SHORT_CORE_RE = re.compile(r"^(\d+(?:\.\d+)?)((?:[-+].*)?)$")


class BumpType(str, Enum):
    """Kinds of version increment, strongest first."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


# Lower index wins when commits disagree.
BUMP_PRECEDENCE: list[BumpType] = [
    BumpType.MAJOR,
    BumpType.MINOR,
    BumpType.PATCH,
    BumpType.NONE,
]


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the stronger of two bumps."""
    return BUMP_PRECEDENCE[min(BUMP_PRECEDENCE.index(a), BUMP_PRECEDENCE.index(b))]


@dataclass(frozen=True)
class Version:
    """A semantic version.

    Equality is structural; ordering follows semver precedence, so
    ``1.0.0+build.1`` and ``1.0.0`` neither sort before nor after each other.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @classmethod
    def parse(cls, version_str: str) -> Version:
        """Parse ``1.2.3``, ``1.2.3-rc.1`` or ``1.2.3+build``.

        A leading ``v`` is accepted. Incomplete versions are padded the way
        ``1.2`` → ``1.2.0``.

        Raises:
            VersionError: If the string is not a semantic version.
        """
        text = version_str.strip()
        if text[:1] in ("v", "V"):
            text = text[1:]
        short = _SHORT_CORE_RE.match(text)
        if short:
            parts = short.group(1).split(".")
            parts += ["0"] * (3 - len(parts))
            text = ".".join(parts) + short.group(2)
        try:
            parsed = semver.Version.parse(text)
        except (ValueError, TypeError) as e:
            raise VersionError(f"Invalid semantic version: {version_str!r}") from e
        return cls(
            major=parsed.major,
            minor=parsed.minor,
            patch=parsed.patch,
            prerelease=parsed.prerelease,
            build=parsed.build,
        )

    def _semver(self) -> semver.Version:
        return semver.Version(self.major, self.minor, self.patch, self.prerelease, self.build)

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for ``bump_type``.

        Lower components are reset and prerelease/build metadata dropped.
        The bump always applies to the core version, even for a prerelease:
        ``1.0.0-rc.1`` bumps to ``1.0.1`` on a patch, not to ``1.0.0``.
        Finalizing a prerelease takes an explicit version override.
        ``BumpType.NONE`` returns the version unchanged.
        """
        if bump_type is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type is BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def with_prerelease(self, identifier: str) -> Version:
        """Attach a prerelease identifier, e.g. ``rc`` → ``1.2.0-rc.1``."""
        token = identifier if any(ch.isdigit() for ch in identifier) else f"{identifier}.1"
        return Version(self.major, self.minor, self.patch, token)

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def __str__(self) -> str:
        return str(self._semver())

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._semver().compare(other._semver()) < 0

    def __le__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._semver().compare(other._semver()) <= 0

    def __gt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._semver().compare(other._semver()) > 0

    def __ge__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._semver().compare(other._semver()) >= 0


def parse_version(version_str: str) -> Version:
    """Shorthand for :meth:`Version.parse`."""
    return Version.parse(version_str)


def version_from_tag(tag_name: str, prefix: str = "v") -> Version:
    """Extract the version from a tag such as ``v1.2.3`` or ``crate1-v1.2.3``.

    Raises:
        VersionError: If the tag does not carry ``prefix`` or a valid version.
    """
    if prefix and not tag_name.startswith(prefix):
        raise VersionError(f"Tag {tag_name!r} does not start with {prefix!r}")
    return Version.parse(tag_name[len(prefix) :])
